"""Groups walked operations into per-resource API declarations."""

from typing import Mapping, Sequence

from swaggerlite.errors import UnresolvedModelError
from swaggerlite.parser.base import (
    ApiDeclaration,
    ApiInfo,
    ApiRef,
    Document,
    GeneralInfo,
    Operation,
    ResourceListing,
)
from swaggerlite.parser.registry import ModelRegistry

ROOT_RESOURCE = "root"


def resource_of(operation: Operation) -> str:
    """``@Resource`` if given, otherwise the first segment of the route."""
    if operation.resource:
        return operation.resource
    segments = [segment for segment in operation.path.split("/") if segment]
    return segments[0] if segments else ROOT_RESOURCE


def group_operations(operations: Sequence[Operation]) -> dict[str, list[Operation]]:
    """Resource -> operations, resources sorted, operations in discovery order."""
    groups: dict[str, list[Operation]] = {}
    for operation in operations:
        groups.setdefault(resource_of(operation), []).append(operation)
    return {resource: groups[resource] for resource in sorted(groups)}


def aggregate(
    operations: Sequence[Operation],
    info: GeneralInfo,
    registry: ModelRegistry,
    descriptions: Mapping[str, str] | None = None,
) -> Document:
    """Build the resource listing and one declaration per resource."""
    descriptions = descriptions or {}
    declarations: dict[str, ApiDeclaration] = {}

    for resource, grouped in group_operations(operations).items():
        type_refs = [type_ref for operation in grouped for type_ref in operation.referenced_types()]
        models, missing = registry.closure(type_refs)
        if missing:
            raise UnresolvedModelError(missing, resource)
        declarations[resource] = ApiDeclaration(
            api_version=info.api_version,
            base_path=info.base_path,
            resource_path=f"/{resource}",
            operations=grouped,
            models=models,
        )

    listing = ResourceListing(
        api_version=info.api_version,
        base_path=info.base_path,
        apis=[ApiRef(path=resource, description=descriptions.get(resource, "")) for resource in declarations],
        info=ApiInfo(
            title=info.title,
            description=info.description,
            contact=info.contact,
            terms_of_service_url=info.terms_of_service_url,
            license=info.license,
            license_url=info.license_url,
        ),
    )
    return Document(listing=listing, declarations=declarations)
