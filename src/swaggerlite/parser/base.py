"""Data models for extracted API documentation.

The walker produces ``Operation`` and ``Model`` objects; the aggregator
groups them into one ``ResourceListing`` plus an ``ApiDeclaration`` per
resource. Serializers in ``swaggerlite.generator`` render these models.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

PRIMITIVES = ("string", "integer", "number", "boolean")


class PrimitiveType(BaseModel):
    """A Swagger primitive: string / integer / number / boolean."""

    kind: Literal["primitive"] = "primitive"
    name: str


class ModelRef(BaseModel):
    """Reference by name to an entry in the model registry."""

    kind: Literal["ref"] = "ref"
    name: str


class ContainerType(BaseModel):
    """An array (``list[X]``) or a string-keyed map (``dict[str, X]``)."""

    kind: Literal["container"] = "container"
    container: Literal["array", "object"]
    items: "TypeRef"


TypeRef = Annotated[Union[PrimitiveType, ModelRef, ContainerType], Field(discriminator="kind")]

ContainerType.model_rebuild()


def primitive(name: str) -> PrimitiveType:
    return PrimitiveType(name=name)


def array_of(items: TypeRef) -> ContainerType:
    return ContainerType(container="array", items=items)


def map_of(items: TypeRef) -> ContainerType:
    return ContainerType(container="object", items=items)


def iter_model_refs(type_ref: TypeRef | None):
    """Yield the names of every model referenced by ``type_ref``."""
    while isinstance(type_ref, ContainerType):
        type_ref = type_ref.items
    if isinstance(type_ref, ModelRef):
        yield type_ref.name


def describe_type(type_ref: TypeRef | None) -> str:
    """Short human-readable form, e.g. ``array[Widget]``."""
    if type_ref is None:
        return "void"
    if isinstance(type_ref, ContainerType):
        return f"{type_ref.container}[{describe_type(type_ref.items)}]"
    return type_ref.name


class Property(BaseModel):
    """A single exported field of a model."""

    name: str
    type: TypeRef
    required: bool = False
    description: str = ""


class Model(BaseModel):
    """A named structured type referenced by parameters or responses."""

    name: str
    properties: list[Property] = []


class Parameter(BaseModel):
    """A single operation parameter."""

    name: str
    location: str  # path / query / body / header / form
    type: TypeRef
    required: bool
    description: str = ""


class ResponseMessage(BaseModel):
    """One ``@Success`` / ``@Failure`` line of a controller."""

    code: int
    message: str = ""
    type: TypeRef | None = None


class Operation(BaseModel):
    """One annotated controller function."""

    method: str  # GET / POST / PUT / DELETE / PATCH ...
    path: str  # /widgets/{id}
    nickname: str = ""
    summary: str = ""
    notes: str = ""
    parameters: list[Parameter] = []
    responses: list[ResponseMessage] = []
    type: TypeRef | None = None
    consumes: list[str] = []
    produces: list[str] = []
    resource: str | None = None  # explicit @Resource grouping
    function: str = ""  # module.function that declared the operation

    def referenced_types(self) -> list[TypeRef]:
        types: list[TypeRef] = [p.type for p in self.parameters]
        types.extend(r.type for r in self.responses if r.type is not None)
        if self.type is not None:
            types.append(self.type)
        return types


class GeneralInfo(BaseModel):
    """API-wide metadata read from the main API file."""

    api_version: str = ""
    base_path: str = ""
    title: str = ""
    description: str = ""
    contact: str = ""
    terms_of_service_url: str = ""
    license: str = ""
    license_url: str = ""


class ApiInfo(BaseModel):
    """The ``info`` block of a resource listing."""

    title: str = ""
    description: str = ""
    contact: str = ""
    terms_of_service_url: str = ""
    license: str = ""
    license_url: str = ""


class ApiRef(BaseModel):
    """Pointer from the resource listing to one resource's declaration."""

    path: str
    description: str = ""


class ResourceListing(BaseModel):
    """Top-level document listing every resource."""

    api_version: str = ""
    swagger_version: str = "1.2"
    base_path: str = ""
    apis: list[ApiRef] = []
    info: ApiInfo = Field(default_factory=ApiInfo)


class ApiDeclaration(BaseModel):
    """Per-resource document: its operations and the models they reference."""

    api_version: str = ""
    swagger_version: str = "1.2"
    base_path: str = ""
    resource_path: str
    operations: list[Operation] = []
    models: dict[str, Model] = {}


class Document(BaseModel):
    """The two output structures of a successful run."""

    listing: ResourceListing
    declarations: dict[str, ApiDeclaration] = {}
