"""Swagger 1.2 document rendering and reading.

``document_to_dict`` produces the JSON object graph served to Swagger UI;
``load_document`` reads it back (from JSON or YAML) into the data models.
"""

import json
from pathlib import Path

import yaml

from swaggerlite.parser.base import (
    PRIMITIVES,
    ApiDeclaration,
    ApiInfo,
    ApiRef,
    ContainerType,
    Document,
    Model,
    ModelRef,
    Operation,
    Parameter,
    PrimitiveType,
    Property,
    ResourceListing,
    ResponseMessage,
    TypeRef,
    array_of,
    map_of,
    primitive,
)


def dump_type(type_ref: TypeRef | None, in_property: bool = False) -> dict:
    """Swagger type fields; properties and container items use ``$ref`` for models."""
    if type_ref is None:
        return {"type": "void"}
    if isinstance(type_ref, PrimitiveType):
        return {"type": type_ref.name}
    if isinstance(type_ref, ModelRef):
        return {"$ref": type_ref.name} if in_property else {"type": type_ref.name}
    if type_ref.container == "array":
        return {"type": "array", "items": dump_type(type_ref.items, in_property=True)}
    return {"type": "object", "additionalProperties": dump_type(type_ref.items, in_property=True)}


def _innermost(type_ref: TypeRef) -> TypeRef:
    while isinstance(type_ref, ContainerType):
        type_ref = type_ref.items
    return type_ref


def dump_listing(listing: ResourceListing) -> dict:
    return {
        "apiVersion": listing.api_version,
        "swaggerVersion": listing.swagger_version,
        "basePath": listing.base_path,
        "apis": [{"path": f"/{ref.path}", "description": ref.description} for ref in listing.apis],
        "info": {
            "title": listing.info.title,
            "description": listing.info.description,
            "contact": listing.info.contact,
            "termsOfServiceUrl": listing.info.terms_of_service_url,
            "license": listing.info.license,
            "licenseUrl": listing.info.license_url,
        },
    }


def _dump_operation(operation: Operation) -> dict:
    data = {
        "method": operation.method,
        "nickname": operation.nickname,
        "summary": operation.summary,
        **dump_type(operation.type),
        "parameters": [
            {
                "paramType": param.location,
                "name": param.name,
                "description": param.description,
                "required": param.required,
                "allowMultiple": False,
                **dump_type(param.type),
            }
            for param in operation.parameters
        ],
        "responseMessages": [_dump_response(response) for response in operation.responses],
    }
    if operation.notes:
        data["notes"] = operation.notes
    if operation.consumes:
        data["consumes"] = operation.consumes
    if operation.produces:
        data["produces"] = operation.produces
    return data


def _dump_response(response: ResponseMessage) -> dict:
    data = {"code": response.code, "message": response.message}
    if response.type is not None:
        data["responseModel"] = _innermost(response.type).name
    return data


def _dump_model(model: Model) -> dict:
    properties = {}
    for prop in model.properties:
        properties[prop.name] = dump_type(prop.type, in_property=True)
        if prop.description:
            properties[prop.name]["description"] = prop.description
    return {
        "id": model.name,
        "required": [prop.name for prop in model.properties if prop.required],
        "properties": properties,
    }


def dump_declaration(declaration: ApiDeclaration) -> dict:
    apis: dict[str, dict] = {}
    for operation in declaration.operations:
        api = apis.setdefault(operation.path, {"path": operation.path, "description": "", "operations": []})
        api["operations"].append(_dump_operation(operation))
    return {
        "apiVersion": declaration.api_version,
        "swaggerVersion": declaration.swagger_version,
        "basePath": declaration.base_path,
        "resourcePath": declaration.resource_path,
        "apis": list(apis.values()),
        "models": {name: _dump_model(model) for name, model in declaration.models.items()},
    }


def document_to_dict(document: Document) -> dict:
    return {
        "resourceListing": dump_listing(document.listing),
        "apiDeclarations": {
            resource: dump_declaration(declaration) for resource, declaration in document.declarations.items()
        },
    }


def to_json(document: Document) -> str:
    return json.dumps(document_to_dict(document), indent=4, ensure_ascii=False) + "\n"


def to_yaml(document: Document) -> str:
    return yaml.safe_dump(document_to_dict(document), sort_keys=False, allow_unicode=True)


# Reading documents back


def load_type(data: dict) -> TypeRef | None:
    if "$ref" in data:
        return ModelRef(name=data["$ref"])
    kind = data.get("type", "void")
    if kind == "void":
        return None
    if kind == "array":
        return array_of(load_type(data.get("items", {})))
    if kind == "object" and "additionalProperties" in data:
        return map_of(load_type(data["additionalProperties"]))
    if kind in PRIMITIVES:
        return primitive(kind)
    return ModelRef(name=kind)


def _load_response(data: dict) -> ResponseMessage:
    name = data.get("responseModel")
    type_ref = None
    if name:
        type_ref = primitive(name) if name in PRIMITIVES else ModelRef(name=name)
    return ResponseMessage(code=int(data["code"]), message=data.get("message", ""), type=type_ref)


def _load_operation(path: str, data: dict) -> Operation:
    return Operation(
        method=data["method"].upper(),
        path=path,
        nickname=data.get("nickname", ""),
        summary=data.get("summary", ""),
        notes=data.get("notes", ""),
        type=load_type(data),
        parameters=[
            Parameter(
                name=p["name"],
                location=p.get("paramType", "query"),
                type=load_type(p),
                required=p.get("required", False),
                description=p.get("description", ""),
            )
            for p in data.get("parameters", [])
        ],
        responses=[_load_response(r) for r in data.get("responseMessages", [])],
        consumes=data.get("consumes", []),
        produces=data.get("produces", []),
    )


def _load_model(name: str, data: dict) -> Model:
    required = set(data.get("required", []))
    return Model(
        name=data.get("id", name),
        properties=[
            Property(
                name=prop_name,
                type=load_type(prop),
                required=prop_name in required,
                description=prop.get("description", ""),
            )
            for prop_name, prop in data.get("properties", {}).items()
        ],
    )


def load_declaration(data: dict) -> ApiDeclaration:
    return ApiDeclaration(
        api_version=data.get("apiVersion", ""),
        swagger_version=data.get("swaggerVersion", "1.2"),
        base_path=data.get("basePath", ""),
        resource_path=data["resourcePath"],
        operations=[
            _load_operation(api["path"], operation)
            for api in data.get("apis", [])
            for operation in api.get("operations", [])
        ],
        models={name: _load_model(name, model) for name, model in data.get("models", {}).items()},
    )


def load_listing(data: dict) -> ResourceListing:
    info = data.get("info", {})
    return ResourceListing(
        api_version=data.get("apiVersion", ""),
        swagger_version=data.get("swaggerVersion", "1.2"),
        base_path=data.get("basePath", ""),
        apis=[ApiRef(path=api["path"].strip("/"), description=api.get("description", "")) for api in data.get("apis", [])],
        info=ApiInfo(
            title=info.get("title", ""),
            description=info.get("description", ""),
            contact=info.get("contact", ""),
            terms_of_service_url=info.get("termsOfServiceUrl", ""),
            license=info.get("license", ""),
            license_url=info.get("licenseUrl", ""),
        ),
    )


def load_document(data: dict) -> Document:
    return Document(
        listing=load_listing(data["resourceListing"]),
        declarations={
            resource: load_declaration(declaration)
            for resource, declaration in data.get("apiDeclarations", {}).items()
        },
    )


def read_document(file_path: Path) -> Document:
    """Read a document written by ``to_json`` or ``to_yaml``."""
    text = file_path.read_text(encoding="utf-8")
    return load_document(yaml.safe_load(text))
