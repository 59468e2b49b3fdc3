"""Annotation tag scanner.

Turns the comment block above a controller (or the comments of the main API
file) into an ordered list of ``Annotation`` entries. Ordinary commentary is
ignored; only lines starting with a recognized ``@Tag`` survive.

    # @Title getWidget
    # @Description fetch one widget
    # @Param   id  path  int  true  "Widget ID"
    # @Success 200 {object} Widget
    # @Failure 404 {object} ApiError "widget not found"
    # @Router  /widgets/{id} [get]
"""

import re
from dataclasses import dataclass

from swaggerlite.errors import AnnotationError

CONTROLLER_TAGS = (
    "Title",
    "Description",
    "Summary",
    "Notes",
    "Accept",
    "Produce",
    "Param",
    "Success",
    "Failure",
    "Router",
    "Resource",
    "SubApi",
)

GENERAL_TAGS = (
    "APIVersion",
    "APITitle",
    "APIDescription",
    "Contact",
    "TermsOfServiceUrl",
    "License",
    "LicenseUrl",
    "BasePath",
)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

PARAM_LOCATIONS = ("path", "query", "body", "header", "form")

MIME_TYPES = {
    "json": "application/json",
    "xml": "text/xml",
    "plain": "text/plain",
    "html": "text/html",
    "mpfd": "multipart/form-data",
    "x-www-form-urlencoded": "application/x-www-form-urlencoded",
    "json-api": "application/vnd.api+json",
    "json-stream": "application/x-json-stream",
    "octet-stream": "application/octet-stream",
    "png": "image/png",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
}

_TAG_LINE = re.compile(r"^\s*(?:#+|//+)?\s*@(?P<tag>[A-Za-z]+)(?:\s+(?P<value>.*?))?\s*$")
_ROUTE = re.compile(r"^(?P<path>/\S*)(?:\s+\[(?P<method>[A-Za-z]+)\])?$")
_SUB_API = re.compile(r"^(?P<description>.*?)\s*(?:\[(?P<path>[^\]]*)\])?$")
_CODE = re.compile(r"^\d{3}$")


@dataclass(frozen=True)
class Annotation:
    """One recognized tag line; ``line`` is 1-based within the scanned text."""

    tag: str
    value: str
    line: int


@dataclass(frozen=True)
class ParamSpec:
    name: str
    location: str
    type_expr: str
    required: bool
    description: str = ""


@dataclass(frozen=True)
class ResponseSpec:
    code: int
    type_expr: str | None = None
    message: str = ""


def scan_comment(text: str, tags: tuple[str, ...] = CONTROLLER_TAGS + GENERAL_TAGS) -> list[Annotation]:
    """Return the recognized tag lines of ``text`` in source order."""
    annotations = []
    for number, line in enumerate(text.splitlines(), start=1):
        match = _TAG_LINE.match(line)
        if not match or match.group("tag") not in tags:
            continue
        annotations.append(Annotation(match.group("tag"), match.group("value") or "", number))
    return annotations


def split_fields(value: str) -> list[str]:
    """Split on whitespace, keeping quoted text and bracketed type expressions whole."""
    fields: list[str] = []
    current = ""
    depth = 0
    quoted = False
    for char in value:
        if quoted:
            current += char
            if char == '"':
                quoted = False
            continue
        if char == '"' and not current:
            quoted = True
            current = char
            continue
        if char in "[(":
            depth += 1
        elif char in "])":
            depth = max(depth - 1, 0)
        if char.isspace() and depth == 0:
            if current:
                fields.append(current)
                current = ""
            continue
        current += char
    if quoted:
        raise ValueError("unterminated quote")
    if current:
        fields.append(current)
    return fields


def _unquote(fields: list[str]) -> str:
    text = " ".join(fields)
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def _fields(annotation_tag: str, value: str) -> list[str]:
    try:
        return split_fields(value)
    except ValueError as exc:
        raise AnnotationError(annotation_tag, value, str(exc)) from exc


def parse_route(value: str) -> tuple[str, str]:
    """Parse ``/widgets/{id} [get]`` into ``("/widgets/{id}", "GET")``."""
    match = _ROUTE.match(value.strip())
    if not match:
        raise AnnotationError("Router", value, "expected '<path> [<method>]'")
    method = (match.group("method") or "get").upper()
    if method not in HTTP_METHODS:
        raise AnnotationError("Router", value, f"unknown HTTP method {method}")
    return match.group("path"), method


def parse_param(value: str) -> ParamSpec:
    """Parse ``<name> <location> <type> <required> ["description"]``."""
    fields = _fields("Param", value)
    if len(fields) < 4:
        raise AnnotationError("Param", value, "expected '<name> <location> <type> <required> [\"description\"]'")
    name, location, type_expr, required = fields[:4]
    if location not in PARAM_LOCATIONS:
        raise AnnotationError("Param", value, f"unknown location {location!r}")
    if required.lower() not in ("true", "false"):
        raise AnnotationError("Param", value, f"required must be true or false, got {required!r}")
    return ParamSpec(
        name=name,
        location=location,
        type_expr=type_expr,
        required=required.lower() == "true",
        description=_unquote(fields[4:]),
    )


def parse_response(tag: str, value: str) -> ResponseSpec:
    """Parse ``<code> [{object|array}] [type] ["message"]``."""
    fields = _fields(tag, value)
    if not fields or not _CODE.match(fields[0]):
        raise AnnotationError(tag, value, "expected a three digit status code")
    code = int(fields[0])
    rest = fields[1:]

    container = None
    if rest and rest[0].startswith("{"):
        container = rest.pop(0)
        if container not in ("{object}", "{array}"):
            raise AnnotationError(tag, value, f"unknown container {container}")
        if not rest or rest[0].startswith('"'):
            raise AnnotationError(tag, value, f"{container} needs a type")

    type_expr = None
    if container:
        type_expr = rest.pop(0)
        if container == "{array}":
            type_expr = f"list[{type_expr}]"
    return ResponseSpec(code=code, type_expr=type_expr, message=_unquote(rest))


def parse_sub_api(value: str) -> tuple[str, str]:
    """Parse ``Widget management [/widgets]`` into description and resource."""
    match = _SUB_API.match(value.strip())
    description = match.group("description").strip()
    path = match.group("path")
    if path is not None:
        path = path.strip().strip("/") or None
    if path is None:
        raise AnnotationError("SubApi", value, "expected '<description> [<path>]'")
    return description, path


def parse_mime_types(value: str) -> list[str]:
    """Expand ``json, xml`` into full mime types."""
    names = [name for name in re.split(r"[\s,]+", value.strip()) if name]
    return [MIME_TYPES.get(name, name) for name in names]
