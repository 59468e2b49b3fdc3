"""Type resolver: Python type expressions -> Swagger type references.

Rules, in order of precedence:

* names in the alias table resolve to their configured primitive
* module-level type aliases are followed
* classes declared in scanned modules become models (or primitives for enums)
* builtin scalars map to string / integer / number / boolean
* ``Optional``, ``Annotated`` and ``X | None`` unwrap to X
* sequences become arrays, mappings become objects keyed by string

Anything else is a ``TypeResolutionError``.
"""

import ast
from typing import Mapping

from swaggerlite.errors import TypeResolutionError
from swaggerlite.parser.base import ModelRef, Property, TypeRef, array_of, map_of, primitive
from swaggerlite.parser.registry import ModelRegistry
from swaggerlite.parser.source import SourceLoader, SourceModule, dotted_name

BUILTIN_PRIMITIVES = {
    "str": "string",
    "bytes": "string",
    "bytearray": "string",
    "int": "integer",
    "float": "number",
    "bool": "boolean",
}

SEQUENCE_TYPES = {
    "list", "List", "Sequence", "MutableSequence", "Iterable", "Iterator", "Collection",
    "set", "Set", "frozenset", "FrozenSet", "AbstractSet", "MutableSet", "deque", "Deque",
}
MAPPING_TYPES = {"dict", "Dict", "Mapping", "MutableMapping", "OrderedDict", "DefaultDict", "defaultdict"}
WRAPPER_TYPES = {"Annotated", "Required", "NotRequired", "ReadOnly", "Final"}
ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
SKIPPED_FIELD_TYPES = {"ClassVar", "InitVar"}


def _bare(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _is_none(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and node.value is None


def _subscript_args(node: ast.Subscript) -> list[ast.expr]:
    if isinstance(node.slice, ast.Tuple):
        return list(node.slice.elts)
    return [node.slice]


def _union_members(node: ast.BinOp) -> list[ast.expr]:
    members = []
    for side in (node.left, node.right):
        if isinstance(side, ast.BinOp) and isinstance(side.op, ast.BitOr):
            members.extend(_union_members(side))
        else:
            members.append(side)
    return members


class TypeResolver:
    """Resolves type expressions as seen from a scanned module."""

    def __init__(self, loader: SourceLoader, registry: ModelRegistry, aliases: Mapping[str, str] | None = None):
        self.loader = loader
        self.registry = registry
        self.aliases = dict(aliases or {})

    def resolve_text(self, text: str, module: SourceModule, declaration: str, _aliases: frozenset = frozenset()) -> TypeRef:
        """Resolve a type written inside an annotation tag, e.g. ``list[Widget]``."""
        try:
            node = ast.parse(text.strip(), mode="eval").body
        except SyntaxError as exc:
            raise TypeResolutionError(text, declaration, "not a type expression") from exc
        return self.resolve(node, module, declaration, _aliases)

    def resolve(self, node: ast.expr, module: SourceModule, declaration: str, _aliases: frozenset = frozenset()) -> TypeRef:
        # String forward references, e.g. ``Optional["Node"]``.
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            return self.resolve_text(node.value, module, declaration, _aliases)
        if isinstance(node, (ast.Name, ast.Attribute)):
            name = dotted_name(node)
            if name is None:
                raise TypeResolutionError(ast.unparse(node), declaration)
            return self._resolve_name(name, module, declaration, _aliases)
        if isinstance(node, ast.Subscript):
            return self._resolve_generic(node, module, declaration, _aliases)
        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            return self._resolve_union(_union_members(node), node, module, declaration, _aliases)
        raise TypeResolutionError(ast.unparse(node), declaration)

    def _origin(self, node: ast.expr, module: SourceModule) -> str:
        name = dotted_name(node) or ""
        symbol = self.loader.lookup(module, name) if name else None
        if symbol is not None and symbol.kind == "external":
            return _bare(symbol.name)
        return _bare(name)

    def _resolve_name(self, name: str, module: SourceModule, declaration: str, seen: frozenset) -> TypeRef:
        bare = _bare(name)
        if bare in self.aliases:
            return primitive(self.aliases[bare])

        symbol = self.loader.lookup(module, name)
        if symbol is not None:
            if symbol.kind == "class":
                return self._resolve_class(symbol.module, symbol.node, declaration)
            if symbol.kind == "alias":
                if symbol.name in seen:
                    raise TypeResolutionError(name, declaration, "type alias refers to itself")
                return self.resolve(symbol.node, symbol.module, declaration, seen | {symbol.name})
            if symbol.kind == "external":
                bare = _bare(symbol.name)
                if bare in self.aliases:
                    return primitive(self.aliases[bare])

        if bare in BUILTIN_PRIMITIVES and (symbol is None or symbol.kind == "external"):
            return primitive(BUILTIN_PRIMITIVES[bare])
        raise TypeResolutionError(name, declaration)

    def _resolve_generic(self, node: ast.Subscript, module: SourceModule, declaration: str, seen: frozenset) -> TypeRef:
        origin = self._origin(node.value, module)
        args = _subscript_args(node)

        if origin == "Optional":
            return self.resolve(args[0], module, declaration, seen)
        if origin == "Union":
            return self._resolve_union(args, node, module, declaration, seen)
        if origin in WRAPPER_TYPES:
            return self.resolve(args[0], module, declaration, seen)
        if origin in SEQUENCE_TYPES:
            return array_of(self.resolve(args[0], module, declaration, seen))
        if origin in ("tuple", "Tuple"):
            if len(args) == 2 and isinstance(args[1], ast.Constant) and args[1].value is Ellipsis:
                return array_of(self.resolve(args[0], module, declaration, seen))
            items = [self.resolve(arg, module, declaration, seen) for arg in args]
            if items and all(item == items[0] for item in items):
                return array_of(items[0])
            raise TypeResolutionError(ast.unparse(node), declaration, "tuples must be homogeneous")
        if origin in MAPPING_TYPES:
            return map_of(self.resolve(args[-1], module, declaration, seen))
        if origin == "Literal":
            return self._resolve_literal(args, node, declaration)

        # A generic class declared in the scanned sources, e.g. Page[Widget].
        name = dotted_name(node.value)
        symbol = self.loader.lookup(module, name) if name else None
        if symbol is not None and symbol.kind == "class":
            return self._resolve_class(symbol.module, symbol.node, declaration)
        raise TypeResolutionError(ast.unparse(node), declaration)

    def _resolve_union(self, members: list[ast.expr], node: ast.expr, module: SourceModule, declaration: str, seen: frozenset) -> TypeRef:
        present = [member for member in members if not _is_none(member)]
        if len(present) != 1:
            raise TypeResolutionError(ast.unparse(node), declaration, "only X | None unions are supported")
        return self.resolve(present[0], module, declaration, seen)

    @staticmethod
    def _resolve_literal(args: list[ast.expr], node: ast.expr, declaration: str) -> TypeRef:
        values = [arg.value for arg in args if isinstance(arg, ast.Constant)]
        if not values or len(values) != len(args):
            raise TypeResolutionError(ast.unparse(node), declaration, "literal values must be constants")
        if all(isinstance(value, bool) for value in values):
            return primitive("boolean")
        if all(isinstance(value, int) and not isinstance(value, bool) for value in values):
            return primitive("integer")
        if all(isinstance(value, str) for value in values):
            return primitive("string")
        raise TypeResolutionError(ast.unparse(node), declaration, "mixed literal types")

    def _resolve_class(self, module: SourceModule, cls: ast.ClassDef, declaration: str) -> TypeRef:
        enum_type = self._enum_type(module, cls)
        if enum_type is not None:
            return primitive(enum_type)
        if cls.name in self.registry:
            return ModelRef(name=cls.name)

        model = self.registry.reserve(cls.name)
        model.properties.extend(self._properties(module, cls, set()))
        return ModelRef(name=cls.name)

    def _properties(self, module: SourceModule, cls: ast.ClassDef, lineage: set) -> list[Property]:
        """Exported annotated fields; fields of scanned base classes come first."""
        lineage = lineage | {(module.name, cls.name)}
        properties: dict[str, Property] = {}

        for base in cls.bases:
            target = base.value if isinstance(base, ast.Subscript) else base
            name = dotted_name(target)
            symbol = self.loader.lookup(module, name) if name else None
            if symbol is None or symbol.kind != "class":
                continue
            if (symbol.module.name, symbol.node.name) in lineage:
                continue
            for prop in self._properties(symbol.module, symbol.node, lineage):
                properties[prop.name] = prop

        for stmt in cls.body:
            if not isinstance(stmt, ast.AnnAssign) or not isinstance(stmt.target, ast.Name):
                continue
            field_name = stmt.target.id
            if field_name.startswith("_") or self._is_skipped(stmt.annotation, module):
                continue
            properties[field_name] = Property(
                name=field_name,
                type=self.resolve(stmt.annotation, module, f"{module.name}.{cls.name}.{field_name}"),
                required=not self._is_optional(stmt.annotation, module) and not _has_default(stmt.value),
                description=_field_description(stmt.value) or module.inline_comment(stmt.lineno),
            )
        return list(properties.values())

    def _is_skipped(self, annotation: ast.expr, module: SourceModule) -> bool:
        target = annotation.value if isinstance(annotation, ast.Subscript) else annotation
        return self._origin(target, module) in SKIPPED_FIELD_TYPES

    def _is_optional(self, annotation: ast.expr, module: SourceModule) -> bool:
        if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
            try:
                annotation = ast.parse(annotation.value, mode="eval").body
            except SyntaxError:
                return False
        if isinstance(annotation, ast.BinOp) and isinstance(annotation.op, ast.BitOr):
            return any(_is_none(member) for member in _union_members(annotation))
        if isinstance(annotation, ast.Subscript):
            origin = self._origin(annotation.value, module)
            args = _subscript_args(annotation)
            if origin in ("Optional", "NotRequired"):
                return True
            if origin == "Union":
                return any(_is_none(arg) for arg in args)
            if origin in WRAPPER_TYPES:
                return self._is_optional(args[0], module)
        return False

    def _enum_type(self, module: SourceModule, cls: ast.ClassDef) -> str | None:
        bases = {self._origin(base, module) for base in cls.bases}
        if not bases & ENUM_BASES:
            return None
        if bases & {"IntEnum", "IntFlag", "Flag", "int"}:
            return "integer"
        if bases & {"StrEnum", "str"}:
            return "string"
        values = [
            stmt.value.value
            for stmt in cls.body
            if isinstance(stmt, ast.Assign) and isinstance(stmt.value, ast.Constant)
        ]
        if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return "integer"
        return "string"


def _is_field_call(value: ast.expr | None) -> bool:
    return isinstance(value, ast.Call) and _bare(dotted_name(value.func) or "") in ("Field", "field")


def _has_default(value: ast.expr | None) -> bool:
    if value is None:
        return False
    if not _is_field_call(value):
        return True
    keywords = {keyword.arg for keyword in value.keywords}
    if keywords & {"default", "default_factory"}:
        return True
    if value.args:
        first = value.args[0]
        return not (isinstance(first, ast.Constant) and first.value is Ellipsis)
    return False


def _field_description(value: ast.expr | None) -> str:
    if not _is_field_call(value):
        return ""
    for keyword in value.keywords:
        if keyword.arg == "description" and isinstance(keyword.value, ast.Constant):
            return str(keyword.value.value)
    return ""
