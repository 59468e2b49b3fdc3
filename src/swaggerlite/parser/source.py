"""Locating and indexing Python source modules.

Modules are parsed with ``ast`` and never imported: the scanned program is
only read. ``tokenize`` recovers the comments that ``ast`` drops.
"""

import ast
import io
import tokenize
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from swaggerlite.errors import SourceParseError
from swaggerlite.log import get_logger

logger = get_logger("source")

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef

_TYPE_ALIAS = getattr(ast, "TypeAlias", None)  # ``type X = ...`` (Python 3.12+)


@dataclass
class Symbol:
    """What a name used in a type expression refers to."""

    kind: str  # class / alias / module / external
    name: str  # fully qualified
    module: "SourceModule | None" = None
    node: ast.AST | None = None


@dataclass
class SourceModule:
    """One parsed ``.py`` file with its module-level declarations indexed."""

    name: str
    path: Path
    is_package: bool
    tree: ast.Module
    comments: dict[int, str] = field(default_factory=dict)  # full-line comments
    inline_comments: dict[int, str] = field(default_factory=dict)
    classes: dict[str, ast.ClassDef] = field(default_factory=dict)
    aliases: dict[str, ast.expr] = field(default_factory=dict)
    imports: dict[str, tuple[str, str | None]] = field(default_factory=dict)
    star_imports: list[str] = field(default_factory=list)
    import_targets: list[tuple[str, bool]] = field(default_factory=list)
    functions: list[FunctionNode] = field(default_factory=list)

    @property
    def package(self) -> str:
        return self.name if self.is_package else self.name.rpartition(".")[0]

    def comment_block(self, node: ast.AST) -> str:
        """Contiguous full-line comments directly above ``node`` or its decorators."""
        start = min([node.lineno] + [d.lineno for d in getattr(node, "decorator_list", [])])
        block = []
        line = start - 1
        while line in self.comments:
            block.append(self.comments[line])
            line -= 1
        return "\n".join(reversed(block))

    def comment_text(self) -> str:
        return "\n".join(self.comments[line] for line in sorted(self.comments))

    def inline_comment(self, line: int) -> str:
        return self.inline_comments.get(line, "").lstrip("#").strip()


def read_comments(source: str) -> tuple[dict[int, str], dict[int, str]]:
    """Split comments into full-line and trailing ones, keyed by line number."""
    full: dict[int, str] = {}
    inline: dict[int, str] = {}
    lines = source.splitlines()
    for token in tokenize.generate_tokens(io.StringIO(source).readline):
        if token.type != tokenize.COMMENT:
            continue
        row, col = token.start
        if lines[row - 1][:col].strip():
            inline[row] = token.string
        else:
            full[row] = token.string
    return full, inline


def dotted_name(node: ast.AST) -> str | None:
    """``a.b.C`` for Name/Attribute chains, None for anything else."""
    parts = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))


def normalize_package(package: str) -> str:
    """Accept ``shop/api``, ``shop.api`` and ``shop/api/`` alike."""
    return package.strip().strip("/").replace("/", ".")


def parse_module(name: str, path: Path, is_package: bool, source: str) -> SourceModule:
    try:
        tree = ast.parse(source, filename=str(path))
        full, inline = read_comments(source)
    except (SyntaxError, tokenize.TokenError) as exc:
        raise SourceParseError(str(path), str(exc)) from exc

    module = SourceModule(
        name=name, path=path, is_package=is_package, tree=tree, comments=full, inline_comments=inline
    )
    _index(module, tree.body)
    return module


def _index(module: SourceModule, body: list[ast.stmt]) -> None:
    for node in body:
        if isinstance(node, ast.ClassDef):
            module.classes[node.name] = node
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            module.functions.append(node)
        elif isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    module.imports[alias.asname] = (alias.name, None)
                else:
                    top = alias.name.split(".")[0]
                    module.imports[top] = (top, None)
                module.import_targets.append((alias.name, True))
        elif isinstance(node, ast.ImportFrom):
            base = _absolute(module, node.module, node.level)
            module.import_targets.append((base, True))
            for alias in node.names:
                if alias.name == "*":
                    module.star_imports.append(base)
                    continue
                module.imports[alias.asname or alias.name] = (base, alias.name)
                module.import_targets.append((f"{base}.{alias.name}", False))
        elif isinstance(node, ast.Assign):
            if len(node.targets) == 1 and isinstance(node.targets[0], ast.Name):
                value = _alias_value(node.value)
                if value is not None:
                    module.aliases[node.targets[0].id] = value
        elif isinstance(node, ast.AnnAssign):
            if (
                isinstance(node.target, ast.Name)
                and node.value is not None
                and (dotted_name(node.annotation) or "").endswith("TypeAlias")
            ):
                module.aliases[node.target.id] = node.value
        elif _TYPE_ALIAS is not None and isinstance(node, _TYPE_ALIAS):
            module.aliases[node.name.id] = node.value
        elif isinstance(node, ast.If) and (dotted_name(node.test) or "").endswith("TYPE_CHECKING"):
            _index(module, node.body)


def _alias_value(value: ast.expr) -> ast.expr | None:
    if isinstance(value, (ast.Name, ast.Attribute, ast.Subscript)):
        return value
    if isinstance(value, ast.BinOp) and isinstance(value.op, ast.BitOr):
        return value
    if isinstance(value, ast.Call) and (dotted_name(value.func) or "").endswith("NewType"):
        if len(value.args) == 2:
            return value.args[1]
    return None


def _absolute(module: SourceModule, name: str | None, level: int) -> str:
    if level == 0:
        return name or ""
    parts = module.package.split(".") if module.package else []
    if level > 1:
        parts = parts[: len(parts) - (level - 1)]
    if name:
        parts.append(name)
    return ".".join(parts)


class SourceLoader:
    """Finds modules under an ordered list of search roots and caches them."""

    def __init__(self, roots: Sequence[Path]):
        self.roots = [Path(root) for root in roots]
        self._modules: dict[str, SourceModule | None] = {}

    def find_package(self, package: str) -> Path | None:
        parts = normalize_package(package).split(".")
        for root in self.roots:
            candidate = root.joinpath(*parts)
            if candidate.is_dir():
                return candidate
        return None

    def find_module(self, name: str) -> tuple[Path, bool] | None:
        """Return the file (or namespace directory) for a dotted module name."""
        if not name:
            return None
        parts = name.split(".")
        for root in self.roots:
            base = root.joinpath(*parts)
            if (base / "__init__.py").is_file():
                return base / "__init__.py", True
            module_file = base.parent / f"{base.name}.py"
            if module_file.is_file():
                return module_file, False
            if base.is_dir():
                return base, True
        return None

    def load_module(self, name: str) -> SourceModule | None:
        if name in self._modules:
            return self._modules[name]
        found = self.find_module(name)
        module = None
        if found is not None:
            path, is_package = found
            if path.is_dir():
                module = parse_module(name, path, True, "")
            else:
                module = self._parse_file(name, path, is_package)
        self._modules[name] = module
        return module

    def load_package(self, package: str) -> list[SourceModule]:
        """Every module file of one package directory, sorted by file name."""
        dotted = normalize_package(package)
        directory = self.find_package(dotted)
        if directory is None:
            return []
        modules = []
        for path in sorted(directory.glob("*.py")):
            name = dotted if path.stem == "__init__" else f"{dotted}.{path.stem}"
            module = self.load_module(name)
            if module is not None:
                modules.append(module)
        return modules

    def _parse_file(self, name: str, path: Path, is_package: bool) -> SourceModule:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceParseError(str(path), str(exc)) from exc
        logger.debug(f"Parsing {name} from {path}")
        return parse_module(name, path, is_package, source)

    def is_local(self, name: str) -> bool:
        """True when the top-level package of ``name`` lives under a search root."""
        return self.find_module(name.split(".")[0]) is not None

    def lookup(self, module: SourceModule, dotted: str) -> Symbol | None:
        """Resolve a (possibly dotted) name as seen from ``module``."""
        return self._lookup(module, dotted.split("."), set())

    def _lookup(self, module: SourceModule, parts: list[str], seen: set) -> Symbol | None:
        key = (module.name, ".".join(parts))
        if key in seen:
            return None
        seen.add(key)

        head, rest = parts[0], parts[1:]
        if not rest and head in module.classes:
            return Symbol("class", f"{module.name}.{head}", module, module.classes[head])
        if not rest and head in module.aliases:
            return Symbol("alias", f"{module.name}.{head}", module, module.aliases[head])
        if head in module.imports:
            target, attribute = module.imports[head]
            return self._qualified(target, [attribute] + rest if attribute else rest, seen)
        for star in module.star_imports:
            found = self._qualified(star, parts, seen)
            if found is not None and found.kind != "external":
                return found
        return None

    def _qualified(self, target: str, parts: list[str], seen: set) -> Symbol | None:
        if not parts:
            return Symbol("module", target)
        source = self.load_module(target) if self.is_local(target) else None
        if source is None:
            return Symbol("external", ".".join([target] + parts))
        submodule = f"{target}.{parts[0]}"
        if self.find_module(submodule) is not None:
            return self._qualified(submodule, parts[1:], seen)
        return self._lookup(source, parts, seen)
