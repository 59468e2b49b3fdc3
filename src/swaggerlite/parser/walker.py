"""Package walker: finds annotated controllers and builds operations."""

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Sequence

from swaggerlite.errors import AnnotationError, PackageNotFoundError
from swaggerlite.log import get_logger
from swaggerlite.parser.annotations import (
    Annotation,
    parse_mime_types,
    parse_param,
    parse_response,
    parse_route,
    parse_sub_api,
    scan_comment,
)
from swaggerlite.parser.base import Operation, Parameter, ResponseMessage
from swaggerlite.parser.source import FunctionNode, SourceLoader, SourceModule, normalize_package
from swaggerlite.parser.types import TypeResolver

logger = get_logger("walker")

ControllerPredicate = Callable[[FunctionNode], bool]


def is_controller(declaration: FunctionNode) -> bool:
    """Default predicate: every module-level function may be a controller."""
    return True


@dataclass
class WalkResult:
    """Operations in discovery order, resource descriptions and warnings."""

    operations: list[Operation] = field(default_factory=list)
    descriptions: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


class PackageWalker:
    """Walks API packages depth first: package -> module -> function."""

    def __init__(
        self,
        loader: SourceLoader,
        resolver: TypeResolver,
        exclusions: Sequence[str] = (),
        is_controller: ControllerPredicate = is_controller,
    ):
        self.loader = loader
        self.resolver = resolver
        self.exclusions = [normalize_package(name) for name in exclusions if name.strip()]
        self.is_controller = is_controller
        self._visited: set[str] = set()

    def is_excluded(self, package: str) -> bool:
        name = normalize_package(package)
        return any(name == excluded or name.startswith(excluded + ".") for excluded in self.exclusions)

    def walk(self, packages: Sequence[str]) -> WalkResult:
        result = WalkResult()
        self._visited = set()
        for package in packages:
            if package.strip():
                self._walk_package(package, result)
        return result

    def _walk_package(self, package: str, result: WalkResult) -> None:
        if self.loader.find_package(package) is None:
            self._missing(package, result)
            return

        logger.info(f"Parsing package {normalize_package(package)}")
        modules = self.loader.load_package(package)
        for module in modules:
            self._follow_imports(module, result)
        for module in modules:
            self._collect_descriptions(module, result)
            for function in module.functions:
                if not self.is_controller(function):
                    continue
                annotations = scan_comment(module.comment_block(function))
                operation = self._build_operation(module, function, annotations, result)
                if operation is not None:
                    result.operations.append(operation)

    def _missing(self, package: str, result: WalkResult) -> None:
        if self.is_excluded(package):
            result.warn(f"Package {package} not found, skipped (on the exclusion list)")
            return
        raise PackageNotFoundError(package, [str(root) for root in self.loader.roots])

    def _follow_imports(self, module: SourceModule, result: WalkResult) -> None:
        """Load every module reachable through imports, failing on missing local ones.

        An import is local when its top-level package lives under a search root;
        anything else (stdlib, installed or not) is left alone.
        """
        pending = deque([module])
        while pending:
            current = pending.popleft()
            for target, required in current.import_targets:
                if not target or target in self._visited:
                    continue
                self._visited.add(target)
                found = self.loader.load_module(target)
                if found is not None:
                    pending.append(found)
                elif required and self.loader.is_local(target):
                    self._missing(target, result)

    def _collect_descriptions(self, module: SourceModule, result: WalkResult) -> None:
        for annotation in scan_comment(module.comment_text(), ("SubApi",)):
            try:
                description, resource = parse_sub_api(annotation.value)
            except AnnotationError as exc:
                result.warn(f"{module.name}: {exc}")
                continue
            result.descriptions.setdefault(resource, description)

    def _build_operation(
        self, module: SourceModule, function: FunctionNode, annotations: list[Annotation], result: WalkResult
    ) -> Operation | None:
        declaration = f"{module.name}.{function.name}"
        routes = [annotation for annotation in annotations if annotation.tag == "Router"]
        if not routes:
            logger.debug(f"{declaration} has no @Router, skipped")
            return None

        try:
            path, method = parse_route(routes[0].value)
        except AnnotationError as exc:
            result.warn(f"{declaration}: {exc}")
            return None
        if len(routes) > 1:
            result.warn(f"{declaration}: more than one @Router, using {method} {path}")

        operation = Operation(method=method, path=path, nickname=function.name, function=declaration)
        for annotation in annotations:
            try:
                self._apply(operation, annotation, module, declaration)
            except AnnotationError as exc:
                result.warn(f"{declaration}: {exc}")

        for response in operation.responses:
            if 200 <= response.code < 300 and response.type is not None:
                operation.type = response.type
                break
        return operation

    def _apply(self, operation: Operation, annotation: Annotation, module: SourceModule, declaration: str) -> None:
        tag, value = annotation.tag, annotation.value
        if tag == "Title":
            operation.nickname = value or operation.nickname
        elif tag in ("Description", "Summary"):
            operation.summary = " ".join(filter(None, [operation.summary, value]))
        elif tag == "Notes":
            operation.notes = " ".join(filter(None, [operation.notes, value]))
        elif tag == "Accept":
            operation.consumes.extend(parse_mime_types(value))
        elif tag == "Produce":
            operation.produces.extend(parse_mime_types(value))
        elif tag == "Resource":
            resource = value.strip().strip("/")
            if not resource:
                raise AnnotationError(tag, value, "expected a resource path")
            operation.resource = resource
        elif tag == "Param":
            spec = parse_param(value)
            operation.parameters.append(
                Parameter(
                    name=spec.name,
                    location=spec.location,
                    type=self.resolver.resolve_text(spec.type_expr, module, declaration),
                    required=spec.required,
                    description=spec.description,
                )
            )
        elif tag in ("Success", "Failure"):
            spec = parse_response(tag, value)
            type_ref = None
            if spec.type_expr is not None:
                type_ref = self.resolver.resolve_text(spec.type_expr, module, declaration)
            operation.responses.append(ResponseMessage(code=spec.code, message=spec.message, type=type_ref))
