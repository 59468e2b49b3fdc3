"""One generation run: general info -> walk -> aggregate -> render."""

from dataclasses import dataclass, field

from swaggerlite.config import GeneratorConfig
from swaggerlite.generator.aggregate import aggregate
from swaggerlite.generator.markdown import render_markdown
from swaggerlite.generator.module import render_module
from swaggerlite.generator.swagger import to_json, to_yaml
from swaggerlite.log import get_logger
from swaggerlite.parser.base import Document
from swaggerlite.parser.general import find_general_info
from swaggerlite.parser.registry import ModelRegistry
from swaggerlite.parser.source import SourceLoader
from swaggerlite.parser.types import TypeResolver
from swaggerlite.parser.walker import ControllerPredicate, PackageWalker, WalkResult, is_controller

logger = get_logger("pipeline")

RENDERERS = {
    "json": to_json,
    "yaml": to_yaml,
    "markdown": render_markdown,
    "python": render_module,
}


@dataclass
class RunResult:
    document: Document
    warnings: list[str] = field(default_factory=list)


def walk(config: GeneratorConfig, predicate: ControllerPredicate = is_controller) -> tuple[WalkResult, ModelRegistry]:
    roots = config.roots()
    loader = SourceLoader(roots)
    registry = ModelRegistry()
    resolver = TypeResolver(loader, registry, config.aliases)
    walker = PackageWalker(loader, resolver, exclusions=config.exclusions, is_controller=predicate)
    return walker.walk(config.api_packages), registry


def build_document(config: GeneratorConfig, predicate: ControllerPredicate = is_controller) -> RunResult:
    """Run the whole extraction; any fatal error propagates before output exists."""
    info = find_general_info(config.main_file(), config.roots())
    if config.base_path:
        info.base_path = config.base_path

    logger.info("Start parsing")
    result, registry = walk(config, predicate)
    document = aggregate(result.operations, info, registry, result.descriptions)
    logger.info(
        f"Finish parsing: {len(result.operations)} operations, "
        f"{len(document.declarations)} resources, {len(registry)} models"
    )
    return RunResult(document=document, warnings=result.warnings)


def render(document: Document, output_format: str) -> str:
    return RENDERERS[output_format](document)
