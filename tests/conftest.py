import logging
import textwrap
from pathlib import Path
from typing import Mapping

import pytest

from swaggerlite.config import GeneratorConfig, build_config
from swaggerlite.parser.base import Document
from swaggerlite.parser.registry import ModelRegistry
from swaggerlite.parser.source import SourceLoader
from swaggerlite.parser.types import TypeResolver
from swaggerlite.pipeline import build_document

FIXTURES = Path(__file__).parent / "fixtures"


class SourceTree:
    """Writes throwaway Python packages under a search root."""

    def __init__(self, tmp_path: Path):
        self.root = tmp_path / "src"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def resolver(self, aliases: Mapping[str, str] | None = None) -> TypeResolver:
        return TypeResolver(SourceLoader([self.root]), ModelRegistry(), aliases)


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTree:
    return SourceTree(tmp_path)


@pytest.fixture
def shop_root() -> Path:
    """Search root holding the widgetshop sample service."""
    return FIXTURES / "src"


@pytest.fixture
def shop_config(shop_root: Path) -> GeneratorConfig:
    return build_config(api_packages="widgetshop/api", search_roots=[shop_root])


@pytest.fixture
def shop_document(shop_config: GeneratorConfig) -> Document:
    return build_document(shop_config).document


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI attached to streams that CliRunner has since closed."""
    yield
    logger = logging.getLogger("swaggerlite")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
