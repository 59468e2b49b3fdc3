import pytest

from swaggerlite.config import build_config
from swaggerlite.errors import GeneralInfoNotFoundError, PackageNotFoundError
from swaggerlite.pipeline import RENDERERS, build_document, render, walk


class TestBuildDocument:
    def test_widget_shop(self, shop_config):
        result = build_document(shop_config)
        assert result.warnings == []
        assert list(result.document.declarations) == ["assemblies", "widgets"]
        assert result.document.listing.info.title == "Widget Shop API"

    def test_base_path_override(self, shop_root):
        config = build_config(api_packages="widgetshop/api", search_roots=[shop_root], base_path="/api")
        document = build_document(config).document
        assert document.listing.base_path == "/api"
        assert document.declarations["widgets"].base_path == "/api"

    def test_missing_main_file(self, shop_root):
        config = build_config(api_packages="widgetshop/api", search_roots=[shop_root], main_api_file="nope.py")
        with pytest.raises(GeneralInfoNotFoundError):
            build_document(config)

    def test_missing_package_after_general_info(self, shop_root):
        config = build_config(
            api_packages="widgetshop/api,widgetshop/admin",
            search_roots=[shop_root],
        )
        with pytest.raises(PackageNotFoundError):
            build_document(config)

    def test_excluded_package_warns(self, shop_root):
        config = build_config(
            api_packages="widgetshop/api,widgetshop/admin",
            search_roots=[shop_root],
            exclusions="widgetshop/admin",
        )
        result = build_document(config)
        assert len(result.warnings) == 1
        assert len(result.document.declarations) == 2

    def test_predicate_is_passed_through(self, shop_config):
        result = build_document(shop_config, predicate=lambda fn: fn.name.startswith("get_"))
        assert list(result.document.declarations) == ["widgets"]

    def test_custom_alias_removes_model(self, shop_root):
        config = build_config(api_packages="widgetshop/api", search_roots=[shop_root], aliases={"Widget": "string"})
        document = build_document(config).document
        assert "Widget" not in document.declarations["widgets"].models


class TestWalkAndRender:
    def test_walk_returns_registry(self, shop_config):
        result, registry = walk(shop_config)
        assert len(result.operations) == 4
        assert "Category" in registry

    @pytest.mark.parametrize("fmt", sorted(RENDERERS))
    def test_every_format_renders_text(self, shop_document, fmt):
        text = render(shop_document, fmt)
        assert isinstance(text, str)
        assert "widgets" in text
