import ast

import pytest

from swaggerlite.config import DEFAULT_ALIASES
from swaggerlite.errors import PackageNotFoundError, TypeResolutionError
from swaggerlite.parser.base import ModelRef, array_of, primitive
from swaggerlite.parser.registry import ModelRegistry
from swaggerlite.parser.source import SourceLoader
from swaggerlite.parser.types import TypeResolver
from swaggerlite.parser.walker import PackageWalker, is_controller


def make_walker(root, exclusions=(), predicate=is_controller):
    loader = SourceLoader([root])
    resolver = TypeResolver(loader, ModelRegistry(), DEFAULT_ALIASES)
    return PackageWalker(loader, resolver, exclusions=exclusions, is_controller=predicate)


@pytest.fixture
def shop_result(shop_root):
    return make_walker(shop_root).walk(["widgetshop/api"])


def by_function(result, name):
    return next(op for op in result.operations if op.function.endswith("." + name))


class TestWidgetShop:
    def test_discovery_order(self, shop_result):
        assert [op.nickname for op in shop_result.operations] == [
            "createAssembly",
            "assemblyCategories",
            "getWidget",
            "listWidgets",
        ]

    def test_clean_walk_has_no_warnings(self, shop_result):
        assert shop_result.warnings == []

    def test_functions_without_route_are_skipped(self, shop_result):
        functions = [op.function for op in shop_result.operations]
        assert "widgetshop.api.assemblies.delete_assembly" not in functions
        assert "widgetshop.api.widgets._lookup" not in functions
        assert "widgetshop.api.main.main" not in functions

    def test_get_widget(self, shop_result):
        op = by_function(shop_result, "get_widget")
        assert (op.method, op.path) == ("GET", "/widgets/{id}")
        assert op.summary == "fetch a single widget"
        assert op.function == "widgetshop.api.widgets.get_widget"
        [param] = op.parameters
        assert (param.name, param.location, param.type, param.required) == ("id", "path", primitive("integer"), True)
        assert param.description == "Widget ID"
        assert [(r.code, r.type, r.message) for r in op.responses] == [
            (200, ModelRef(name="Widget"), ""),
            (404, ModelRef(name="ApiError"), "widget not found"),
        ]
        assert op.type == ModelRef(name="Widget")

    def test_aliased_parameter_and_produces(self, shop_result):
        op = by_function(shop_result, "list_widgets")
        assert [(p.name, p.type, p.required) for p in op.parameters] == [
            ("name", primitive("string"), False),
            ("page", primitive("integer"), False),
        ]
        assert op.produces == ["application/json"]

    def test_async_controller(self, shop_result):
        op = by_function(shop_result, "create_assembly")
        assert (op.method, op.path) == ("POST", "/assemblies")
        assert op.consumes == ["application/json"]
        assert op.parameters[0].location == "body"
        assert op.responses[0].message == "created"
        assert op.type == ModelRef(name="Assembly")

    def test_array_response(self, shop_result):
        op = by_function(shop_result, "assembly_categories")
        assert op.type == array_of(ModelRef(name="Category"))

    def test_sub_api_descriptions(self, shop_result):
        assert shop_result.descriptions == {
            "assemblies": "Assemblies of parts",
            "widgets": "Widget management",
        }

    def test_dotted_package_name(self, shop_root):
        result = make_walker(shop_root).walk(["widgetshop.api"])
        assert len(result.operations) == 4

    def test_predicate_filters_controllers(self, shop_root):
        walker = make_walker(shop_root, predicate=lambda fn: not isinstance(fn, ast.AsyncFunctionDef))
        result = walker.walk(["widgetshop/api"])
        assert "createAssembly" not in [op.nickname for op in result.operations]
        assert len(result.operations) == 3

    def test_models_are_registered(self, shop_root):
        walker = make_walker(shop_root)
        walker.walk(["widgetshop/api"])
        registry = walker.resolver.registry
        assert "Assembly" in registry
        assert "Part" in registry
        assert "Audited" not in registry
        assert "NullString" not in registry


class TestMalformedAnnotations:
    def test_bad_lines_warn_and_continue(self, source_tree):
        source_tree.write(
            {
                "shop/__init__.py": "",
                "shop/views.py": '''
                    # @Param id path int maybe
                    # @Param q query str false "search"
                    # @Success two {object} str
                    # @Router /items [get]
                    def list_items():
                        pass
                ''',
            }
        )
        result = make_walker(source_tree.root).walk(["shop"])
        [op] = result.operations
        assert [p.name for p in op.parameters] == ["q"]
        assert op.responses == []
        assert len(result.warnings) == 2
        assert all(w.startswith("shop.views.list_items:") for w in result.warnings)

    def test_bad_route_skips_function(self, source_tree):
        source_tree.write(
            {
                "shop/views.py": '''
                    # @Router items [get]
                    def broken():
                        pass


                    # @Router /ok
                    def fine():
                        pass
                ''',
            }
        )
        result = make_walker(source_tree.root).walk(["shop"])
        assert [op.nickname for op in result.operations] == ["fine"]
        assert len(result.warnings) == 1

    def test_first_of_several_routes_wins(self, source_tree):
        source_tree.write(
            {
                "shop/views.py": '''
                    # @Router /a [post]
                    # @Router /b [get]
                    def twice():
                        pass
                ''',
            }
        )
        result = make_walker(source_tree.root).walk(["shop"])
        assert (result.operations[0].method, result.operations[0].path) == ("POST", "/a")
        assert "more than one @Router" in result.warnings[0]

    def test_resource_override_and_decorators(self, source_tree):
        source_tree.write(
            {
                "shop/views.py": '''
                    import functools


                    # @Resource /legacy/
                    # @Router /v1/items
                    @functools.lru_cache
                    def items():
                        pass
                ''',
            }
        )
        result = make_walker(source_tree.root).walk(["shop"])
        assert result.operations[0].resource == "legacy"

    def test_sub_api_without_path_warns(self, source_tree):
        source_tree.write({"shop/views.py": "# @SubApi Items\n"})
        result = make_walker(source_tree.root).walk(["shop"])
        assert result.descriptions == {}
        assert len(result.warnings) == 1

    def test_unresolvable_type_is_fatal(self, source_tree):
        source_tree.write(
            {
                "shop/views.py": '''
                    # @Success 200 {object} Gadget
                    # @Router /gadgets
                    def gadgets():
                        pass
                ''',
            }
        )
        with pytest.raises(TypeResolutionError):
            make_walker(source_tree.root).walk(["shop"])


class TestMissingPackages:
    def test_missing_package_is_fatal(self, source_tree):
        with pytest.raises(PackageNotFoundError) as info:
            make_walker(source_tree.root).walk(["nowhere"])
        assert info.value.package == "nowhere"

    def test_excluded_missing_package_warns(self, source_tree):
        source_tree.write({"shop/views.py": ""})
        result = make_walker(source_tree.root, exclusions=["nowhere"]).walk(["nowhere", "shop"])
        assert result.operations == []
        assert result.warnings == ["Package nowhere not found, skipped (on the exclusion list)"]

    def test_missing_local_import_is_fatal(self, source_tree):
        source_tree.write(
            {
                "shop/__init__.py": "",
                "shop/views.py": "from shop.gone import Thing\n",
            }
        )
        with pytest.raises(PackageNotFoundError) as info:
            make_walker(source_tree.root).walk(["shop"])
        assert info.value.package == "shop.gone"

    def test_excluded_local_import_warns(self, source_tree):
        source_tree.write(
            {
                "shop/__init__.py": "",
                "shop/views.py": "from shop.gone import Thing\n",
            }
        )
        result = make_walker(source_tree.root, exclusions=["shop.gone"]).walk(["shop"])
        assert len(result.warnings) == 1
        assert "shop.gone" in result.warnings[0]

    def test_external_imports_are_not_followed(self, source_tree):
        source_tree.write({"shop/views.py": "import json\nfrom pathlib import Path\nimport click\n"})
        result = make_walker(source_tree.root).walk(["shop"])
        assert result.warnings == []

    def test_framework_imports_need_not_be_installed(self, source_tree):
        source_tree.write(
            {
                "shop/views.py": '''
                    from flask import Blueprint
                    import fastapi.routing


                    # @Router /items
                    def items():
                        pass
                ''',
            }
        )
        result = make_walker(source_tree.root).walk(["shop"])
        assert [op.path for op in result.operations] == ["/items"]
        assert result.warnings == []

    def test_every_walk_checks_imports_again(self, source_tree):
        source_tree.write(
            {
                "shop/__init__.py": "",
                "shop/views.py": "from shop.gone import Thing\n",
            }
        )
        walker = make_walker(source_tree.root, exclusions=["shop.gone"])
        first = walker.walk(["shop"])
        second = walker.walk(["shop"])
        assert len(first.warnings) == 1
        assert second.warnings == first.warnings

    def test_exclusion_matches_subpackages(self, source_tree):
        walker = make_walker(source_tree.root, exclusions=["vendor/"])
        assert walker.is_excluded("vendor.sub")
        assert not walker.is_excluded("vendored")
