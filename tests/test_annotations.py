import pytest

from swaggerlite.errors import AnnotationError
from swaggerlite.parser.annotations import (
    GENERAL_TAGS,
    parse_mime_types,
    parse_param,
    parse_response,
    parse_route,
    parse_sub_api,
    scan_comment,
    split_fields,
)

CONTROLLER_COMMENT = """\
# @Title getWidget
# @Description fetch a single widget
# Widgets are cached for a minute, see @cache below.
# @Param id path int true "Widget ID"
# @Success 200 {object} Widget
# @Router /widgets/{id} [get]
"""


class TestScanComment:
    def test_keeps_tags_in_source_order(self):
        tags = [a.tag for a in scan_comment(CONTROLLER_COMMENT)]
        assert tags == ["Title", "Description", "Param", "Success", "Router"]

    def test_exactly_one_route(self):
        routes = [a for a in scan_comment(CONTROLLER_COMMENT) if a.tag == "Router"]
        assert len(routes) == 1
        assert routes[0].value == "/widgets/{id} [get]"
        assert routes[0].line == 6

    def test_plain_commentary_is_dropped(self):
        values = [a.value for a in scan_comment(CONTROLLER_COMMENT)]
        assert not any("cached" in value for value in values)

    def test_unknown_tag_is_ignored(self):
        assert scan_comment("# @Deprecated since 2.0\n# @cache forever") == []

    def test_tag_keyword_is_case_sensitive(self):
        assert scan_comment("# @router /widgets [get]") == []

    def test_whitespace_tolerant(self):
        annotations = scan_comment("#@Title   getWidget   \n    #    @Router\t/widgets   [get]")
        assert [(a.tag, a.value) for a in annotations] == [
            ("Title", "getWidget"),
            ("Router", "/widgets   [get]"),
        ]

    def test_lines_without_comment_marker(self):
        annotations = scan_comment("@APIVersion 1.0.0\n@APITitle Shop", GENERAL_TAGS)
        assert [a.value for a in annotations] == ["1.0.0", "Shop"]

    def test_tag_filter(self):
        assert scan_comment(CONTROLLER_COMMENT, GENERAL_TAGS) == []

    def test_tag_without_value(self):
        annotations = scan_comment("# @Title")
        assert annotations[0].value == ""


class TestParseRoute:
    def test_path_and_method(self):
        assert parse_route("/widgets/{id} [get]") == ("/widgets/{id}", "GET")

    def test_method_defaults_to_get(self):
        assert parse_route("/widgets") == ("/widgets", "GET")

    def test_unknown_method(self):
        with pytest.raises(AnnotationError):
            parse_route("/widgets [fetch]")

    def test_path_must_be_absolute(self):
        with pytest.raises(AnnotationError):
            parse_route("widgets [get]")


class TestParseParam:
    def test_full_param(self):
        spec = parse_param('id path int true "Widget ID"')
        assert spec.name == "id"
        assert spec.location == "path"
        assert spec.type_expr == "int"
        assert spec.required is True
        assert spec.description == "Widget ID"

    def test_description_is_optional(self):
        spec = parse_param("page query int false")
        assert spec.required is False
        assert spec.description == ""

    def test_type_expression_with_spaces(self):
        spec = parse_param('filters query dict[str, int] False "filters"')
        assert spec.type_expr == "dict[str, int]"
        assert spec.required is False

    def test_missing_fields(self):
        with pytest.raises(AnnotationError):
            parse_param("id path")

    def test_unknown_location(self):
        with pytest.raises(AnnotationError):
            parse_param("id cookie int true")

    def test_bad_required_flag(self):
        with pytest.raises(AnnotationError):
            parse_param("id path int yes")

    def test_unterminated_quote(self):
        with pytest.raises(AnnotationError):
            parse_param('id path int true "Widget ID')


class TestParseResponse:
    def test_object(self):
        spec = parse_response("Success", "200 {object} Widget")
        assert (spec.code, spec.type_expr, spec.message) == (200, "Widget", "")

    def test_array(self):
        spec = parse_response("Success", "200 {array} Widget")
        assert spec.type_expr == "list[Widget]"

    def test_message(self):
        spec = parse_response("Failure", '404 {object} ApiError "widget not found"')
        assert spec.type_expr == "ApiError"
        assert spec.message == "widget not found"

    def test_code_and_message_only(self):
        spec = parse_response("Success", '204 "deleted"')
        assert spec.type_expr is None
        assert spec.message == "deleted"

    def test_unquoted_message_is_not_a_type(self):
        spec = parse_response("Failure", "500 internal error")
        assert spec.type_expr is None
        assert spec.message == "internal error"

    def test_bad_code(self):
        with pytest.raises(AnnotationError):
            parse_response("Success", "ok {object} Widget")

    def test_unknown_container(self):
        with pytest.raises(AnnotationError):
            parse_response("Success", "200 {map} Widget")

    def test_container_without_type(self):
        with pytest.raises(AnnotationError):
            parse_response("Success", '200 {object} "oops"')


class TestOtherValues:
    def test_sub_api(self):
        assert parse_sub_api("Widget management [/widgets]") == ("Widget management", "widgets")

    def test_sub_api_without_path(self):
        with pytest.raises(AnnotationError):
            parse_sub_api("Widget management")

    def test_mime_types(self):
        assert parse_mime_types("json, xml mpfd application/pdf") == [
            "application/json",
            "text/xml",
            "multipart/form-data",
            "application/pdf",
        ]

    def test_split_fields(self):
        assert split_fields('a  "b c"  list[tuple[int, str]] d') == ["a", '"b c"', "list[tuple[int, str]]", "d"]
