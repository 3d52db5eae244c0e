import pytest

from ngtranslate_extract.core.diagnostics import Diagnostic, DiagnosticKind
from ngtranslate_extract.core.models import Literal, Resource, TranslationRecord, Unresolved
from ngtranslate_extract.core.script_scanner import (
    ReceiverKind, ScopeKind, ScriptScanner, ServiceReference,
    matches_arrow_capture, matches_bare_identifier, matches_constructor_capture,
    matches_member_function_capture, parse_script, scan_script,
)
from ngtranslate_extract.exceptions import ParseError
from ngtranslate_extract.utils.config import ScriptSettings


SIMPLE_JS = '''$translate("global variable");

function Controller($translate) {
    this.$translate = $translate;
    this.$translate("translate in constructor");
    var _this = this;
    load(function () {
        _this.$translate("captured alias");
    });
    load(() => this.$translate("translate in arrow function"));
}

Controller.prototype.show = function () {
    this.$translate("this-translate");
};

class Page {
    constructor($translate) {
        this.$translate = $translate;
        this.$translate("class constructor");
    }

    title() {
        return this.$translate("class method");
    }
}
'''


def _records(items):
    return [i for i in items if isinstance(i, TranslationRecord)]


def _keys(source):
    return [r.key for r in _records(scan_script(source, 'test.js'))]


def test_all_service_reference_shapes_are_found():
    assert _keys(SIMPLE_JS) == [
        "global variable",
        "translate in constructor",
        "captured alias",
        "translate in arrow function",
        "this-translate",
        "class constructor",
        "class method",
    ]


def test_resource_points_at_call_site():
    records = _records(scan_script(SIMPLE_JS, 'simple.js'))
    assert records[0].resources == (Resource('simple.js', 1, 1),)
    assert records[1].resources == (Resource('simple.js', 5, 5),)


@pytest.mark.parametrize("source", [
    '$translate("same-id", "Same");',
    'function Ctrl($translate) { this.$translate("same-id", "Same"); }',
    'function f() { var self = this; run(() => self.$translate("same-id", "Same")); }',
    'var o = { m() { this.$translate("same-id", "Same"); } };',
])
def test_shapes_produce_equal_records(source):
    records = _records(scan_script(source, 'shape.js'))
    assert len(records) == 1
    assert records[0].id == Literal("same-id")
    assert records[0].default_text == Literal("Same")


def test_unrelated_calls_are_ignored():
    source = '''
translate("not the service");
other.$translate("not captured");
this.$translate("module level this");
$translateProvider.use("en");
'''
    assert _keys(source) == []


def test_single_id_with_default_text():
    records = _records(scan_script('$translate("Next", "Weiter");', 'defaultText.js'))
    assert records[0].id == Literal("Next")
    assert records[0].default_text == Literal("Weiter")


def test_array_of_ids_with_default_mapping():
    source = '$translate(["FIRST_PAGE", "Next"], { "FIRST_PAGE": "Missing", "LAST_PAGE": "Missing" });'
    records = _records(scan_script(source, 'array.js'))
    assert [(r.key, r.default_text) for r in records] == [
        ("FIRST_PAGE", Literal("Missing")),
        ("Next", None),
    ]
    assert records[0].resources == records[1].resources


def test_array_default_mapping_with_identifier_keys():
    source = '$translate(["FIRST_PAGE", "LAST_PAGE"], { FIRST_PAGE: "Missing", LAST_PAGE: \'Missing\' });'
    records = _records(scan_script(source, 'defaultText.js'))
    assert [(r.key, r.default_key) for r in records] == [("FIRST_PAGE", "Missing"), ("LAST_PAGE", "Missing")]


def test_non_literal_id_is_dynamic():
    records = _records(scan_script('$translate(titleId);', 'dynamic.js'))
    assert records[0].id == Unresolved("titleId")
    assert records[0].is_dynamic


def test_non_literal_default_text_is_dynamic():
    records = _records(scan_script('$translate("Next", label);', 'dynamic.js'))
    assert records[0].id == Literal("Next")
    assert records[0].default_text == Unresolved("label")
    assert records[0].is_dynamic


def test_undefined_default_text_is_absent():
    records = _records(scan_script('$translate("Next", undefined); $translate("Prev", null);', 'absent.js'))
    assert [r.default_text for r in records] == [None, None]


def test_array_with_dynamic_element():
    records = _records(scan_script('$translate(["A", prefix + "B"]);', 'dynamic.js'))
    assert [r.is_dynamic for r in records] == [False, True]
    assert records[1].id == Unresolved('prefix + "B"')


def test_array_with_non_object_defaults_is_dynamic():
    records = _records(scan_script('$translate(["A", "B"], "Default");', 'dynamic.js'))
    assert all(r.default_text == Unresolved('"Default"') for r in records)


def test_array_defaults_with_spread_make_unmapped_ids_dynamic():
    records = _records(scan_script('$translate(["A", "B"], { A: "a", ...rest });', 'dynamic.js'))
    assert records[0].default_text == Literal("a")
    assert records[1].default_text == Unresolved('{ A: "a", ...rest }')


def test_template_literals():
    records = _records(scan_script('$translate(`plain`); $translate(`Hello ${name}`);', 'template.js'))
    assert records[0].id == Literal("plain")
    assert records[1].id == Unresolved("`Hello ${name}`")


def test_escape_sequences_are_decoded():
    records = _records(scan_script("$translate('It\\'s', \"Tab\\there \\u00e9\");", 'escape.js'))
    assert records[0].id == Literal("It's")
    assert records[0].default_text == Literal("Tab\there \u00e9")


def test_suppression_comment_before_statement():
    source = '''function show(id) {
    // suppress-dynamic-translation-error
    $translate(id);
    $translate(other);
}
'''
    records = _records(scan_script(source, 'suppressed.js'))
    assert [r.key for r in records] == ["other"]


def test_suppression_comment_inside_arguments():
    source = '$translate(/* suppress-dynamic-translation-error */ id);'
    assert scan_script(source, 'suppressed.js') == ()


def test_call_without_arguments_warns():
    items = scan_script('$translate();', 'empty.js')
    assert len(items) == 1
    assert isinstance(items[0], Diagnostic)
    assert items[0].kind is DiagnosticKind.EMPTY_ID


def test_empty_string_id_warns():
    items = scan_script('$translate("");', 'empty.js')
    assert [type(i) for i in items] == [Diagnostic]


def test_register_translations():
    source = '''
i18n.registerTranslation("Logout", "Abmelden");
i18n.registerTranslations({ Login: "Anmelden", "Cancel": "Abbrechen" });
'''
    records = _records(scan_script(source, 'registerTranslations.js'))
    assert [(r.key, r.default_key) for r in records] == [
        ("Logout", "Abmelden"),
        ("Login", "Anmelden"),
        ("Cancel", "Abbrechen"),
    ]


def test_custom_service_name():
    settings = ScriptSettings(service_name="translateService")
    tree = parse_script('translateService("custom"); $translate("default");')
    records = _records(ScriptScanner(settings).scan(tree, 'custom.js'))
    assert [r.key for r in records] == ["custom"]


def test_syntax_error_raises_parse_error():
    with pytest.raises(ParseError) as exc_info:
        parse_script('$translate("broken"', 'broken.js')
    assert exc_info.value.path == 'broken.js'


def test_matchers_are_independent_predicates():
    bare = ServiceReference("$translate", ReceiverKind.NONE, ScopeKind.PROGRAM)
    ctor = ServiceReference("$translate", ReceiverKind.THIS, ScopeKind.CONSTRUCTOR)
    arrow = ServiceReference("$translate", ReceiverKind.ALIAS, ScopeKind.ARROW)
    method = ServiceReference("$translate", ReceiverKind.THIS, ScopeKind.METHOD)

    assert matches_bare_identifier(bare, "$translate")
    assert not matches_bare_identifier(ctor, "$translate")
    assert matches_constructor_capture(ctor, "$translate")
    assert not matches_constructor_capture(method, "$translate")
    assert matches_arrow_capture(arrow, "$translate")
    assert matches_member_function_capture(method, "$translate")
    assert not matches_member_function_capture(bare, "$translate")
    assert not matches_member_function_capture(method, "other")
