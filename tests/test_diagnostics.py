import json

from ngtranslate_extract.core.diagnostics import (
    DiagnosticKind, DiagnosticReporter, ExtractionReport, Severity,
)
from ngtranslate_extract.core.models import Literal, Resource, TranslationRecord, Unresolved


def test_format_record_with_absent_default_text():
    record = TranslationRecord(Literal("Login"), None, (Resource('a.html', 2, 4), Resource('b.js', 1, 1)))
    assert DiagnosticReporter.format_record(record) == \
        "Translation{ id: Login, defaultText: undefined, resources: a.html:2:4, b.js:1:1}"


def test_dynamic_usage_message():
    record = TranslationRecord(Unresolved("{{editCtrl.title}}"), None, (Resource('edit.html', 3, 9),))
    diagnostic = DiagnosticReporter().dynamic_usage(record)

    assert diagnostic.kind is DiagnosticKind.DYNAMIC_USAGE
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.records == (record,)
    assert str(diagnostic) == (
        "ngtranslate-extract: The translation Translation{ id: {{editCtrl.title}}, defaultText: undefined, "
        "resources: edit.html:3:9} uses an angular expression as translation id or as default text, "
        "this is not supported. To suppress this error attribute the element with "
        "suppress-dynamic-translation-error."
    )


def test_suppress_marker_is_configurable():
    record = TranslationRecord(Unresolved("x"), None, (Resource('a.js', 1, 1),))
    message = DiagnosticReporter("no-dynamic-check").dynamic_usage(record).message
    assert message.endswith("attribute the element with no-dynamic-check.")


def test_empty_id_is_a_warning():
    diagnostic = DiagnosticReporter().empty_id(Resource('a.html', 5, 1))
    assert diagnostic.severity is Severity.WARNING
    assert diagnostic.message == "ngtranslate-extract: Ignoring a translation without an id at a.html:5:1."


def test_resource_without_position_renders_path_only():
    assert str(Resource('inline.js')) == 'inline.js'


def test_extraction_report(tmp_path):
    reporter = DiagnosticReporter()
    records = [
        TranslationRecord(Literal("A"), Literal("a"), (Resource('x.html', 1, 1), Resource('y.js', 2, 1))),
        TranslationRecord(Literal("B"), None, (Resource('y.js', 3, 1),)),
    ]
    diagnostics = [
        reporter.dynamic_usage(TranslationRecord(Unresolved("id"), None, (Resource('y.js', 4, 1),))),
        reporter.empty_id(Resource('x.html', 9, 1)),
    ]
    report = ExtractionReport.build(records, diagnostics, project='demo')

    data = report.to_dict()
    assert data['totals'] == {'records': 2, 'ids': 2, 'errors': 1, 'warnings': 1}
    assert data['files']['y.js']['records'] == 2
    assert data['files']['y.js']['dynamic'] == 1
    assert data['files']['x.html']['warnings'] == 1

    out = tmp_path / 'reports' / 'extraction.json'
    assert report.write(str(out))
    assert json.loads(out.read_text(encoding='utf-8'))['project'] == 'demo'
