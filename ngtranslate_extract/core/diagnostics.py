"""Diagnostics for ngtranslate-extract.

Dynamic usages, conflicting default texts and id-less sites are collected as
``Diagnostic`` objects. ``DiagnosticReporter`` owns their wording, which is
kept stable so build output can be compared against golden files.
``ExtractionReport`` summarizes a build per file as JSON.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from .models import Resource, TranslationRecord

logger = logging.getLogger(__name__)

MESSAGE_PREFIX = "ngtranslate-extract"
DEFAULT_SUPPRESS_MARKER = "suppress-dynamic-translation-error"


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(Enum):
    DYNAMIC_USAGE = "dynamic-usage"
    CONFLICT = "conflict"
    EMPTY_ID = "empty-id"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    severity: Severity
    message: str
    records: Tuple[TranslationRecord, ...] = ()
    resources: Tuple[Resource, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def __str__(self) -> str:
        return self.message


class DiagnosticReporter:
    """Builds diagnostics with stable, human-readable messages."""

    def __init__(self, suppress_marker: str = DEFAULT_SUPPRESS_MARKER):
        self.suppress_marker = suppress_marker

    @staticmethod
    def format_record(record: TranslationRecord) -> str:
        default_text = "undefined" if record.default_text is None else str(record.default_text)
        resources = ", ".join(str(r) for r in record.resources)
        return f"Translation{{ id: {record.id}, defaultText: {default_text}, resources: {resources}}}"

    def dynamic_usage(self, record: TranslationRecord) -> Diagnostic:
        message = (
            f"{MESSAGE_PREFIX}: The translation {self.format_record(record)} uses an angular expression "
            f"as translation id or as default text, this is not supported. To suppress this error "
            f"attribute the element with {self.suppress_marker}."
        )
        return Diagnostic(
            kind=DiagnosticKind.DYNAMIC_USAGE,
            severity=Severity.ERROR,
            message=message,
            records=(record,),
            resources=record.resources,
        )

    def conflict(self, first: TranslationRecord, second: TranslationRecord) -> Diagnostic:
        message = (
            f"{MESSAGE_PREFIX}: Two translations with the same id but different default text found "
            f"({self.format_record(first)}, {self.format_record(second)}). Please define the same "
            f"default text twice or specify the default text only once."
        )
        return Diagnostic(
            kind=DiagnosticKind.CONFLICT,
            severity=Severity.ERROR,
            message=message,
            records=(first, second),
            resources=first.resources + second.resources,
        )

    def empty_id(self, resource: Resource) -> Diagnostic:
        return Diagnostic(
            kind=DiagnosticKind.EMPTY_ID,
            severity=Severity.WARNING,
            message=f"{MESSAGE_PREFIX}: Ignoring a translation without an id at {resource}.",
            resources=(resource,),
        )


@dataclass
class FileReport:
    file_path: str
    records: int = 0
    dynamic: int = 0
    conflicts: int = 0
    warnings: int = 0
    entries: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class ExtractionReport:
    """Per-file summary of one extraction run."""
    project: str = ''
    total_records: int = 0
    total_ids: int = 0
    total_errors: int = 0
    total_warnings: int = 0
    files: Dict[str, FileReport] = field(default_factory=dict)

    def _file(self, file_path: str) -> FileReport:
        fr = self.files.get(file_path)
        if not fr:
            fr = FileReport(file_path=file_path)
            self.files[file_path] = fr
        return fr

    def add_record(self, record: TranslationRecord):
        for resource in record.resources:
            fr = self._file(resource.path)
            fr.records += 1
            fr.entries.append({
                'status': 'extracted',
                'id': record.key,
                'default_text': record.default_key,
                'line': resource.line,
                'column': resource.column,
            })
        self.total_records += 1

    def add_diagnostic(self, diagnostic: Diagnostic):
        paths = []
        for resource in diagnostic.resources:
            if resource.path not in paths:
                paths.append(resource.path)
        for path in paths:
            fr = self._file(path)
            if diagnostic.kind is DiagnosticKind.DYNAMIC_USAGE:
                fr.dynamic += 1
            elif diagnostic.kind is DiagnosticKind.CONFLICT:
                fr.conflicts += 1
            else:
                fr.warnings += 1
            fr.entries.append({'status': diagnostic.kind.value, 'message': diagnostic.message})
        if diagnostic.is_error:
            self.total_errors += 1
        else:
            self.total_warnings += 1

    @classmethod
    def build(cls, records: Iterable[TranslationRecord], diagnostics: Iterable[Diagnostic],
              project: str = '') -> "ExtractionReport":
        report = cls(project=project)
        ids = set()
        for record in records:
            report.add_record(record)
            ids.add(record.key)
        for diagnostic in diagnostics:
            report.add_diagnostic(diagnostic)
        report.total_ids = len(ids)
        return report

    def to_dict(self) -> Dict[str, Any]:
        return {
            'project': self.project,
            'totals': {
                'records': self.total_records,
                'ids': self.total_ids,
                'errors': self.total_errors,
                'warnings': self.total_warnings,
            },
            'files': {p: {
                'records': fr.records,
                'dynamic': fr.dynamic,
                'conflicts': fr.conflicts,
                'warnings': fr.warnings,
                'entries': fr.entries,
            } for p, fr in self.files.items()}
        }

    def write(self, path: str) -> bool:
        p = Path(path)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(json.dumps(self.to_dict(), ensure_ascii=False, indent=2), encoding='utf-8')
        except OSError as e:
            logger.warning(f"Could not write extraction report {path}: {e}")
            return False
        return True
