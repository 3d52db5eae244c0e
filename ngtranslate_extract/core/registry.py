"""
Translation Registry
====================

Merges the records of every scanned artifact into one catalog.

- the first default text seen for an id wins;
- records agreeing on id and default text share one entry (resources united);
- a different default text for a known id becomes a conflict diagnostic;
- dynamic records are never catalogued, they become diagnostics.

All operations take the registry lock, so scans running on several threads may
merge directly. "First seen" then follows lock acquisition order; callers that
need reproducible output merge in a fixed artifact order (see extractor.py).
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .diagnostics import Diagnostic, DiagnosticReporter
from .models import TranslationRecord

ConflictKey = Tuple[str, Optional[str]]


@dataclass
class _Entry:
    record: TranslationRecord
    # conflicting records keyed by their default text, in discovery order
    conflicts: Dict[Optional[str], TranslationRecord] = field(default_factory=dict)


@dataclass
class ExtractionResult:
    """Outcome of one build."""
    catalog: Dict[str, str]
    diagnostics: List[Diagnostic]
    records: List[TranslationRecord]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)


class TranslationRegistry:
    """Accumulates translation records for one build."""

    def __init__(self, reporter: Optional[DiagnosticReporter] = None):
        self.logger = logging.getLogger(__name__)
        self.reporter = reporter or DiagnosticReporter()
        self._lock = threading.Lock()
        self._entries: Dict[str, _Entry] = {}
        # diagnostics in discovery order; conflicts are rendered at finalize()
        # so that they carry every resource seen for both records
        self._findings: List[Union[Diagnostic, ConflictKey]] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def merge(self, record: TranslationRecord) -> None:
        with self._lock:
            self._merge(record)

    def report(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._findings.append(diagnostic)

    def consume(self, items: Iterable[Union[TranslationRecord, Diagnostic]]) -> int:
        """Merge a scan stream under one lock acquisition; returns the number of records."""
        items = list(items)
        count = 0
        with self._lock:
            for item in items:
                if isinstance(item, TranslationRecord):
                    self._merge(item)
                    count += 1
                else:
                    self._findings.append(item)
        return count

    def _merge(self, record: TranslationRecord) -> None:
        if record.is_dynamic:
            self._findings.append(self.reporter.dynamic_usage(record))
            return

        entry = self._entries.get(record.key)
        if entry is None:
            self._entries[record.key] = _Entry(record)
            return

        if entry.record.is_mergeable_with(record):
            entry.record = entry.record.with_resources(record.resources)
            return

        default_key = record.default_key
        known = entry.conflicts.get(default_key)
        if known is not None:
            entry.conflicts[default_key] = known.with_resources(record.resources)
            return

        entry.conflicts[default_key] = record
        self._findings.append((record.key, default_key))
        self.logger.debug(
            f"Conflicting default text for {record.key!r}: "
            f"{entry.record.default_key!r} vs {default_key!r}"
        )

    def finalize(self) -> ExtractionResult:
        with self._lock:
            catalog = {key: entry.record.catalog_value for key, entry in self._entries.items()}
            records = [entry.record for entry in self._entries.values()]
            diagnostics = []
            for finding in self._findings:
                if isinstance(finding, Diagnostic):
                    diagnostics.append(finding)
                else:
                    key, default_key = finding
                    entry = self._entries[key]
                    diagnostics.append(self.reporter.conflict(entry.record, entry.conflicts[default_key]))
        return ExtractionResult(catalog=catalog, diagnostics=diagnostics, records=records)
