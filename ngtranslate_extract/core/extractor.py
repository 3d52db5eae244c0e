"""
Translation Extractor
=====================

Entry point for build tools: hand over artifacts (path + source), get the
catalog and diagnostics back.

Artifacts are parsed and scanned independently, optionally on a thread pool.
Scan results are merged in the order the artifacts were given, so the
first-seen default text does not depend on thread timing.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ngtranslate_extract.exceptions import ParseError
from ngtranslate_extract.utils.config import MarkupSettings, OutputSettings, ScriptSettings
from .diagnostics import Diagnostic, DiagnosticReporter
from .markup_scanner import MarkupScanner, parse_markup
from .models import TranslationRecord
from .registry import ExtractionResult, TranslationRegistry
from .script_scanner import ScriptScanner, parse_script

ScanItem = Union[TranslationRecord, Diagnostic]


class ArtifactKind(Enum):
    MARKUP = "markup"
    SCRIPT = "script"


@dataclass(frozen=True)
class Artifact:
    path: str
    source: str
    kind: ArtifactKind


@dataclass
class BuildResult:
    """Extraction result plus the artifacts that could not be parsed."""
    result: ExtractionResult
    parse_errors: List[ParseError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.parse_errors) or self.result.has_errors


class TranslationExtractor:
    """Scans artifacts and merges them into one catalog per build."""

    def __init__(self, markup_settings: Optional[MarkupSettings] = None,
                 script_settings: Optional[ScriptSettings] = None,
                 output_settings: Optional[OutputSettings] = None):
        self.logger = logging.getLogger(__name__)
        self.markup_settings = markup_settings or MarkupSettings()
        self.script_settings = script_settings or ScriptSettings()
        self.output_settings = output_settings or OutputSettings()
        self.reporter = DiagnosticReporter(self.markup_settings.suppress_attribute)
        self.markup_scanner = MarkupScanner(self.markup_settings, self.reporter)
        self.script_scanner = ScriptScanner(self.script_settings, self.reporter)

    def kind_for(self, path: str) -> Optional[ArtifactKind]:
        suffix = Path(path).suffix.lower()
        if suffix in self.output_settings.markup_extensions:
            return ArtifactKind.MARKUP
        if suffix in self.output_settings.script_extensions:
            return ArtifactKind.SCRIPT
        return None

    def artifact(self, path: str, source: str) -> Optional[Artifact]:
        kind = self.kind_for(path)
        if kind is None:
            return None
        return Artifact(path, source, kind)

    def scan_artifact(self, artifact: Artifact) -> Tuple[ScanItem, ...]:
        """Parse and scan one artifact. Raises ParseError for malformed sources."""
        if artifact.kind is ArtifactKind.MARKUP:
            document = parse_markup(artifact.source)
            items = tuple(self.markup_scanner.scan(document, artifact.path))
        else:
            tree = parse_script(artifact.source, artifact.path)
            items = tuple(self.script_scanner.scan(tree, artifact.path))
        self.logger.debug(f"{artifact.path}: {len(items)} translation items")
        return items

    def _safe_scan(self, artifact: Artifact) -> Union[Tuple[ScanItem, ...], ParseError]:
        try:
            return self.scan_artifact(artifact)
        except ParseError as e:
            return e

    def extract(self, artifacts: Iterable[Artifact], workers: Optional[int] = None) -> BuildResult:
        artifacts: Sequence[Artifact] = list(artifacts)
        workers = self.output_settings.workers if workers is None else workers
        registry = TranslationRegistry(self.reporter)
        parse_errors: List[ParseError] = []

        if workers and workers > 1 and len(artifacts) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields in submission order
                outcomes = list(executor.map(self._safe_scan, artifacts))
        else:
            outcomes = [self._safe_scan(a) for a in artifacts]

        for artifact, outcome in zip(artifacts, outcomes):
            if isinstance(outcome, ParseError):
                self.logger.error(f"Could not parse {artifact.path}: {outcome}")
                parse_errors.append(outcome)
                continue
            registry.consume(outcome)

        result = registry.finalize()
        self.logger.info(
            f"Extracted {len(result.catalog)} translations from {len(artifacts)} files "
            f"({len(result.errors)} errors, {len(result.warnings)} warnings)"
        )
        return BuildResult(result=result, parse_errors=parse_errors)
