"""
Core module for ngtranslate-extract
==================================
"""

from .models import Literal, Unresolved, Resource, TranslationRecord
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticReporter, ExtractionReport, Severity
from .markup_scanner import MarkupScanner, parse_markup
from .script_scanner import ScriptScanner, parse_script
from .registry import ExtractionResult, TranslationRegistry
from .serializer import CatalogSerializer
from .extractor import Artifact, ArtifactKind, BuildResult, TranslationExtractor

__all__ = [
    'Literal', 'Unresolved', 'Resource', 'TranslationRecord',
    'Diagnostic', 'DiagnosticKind', 'DiagnosticReporter', 'ExtractionReport', 'Severity',
    'MarkupScanner', 'parse_markup',
    'ScriptScanner', 'parse_script',
    'ExtractionResult', 'TranslationRegistry',
    'CatalogSerializer',
    'Artifact', 'ArtifactKind', 'BuildResult', 'TranslationExtractor',
]
