"""
Markup Scanner
==============

Finds angular-translate usages in HTML templates:

    <h1 translate>Login</h1>                          id "Login"
    <h1 translate="Login">Anmelden</h1>               id "Login", default "Anmelden"
    <translate translate-default="Abmelden">Logout</translate>
    <img translate-attr-title="image-title"
         translate-default-attr-title="A picture" title="...">

Every element of the document is visited; each translation site yields one
record, plus one record per ``translate-attr-*`` declaration.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional, Tuple, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ngtranslate_extract.utils.config import MarkupSettings
from .diagnostics import Diagnostic, DiagnosticReporter
from .models import Literal, Resource, TextValue, TranslationRecord, Unresolved

ScanItem = Union[TranslationRecord, Diagnostic]


def parse_markup(source: str) -> BeautifulSoup:
    """Parse an HTML template. ``html.parser`` keeps source line/column per tag."""
    return BeautifulSoup(source, "html.parser", multi_valued_attributes=None)


def direct_text(tag: Tag) -> str:
    """Trimmed text of the element itself; text inside child elements is ignored."""
    parts = [
        str(child) for child in tag.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    ]
    return "".join(parts).strip()


class MarkupScanner:
    """Extracts translation records from a parsed HTML document."""

    def __init__(self, settings: Optional[MarkupSettings] = None,
                 reporter: Optional[DiagnosticReporter] = None):
        self.logger = logging.getLogger(__name__)
        self.settings = settings or MarkupSettings()
        self.reporter = reporter or DiagnosticReporter(self.settings.suppress_attribute)
        self._interpolation_re = re.compile(
            re.escape(self.settings.interpolation_start) + r'.*?' + re.escape(self.settings.interpolation_end),
            re.DOTALL
        )

    def resolve(self, value: str) -> TextValue:
        """A value containing an interpolation is only known at runtime."""
        if self._interpolation_re.search(value):
            return Unresolved(value)
        return Literal(value)

    def scan(self, document: BeautifulSoup, path: str) -> Iterator[ScanItem]:
        for node in document.descendants:
            if isinstance(node, Tag):
                yield from self.scan_element(node, path)

    def scan_element(self, tag: Tag, path: str) -> Iterator[ScanItem]:
        resource = self._resource(tag, path)
        suppressed = self.settings.suppress_attribute in tag.attrs

        if self.is_translation_site(tag):
            item = self._primary_record(tag, resource)
            yield from self._emit(item, suppressed)

        for name in list(tag.attrs):
            if name.startswith(self.settings.attribute_translation_prefix):
                target = name[len(self.settings.attribute_translation_prefix):]
                if not target:
                    continue
                item = self._attribute_record(tag, target, resource)
                yield from self._emit(item, suppressed)

    def is_translation_site(self, tag: Tag) -> bool:
        return tag.name == self.settings.element_name or self.settings.attribute_name in tag.attrs

    def _primary_record(self, tag: Tag, resource: Resource) -> Union[TranslationRecord, Diagnostic]:
        text = direct_text(tag)
        id_value = (tag.get(self.settings.id_attribute) or "").strip()

        if id_value:
            translation_id = self.resolve(id_value)
            default_source = text
        else:
            translation_id = self.resolve(text)
            default_source = ""

        explicit_default = tag.get(self.settings.default_text_attribute)
        default_text = self._default_text(explicit_default, default_source)
        return self._record(translation_id, default_text, resource)

    def _attribute_record(self, tag: Tag, target: str, resource: Resource) -> Union[TranslationRecord, Diagnostic]:
        id_value = (tag.get(self.settings.attribute_translation_prefix + target) or "").strip()
        target_value = (tag.get(target) or "").strip()

        if id_value:
            translation_id = self.resolve(id_value)
            default_source = target_value
        else:
            translation_id = self.resolve(target_value)
            default_source = ""

        explicit_default = tag.get(self.settings.attribute_default_text_prefix + target)
        default_text = self._default_text(explicit_default, default_source)
        return self._record(translation_id, default_text, resource)

    def _default_text(self, explicit: Optional[str], fallback: str) -> Optional[TextValue]:
        if explicit is not None:
            return self.resolve(explicit)
        if fallback:
            return self.resolve(fallback)
        return None

    def _record(self, translation_id: TextValue, default_text: Optional[TextValue],
                resource: Resource) -> Union[TranslationRecord, Diagnostic]:
        if translation_id == Literal(""):
            return self.reporter.empty_id(resource)
        return TranslationRecord(translation_id, default_text, (resource,))

    def _emit(self, item: ScanItem, suppressed: bool) -> Iterator[ScanItem]:
        if isinstance(item, TranslationRecord) and item.is_dynamic and suppressed:
            self.logger.debug(f"Suppressed dynamic translation {item.key!r} at {item.resources[0]}")
            return
        yield item

    @staticmethod
    def _resource(tag: Tag, path: str) -> Resource:
        line = tag.sourceline or 0
        column = (tag.sourcepos or 0) + 1 if line else 0
        return Resource(path, line, column)


def scan_markup(source: str, path: str, settings: Optional[MarkupSettings] = None) -> Tuple[ScanItem, ...]:
    """Parse and scan a template in one go."""
    return tuple(MarkupScanner(settings).scan(parse_markup(source), path))
