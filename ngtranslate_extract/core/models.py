"""
Translation Records
===================

Normalized values produced by the markup and script scanners.

An id or default text is either a ``Literal`` (statically known string) or an
``Unresolved`` expression whose raw source text is kept for diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple, Union


@dataclass(frozen=True)
class Literal:
    """A string known at extraction time."""
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Unresolved:
    """A value computed at runtime; ``expression`` is its raw source text."""
    expression: str

    def __str__(self) -> str:
        return self.expression


TextValue = Union[Literal, Unresolved]


@dataclass(frozen=True)
class Resource:
    """Where a translation usage was found (1-based line and column)."""
    path: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if not self.line:
            return self.path
        return f"{self.path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class TranslationRecord:
    """A translation id with its default text and the places it was used."""
    id: TextValue
    default_text: Optional[TextValue] = None
    resources: Tuple[Resource, ...] = field(default_factory=tuple)

    @property
    def is_dynamic(self) -> bool:
        return isinstance(self.id, Unresolved) or isinstance(self.default_text, Unresolved)

    @property
    def key(self) -> str:
        """The id as plain text (raw expression text for dynamic ids)."""
        return str(self.id)

    @property
    def default_key(self) -> Optional[str]:
        if self.default_text is None:
            return None
        return str(self.default_text)

    @property
    def catalog_value(self) -> str:
        # absent default texts are persisted as empty strings
        if self.default_text is None:
            return ""
        return str(self.default_text)

    def is_mergeable_with(self, other: "TranslationRecord") -> bool:
        return self.id == other.id and self.default_text == other.default_text

    def conflicts_with(self, other: "TranslationRecord") -> bool:
        return self.id == other.id and self.default_text != other.default_text

    def with_resources(self, resources: Iterable[Resource]) -> "TranslationRecord":
        """Return a copy whose resources are extended, keeping first-seen order."""
        merged = list(self.resources)
        for resource in resources:
            if resource not in merged:
                merged.append(resource)
        return TranslationRecord(self.id, self.default_text, tuple(merged))
