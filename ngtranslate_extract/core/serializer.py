"""
Catalog Serializer
==================

Writes the catalog as the ``translations.js`` asset: a flat object literal
(JSON) of id -> default text, keys in first-seen order.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

from ngtranslate_extract.exceptions import SerializationError

DEFAULT_ASSET_NAME = "translations.js"


class CatalogSerializer:
    """Renders catalogs and reads them back."""

    def __init__(self, asset_name: str = DEFAULT_ASSET_NAME, indent: Optional[int] = None):
        self.logger = logging.getLogger(__name__)
        self.asset_name = asset_name
        self.indent = indent or None

    def render(self, catalog: Mapping[str, str]) -> str:
        for key, value in catalog.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise SerializationError(f"Catalog entries must map strings to strings, got {key!r}: {value!r}")
        return json.dumps(dict(catalog), ensure_ascii=False, indent=self.indent)

    def parse(self, content: str) -> Dict[str, str]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid translations asset: {e}") from e
        if not isinstance(data, dict):
            raise SerializationError("Translations asset must contain an object literal")
        for key, value in data.items():
            if not isinstance(value, str):
                raise SerializationError(f"Default text of {key!r} is not a string")
        return data

    def write(self, catalog: Mapping[str, str], output_dir) -> Path:
        """Write the asset into ``output_dir`` and return its path."""
        content = self.render(catalog)
        path = Path(output_dir) / self.asset_name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        self.logger.info(f"Wrote {len(catalog)} translations to {path}")
        return path

    def read(self, path) -> Dict[str, str]:
        return self.parse(Path(path).read_text(encoding="utf-8"))
