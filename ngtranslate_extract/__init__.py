"""
ngtranslate-extract - angular-translate id extraction
=====================================================

Extracts translation ids and default texts from HTML templates and JavaScript
sources that use angular-translate:
- `translate` element and attribute forms, `translate-attr-*` sub-translations
- `$translate(...)` calls, however the service reference is reached
- conflict detection between default texts across all files of a build
- a single `translations.js` catalog per build

License: MIT
"""

from .version import VERSION

__version__ = VERSION
