"""
Encoding helpers to read source artifacts without crashing on bad bytes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import chardet

logger = logging.getLogger(__name__)


def read_text_safely(path: Path, preferred: Tuple[str, ...] = ("utf-8-sig", "utf-8")) -> Optional[str]:
    """
    Read file as text with tolerant fallbacks:
    - try preferred encodings first
    - then chardet detection with errors='replace'
    Returns None on I/O failure.
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
        return None

    for enc in preferred:
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue

    detected = chardet.detect(raw)
    enc = detected.get("encoding") or "utf-8"
    logger.debug(f"Decoding {path} as {enc} (confidence {detected.get('confidence')})")
    try:
        return raw.decode(enc, errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")
