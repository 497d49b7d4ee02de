"""
Footer flattening.

Footers arrive as free strings or as ``{tags, set, timestamp}`` objects and
always leave as one ``" | "``-separated string ending in the brand suffix.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping

from .resolve import as_string_list

SEPARATOR = " | "

ISO_TIMESTAMP_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?"
    r"(?:Z|[+-]\d{2}:?\d{2})?"
)


def _strip_timestamps(text: str) -> str:
    # Removing one timestamp can splice its neighbours into another
    while True:
        stripped = ISO_TIMESTAMP_PATTERN.sub("", text)
        if stripped == text:
            return stripped
        text = stripped


def _segments(footer: Any) -> List[str]:
    if footer is None:
        return []
    if isinstance(footer, str):
        return footer.split("|")
    if isinstance(footer, Mapping):
        parts = []
        tags = as_string_list(footer.get("tags"))
        if tags:
            parts.extend(" ".join(tags).split("|"))
        footer_set = footer.get("set")
        if isinstance(footer_set, str):
            parts.extend(footer_set.split("|"))
        text = footer.get("text")
        if isinstance(text, str):
            parts.extend(text.split("|"))
        return parts
    if isinstance(footer, (list, tuple)):
        parts = []
        for item in footer:
            parts.extend(_segments(item))
        return parts
    return []


def flatten_footer(footer: Any, brand: str) -> str:
    """
    Flatten any footer representation to a single string.

    ISO-8601 timestamps are removed, blank and repeated segments dropped and
    the brand suffix appended exactly once, so flattening is idempotent.
    """
    brand = brand.strip()
    brand_key = brand.casefold()

    kept: List[str] = []
    seen = set()
    for segment in _segments(footer):
        cleaned = " ".join(_strip_timestamps(segment).split())
        cleaned = cleaned.strip(" •-–—")
        key = cleaned.casefold()
        if not cleaned or key == brand_key or key in seen:
            continue
        seen.add(key)
        kept.append(cleaned)

    kept.append(brand)
    return SEPARATOR.join(kept)
