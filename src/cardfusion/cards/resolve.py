"""
Field resolution helpers.

Each card field is resolved by evaluating an ordered tuple of accessors and
keeping the first non-empty value. Accessors are plain callables taking the
raw input, so every alias path is listed explicitly next to the field it
feeds and can be tested on its own.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, TypeVar
from urllib.parse import urljoin, urlparse

T = TypeVar("T")
Accessor = Callable[[Any], Any]


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def first_non_empty(source: Any, accessors: Sequence[Accessor], default: T = None) -> Any | T:  # type: ignore[assignment]
    """Return the first non-empty value produced by ``accessors`` applied to ``source``."""
    for accessor in accessors:
        value = accessor(source)
        if not is_empty(value):
            return value.strip() if isinstance(value, str) else value
    return default


def get_path(data: Any, path: str) -> Any:
    """Read a dotted path (``"header.name"``) from nested mappings; None when absent."""
    current = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def path(dotted: str) -> Accessor:
    """Accessor reading ``dotted`` from the raw card."""

    def _read(data: Any) -> Any:
        return get_path(data, dotted)

    _read.__name__ = f"path[{dotted}]"
    return _read


def text(dotted: str) -> Accessor:
    """Like :func:`path` but only accepts strings and numbers, returned as stripped text."""

    def _read(data: Any) -> Optional[str]:
        value = get_path(data, dotted)
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return None

    _read.__name__ = f"text[{dotted}]"
    return _read


def as_string_list(value: Any) -> List[str]:
    """Coerce a list of strings or a comma-separated string into stripped, non-blank strings."""
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []

    result = []
    for item in items:
        if isinstance(item, (str, int, float)) and not isinstance(item, bool):
            stripped = str(item).strip()
            if stripped:
                result.append(stripped)
    return result


def unique_casefold(values: Iterable[str], limit: Optional[int] = None) -> List[str]:
    """De-duplicate case-insensitively, keeping the first casing and the original order."""
    seen = set()
    result = []
    for value in values:
        key = value.strip().casefold()
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(value.strip())
        if limit is not None and len(result) >= limit:
            break
    return result


def url_identity(url: str) -> str:
    """``url`` with scheme and host lower-cased; path, query and fragment keep their case."""
    raw = url.strip()
    try:
        parsed = urlparse(raw)
    except ValueError:
        return raw
    return parsed._replace(scheme=parsed.scheme.lower(), netloc=parsed.netloc.lower()).geturl()


def unique_urls(urls: Iterable[str], limit: Optional[int] = None) -> List[str]:
    """De-duplicate URLs by :func:`url_identity`, keeping the first spelling and the original order."""
    seen = set()
    result = []
    for url in urls:
        key = url_identity(url)
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(url.strip())
        if limit is not None and len(result) >= limit:
            break
    return result

def hostname(url: Optional[str]) -> str:
    """Hostname with a leading ``www.`` removed; empty for unparsable input."""
    if not url:
        return ""
    try:
        host = urlparse(url if "://" in url else f"https://{url}").hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def absolutize(base: Optional[str], src: Optional[str]) -> str:
    """Resolve ``src`` against ``base``; protocol-relative URLs become https."""
    if not src:
        return ""
    src = src.strip()
    lowered = src.lower()
    if lowered.startswith(("http://", "https://", "data:")):
        return src
    if src.startswith("//"):
        return "https:" + src
    if not base:
        return src
    try:
        return urljoin(base, src)
    except ValueError:
        return src


def canonical_url(url: Optional[str]) -> str:
    """
    Key used to pair cards with extracted metadata: lower-cased host without
    ``www.``, path without trailing slash, query kept, scheme and fragment dropped.
    """
    if not url:
        return ""
    raw = url.strip()
    try:
        parsed = urlparse(raw if "://" in raw else f"https://{raw}")
    except ValueError:
        return raw.lower()
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    key = host + parsed.path.rstrip("/")
    if parsed.query:
        key += "?" + parsed.query
    return key
