"""
Batch request parsing.

Requests have arrived in several historical shapes over time (a link list,
a single URL, enriched card lists, crawl result lists). Each shape has its
own adapter; adapters are applied in order and each contributes to one
:class:`BatchRequest`.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Tuple, Union

from .exceptions import InvalidRequestError
from .protocols import ExtractedMetadata

HERO_MODES = ("auto", "sell", "info", "hybrid")


class RequestShape(str, Enum):
    """Historical request shapes."""

    LINKS = "links"
    SINGLE_URL = "single_url"
    CARDS = "cards"
    RESULTS = "results"


@dataclass
class BatchRequest:
    """Everything one batch request asks for, independent of the shape it arrived in."""

    session: str = ""
    urls: List[str] = field(default_factory=list)
    cards: List[Dict[str, Any]] = field(default_factory=list)
    results: List[ExtractedMetadata] = field(default_factory=list)
    shapes: List[RequestShape] = field(default_factory=list)
    mode: str = "auto"
    sell: bool = True
    info: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.urls or self.cards or self.results)

    @property
    def batch_urls(self) -> List[str]:
        """Requested URLs plus the URLs of supplied crawl results."""
        return self.urls + [result.url for result in self.results if result.url]


def new_session_id() -> str:
    """``sess-`` followed by the current time in base-36 milliseconds."""
    value = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while value:
        value, remainder = divmod(value, 36)
        encoded = digits[remainder] + encoded
    return f"sess-{encoded or '0'}"


# --- Shape adapters ---


def _links(body: Mapping[str, Any], request: BatchRequest) -> bool:
    links = body.get("links")
    if not isinstance(links, list) or not links:
        return False
    request.urls.extend(link.strip() for link in links if isinstance(link, str) and link.strip())
    return True


def _single_url(body: Mapping[str, Any], request: BatchRequest) -> bool:
    url = body.get("url")
    if not isinstance(url, str) or not url.strip():
        return False
    request.urls.append(url.strip())
    return True


def _cards(body: Mapping[str, Any], request: BatchRequest) -> bool:
    cards = body.get("cards")
    if not isinstance(cards, list):
        return False
    request.cards.extend(card for card in cards if isinstance(card, Mapping))
    return True


def _results(body: Mapping[str, Any], request: BatchRequest) -> bool:
    matched = False
    for key in ("results", "items"):
        items = body.get(key)
        if not isinstance(items, list):
            continue
        matched = True
        for item in items:
            if isinstance(item, Mapping) and not item.get("error"):
                request.results.append(ExtractedMetadata.from_dict(dict(item)))
    return matched


SHAPE_ADAPTERS: Tuple[Tuple[RequestShape, Callable[[Mapping[str, Any], BatchRequest], bool]], ...] = (
    (RequestShape.LINKS, _links),
    (RequestShape.SINGLE_URL, _single_url),
    (RequestShape.CARDS, _cards),
    (RequestShape.RESULTS, _results),
)


def _decode(body: Union[str, bytes, Mapping[str, Any], None]) -> Mapping[str, Any]:
    if isinstance(body, (bytes, bytearray)):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidRequestError("Invalid JSON body") from e
    if isinstance(body, str):
        try:
            body = json.loads(body or "{}")
        except ValueError as e:
            raise InvalidRequestError("Invalid JSON body") from e
    if not isinstance(body, Mapping):
        raise InvalidRequestError("Request body must be a JSON object")

    wrapped = body.get("data")
    return wrapped if isinstance(wrapped, Mapping) else body


def parse_batch_request(body: Union[str, bytes, Mapping[str, Any], None], *, require_urls: bool = False) -> BatchRequest:
    """
    Parse a request body of any supported shape.

    Args:
        body: Raw JSON text/bytes or an already decoded object, optionally
            wrapped as ``{"data": {...}}``
        require_urls: Reject bodies that carry no URLs to crawl

    Returns:
        The normalized BatchRequest

    Raises:
        InvalidRequestError: Unparsable JSON, a non-object body, or a body
            with nothing to work on
    """
    data = _decode(body)

    session = data.get("session")
    request = BatchRequest(session=session.strip() if isinstance(session, str) and session.strip() else new_session_id())

    for shape, adapter in SHAPE_ADAPTERS:
        if adapter(data, request):
            request.shapes.append(shape)

    mode = data.get("mode")
    if isinstance(mode, str) and mode.strip().lower() in HERO_MODES:
        request.mode = mode.strip().lower()
    defaults = data.get("defaults")
    if isinstance(defaults, Mapping):
        request.sell = bool(defaults.get("sell", request.sell))
        request.info = bool(defaults.get("info", request.info))

    if require_urls and not request.urls:
        raise InvalidRequestError("No links provided")
    if request.is_empty:
        raise InvalidRequestError("No links, cards or results provided")
    return request
