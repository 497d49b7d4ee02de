"""
Card normalization.

Reconciles a partial card of unknown shape (enrichment output, library
entries, previously normalized cards) and/or extracted page metadata into
the canonical :class:`~cardfusion.protocols.NormalizedCard` schema.

Every field is resolved with :func:`~cardfusion.cards.resolve.first_non_empty`
over the alias chains declared at module level below. Normalizing an
already-normalized card reproduces it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from dateutil import parser as dateutil_parser

from ..config.config import CardConfig
from ..protocols import CardImage, Effect, ExtractedMetadata, NormalizedCard
from .classifier import CategoryClassifier
from .footer import flatten_footer
from .resolve import (
    absolutize,
    as_string_list,
    first_non_empty,
    get_path,
    hostname,
    path,
    text,
    unique_casefold,
    unique_urls,
)
from .stats import StatSynthesizer, card_identity, short_id

logger = logging.getLogger(__name__)

MAX_EFFECTS = 4
MAX_SYNTHESIZED_EFFECTS = 3
MAX_EFFECT_CHARS = 280
MAX_TAGS = 12
MAX_CARD_SETS = 6
MAX_IMAGES = 3


@dataclass
class CardSource:
    """The inputs one card is resolved from."""

    raw: Mapping[str, Any]
    metadata: Optional[ExtractedMetadata]
    source_url: str = ""


SourceAccessor = Callable[[CardSource], Any]


def _raw(accessor: Callable[[Any], Any]) -> SourceAccessor:
    return lambda src: accessor(src.raw)


def _meta(attribute: str) -> SourceAccessor:
    return lambda src: getattr(src.metadata, attribute, None) if src.metadata is not None else None


# --- Alias chains ---

SOURCE_URL_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(text("sourceUrl")),
    _raw(text("source_url")),
    _raw(text("_source_url")),
    _raw(text("url")),
    _raw(text("link")),
    _raw(text("links.url")),
    _meta("url"),
)

ID_CHAIN: Tuple[SourceAccessor, ...] = (_raw(text("id")),)

NAME_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(text("name")),
    _raw(text("title")),
    _raw(text("cardName")),
    _raw(text("header.name")),
    _raw(text("header.title")),
    _raw(text("hero.title")),
    _raw(text("banner.title")),
    _meta("title"),
    lambda src: hostname(src.source_url),
    lambda src: src.source_url,
)

ABOUT_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(text("about")),
    _raw(text("typeBanner.about")),
    _raw(text("brand")),
    _raw(text("siteName")),
    _raw(text("source")),
    _meta("site_name"),
    lambda src: hostname(src.source_url),
)

CATEGORY_HINT_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(text("category")),
    _raw(text("type")),
)

ICON_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(text("icon")),
    _raw(text("header.icon")),
    lambda src: "".join(as_string_list(get_path(src.raw, "emojis"))),
)

TRIBUTE_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(text("tribute")),
    _raw(text("typeBanner.tribute")),
)

FRAME_TYPE_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(text("frameType")),
    _raw(text("frame_type")),
)

TIMESTAMP_CHAIN: Tuple[SourceAccessor, ...] = (
    _raw(path("timestamp")),
    _raw(path("footer.timestamp")),
    _raw(path("date")),
)

# Flat description aliases used when no explicit effect list exists.
_DESCRIPTION_TEXTS: Tuple[SourceAccessor, ...] = (
    _meta("description"),
    lambda src: first_non_empty(src.raw, (text("description"), text("desc"), text("desc1"), text("snippet"))),
    _raw(text("desc2")),
    _meta("title"),
)


def _truncate(value: str, limit: int = MAX_EFFECT_CHARS) -> str:
    value = " ".join(value.split())
    if len(value) <= limit:
        return value
    return value[: limit - 1].rstrip() + "…"


def _coerce_effect(entry: Any) -> Optional[Dict[str, str]]:
    if isinstance(entry, str):
        return {"text": entry.strip()} if entry.strip() else None
    if not isinstance(entry, Mapping):
        return None

    effect_text = first_non_empty(entry, (text("text"), text("description"), text("effect")), "")
    if not effect_text:
        return None
    coerced = {"text": effect_text}
    icons = text("icons")(entry)
    emoji = text("emoji")(entry)
    if icons:
        coerced["icons"] = icons
    if emoji:
        coerced["emoji"] = emoji
    return coerced


def _effect_list(accessor: Callable[[Any], Any]) -> SourceAccessor:
    def _read(src: CardSource) -> List[Dict[str, str]]:
        value = accessor(src.raw)
        if isinstance(value, (str, Mapping)):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [effect for effect in map(_coerce_effect, value) if effect]

    return _read


def _synthesized_effects(src: CardSource) -> List[Dict[str, str]]:
    texts = []
    for accessor in _DESCRIPTION_TEXTS:
        value = accessor(src)
        if isinstance(value, str) and value.strip():
            texts.append(_truncate(value))
    return [{"text": t} for t in unique_casefold(texts, MAX_SYNTHESIZED_EFFECTS)]


EFFECTS_CHAIN: Tuple[SourceAccessor, ...] = (
    _effect_list(path("effects")),
    _effect_list(path("effectBox.effects")),
    _effect_list(path("effect_box.effects")),
    _effect_list(path("effectBox.description")),
    _synthesized_effects,
)


def _image_urls(value: Any) -> List[str]:
    if isinstance(value, (str, Mapping)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []

    urls = []
    for entry in value:
        if isinstance(entry, str):
            url = entry
        elif isinstance(entry, Mapping):
            url = first_non_empty(entry, (text("image_url"), text("url"), text("src")), "")
        else:
            continue
        if url and url.strip():
            urls.append(url.strip())
    return urls


def _image_list(accessor: Callable[[Any], Any]) -> SourceAccessor:
    return lambda src: _image_urls(accessor(src.raw))


IMAGES_CHAIN: Tuple[SourceAccessor, ...] = (
    _image_list(path("card_images")),
    _image_list(path("images")),
    _image_list(path("artwork.url")),
    _image_list(path("hero.image")),
    _image_list(path("image")),
    _image_list(path("img")),
    _image_list(path("thumbnail")),
    lambda src: _image_urls(src.metadata.image) if src.metadata is not None else [],
)

CARD_SETS_CHAIN: Tuple[SourceAccessor, ...] = (
    lambda src: as_string_list(get_path(src.raw, "card_sets")),
    lambda src: as_string_list(get_path(src.raw, "sets")),
    lambda src: [s for s in [text("footer.set")(src.raw)] if s],
)


def _tags(src: CardSource) -> List[str]:
    collected: List[str] = []
    collected.extend(as_string_list(get_path(src.raw, "tags")))
    collected.extend(as_string_list(get_path(src.raw, "footer.tags")))
    collected.extend(as_string_list(get_path(src.raw, "keywords")))
    if src.metadata is not None:
        collected.extend(src.metadata.keywords)
    return unique_casefold(collected, MAX_TAGS)


def source_url_of(raw: Any) -> str:
    """Source URL a raw card refers to, used to pair it with extracted metadata."""
    if not isinstance(raw, Mapping):
        return ""
    return first_non_empty(CardSource(raw=raw, metadata=None), SOURCE_URL_CHAIN, "")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Leniently parse ISO strings, free-form dates and epoch numbers; None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            seconds = value / 1000.0 if value > 1e11 else float(value)
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        if isinstance(value, str) and value.strip():
            parsed = dateutil_parser.parse(value.strip())
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None
    return None


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CardNormalizer:
    """Builds canonical cards from partial card objects and page metadata."""

    def __init__(
        self,
        config: Optional[CardConfig] = None,
        classifier: Optional[CategoryClassifier] = None,
        synthesizer: Optional[StatSynthesizer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or CardConfig()
        self.classifier = classifier or CategoryClassifier(fallback=self.config.category_fallback)
        self.synthesizer = synthesizer or StatSynthesizer(mode=self.config.stat_mode, glyph=self.config.tribute_glyph)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def normalize(self, raw: Any = None, metadata: Optional[ExtractedMetadata] = None) -> NormalizedCard:
        """
        Normalize one card.

        Args:
            raw: Partial card of any historical shape; a NormalizedCard, a
                mapping, a bare URL string or None.
            metadata: Extracted metadata for the card's page, if any.

        Returns:
            The card in canonical form. Never raises for missing or
            malformed optional fields.
        """
        if isinstance(raw, NormalizedCard):
            raw = raw.to_dict()
        elif isinstance(raw, str):
            raw = {"url": raw}
        elif not isinstance(raw, Mapping):
            raw = {}

        src = CardSource(raw=raw, metadata=metadata)
        src.source_url = first_non_empty(src, SOURCE_URL_CHAIN, "")

        name = first_non_empty(src, NAME_CHAIN, "")
        about = first_non_empty(src, ABOUT_CHAIN, "")
        tags = _tags(src)
        effect_fields: List[Dict[str, str]] = first_non_empty(src, EFFECTS_CHAIN, [])
        effect_fields = self._dedupe_effects(effect_fields)

        category = self.classifier.classify(
            hint=first_non_empty(src, CATEGORY_HINT_CHAIN),
            tags=tags,
            title=name,
            descriptions=[entry["text"] for entry in effect_fields[:2]],
            brand=about,
        )
        stats = self.synthesizer.synthesize(category, card_identity(name, src.source_url))

        effects = [
            Effect(text=entry["text"], icons=entry.get("icons") or stats.icon, emoji=entry.get("emoji") or stats.emoji)
            for entry in effect_fields
        ]

        timestamp = None
        for accessor in TIMESTAMP_CHAIN:
            timestamp = parse_timestamp(accessor(src))
            if timestamp is not None:
                break
        moment = timestamp or self._clock()

        card_sets = first_non_empty(src, CARD_SETS_CHAIN, [])
        if not card_sets and about:
            card_sets = [about, f"{moment.year} {about}"]

        images = [absolutize(src.source_url, url) for url in first_non_empty(src, IMAGES_CHAIN, [])]

        card = NormalizedCard(
            id=first_non_empty(src, ID_CHAIN) or short_id(src.source_url or name),
            name=name,
            icon=first_non_empty(src, ICON_CHAIN, stats.icon),
            about=about,
            tribute=first_non_empty(src, TRIBUTE_CHAIN, stats.tribute),
            effects=effects,
            rarity=stats.rarity,
            tags=tags,
            card_sets=unique_casefold(card_sets, MAX_CARD_SETS),
            timestamp=format_timestamp(moment),
            footer=flatten_footer(get_path(raw, "footer"), self.config.brand_footer),
            card_images=[CardImage(image_url=url) for url in unique_urls(images, MAX_IMAGES)],
            frame_type=first_non_empty(src, FRAME_TYPE_CHAIN, stats.frame_type),
            category=category,
            atk=stats.atk,
            defense=stats.defense,
            level=stats.level,
            tribute_count=stats.tribute_count,
            source_url=src.source_url,
        )
        logger.debug("Normalized card %s (%s)", card.id, card.category)
        return card

    @staticmethod
    def _dedupe_effects(entries: List[Dict[str, str]]) -> List[Dict[str, str]]:
        seen = set()
        kept = []
        for entry in entries:
            key = entry["text"].strip().casefold()
            if key in seen:
                continue
            seen.add(key)
            kept.append(entry)
            if len(kept) >= MAX_EFFECTS:
                break
        return kept
