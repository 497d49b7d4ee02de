"""
Multi-card fusion.

Merges the normalized cards of one batch into a single authoritative card.
The merge is order sensitive: a primary card is chosen first and scalar
fields are taken from it before falling back to the remaining cards in
request order.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from ..config.config import CardConfig
from ..protocols import CardImage, Effect, FusionResult, NormalizedCard
from .categories import canonical_label
from .classifier import CategoryClassifier
from .normalizer import format_timestamp
from .resolve import unique_casefold, unique_urls
from .stats import StatSynthesizer, card_identity, short_id

logger = logging.getLogger(__name__)

MAX_EFFECTS = 4
MAX_IMAGES = 3
MAX_TAGS = 12
MAX_CARD_SETS = 6
MAX_SOURCES = 20


def _first_scalar(cards: Sequence[NormalizedCard], name: str, default: str = "") -> str:
    for card in cards:
        value = getattr(card, name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return default


def _first_label(cards: Sequence[NormalizedCard]) -> Optional[str]:
    for card in cards:
        label = canonical_label(card.category) if isinstance(card.category, str) else None
        if label:
            return label
    return None

def select_primary(cards: Sequence[NormalizedCard]) -> NormalizedCard:
    """First card with an image, else the first with an effect, else the first card."""
    for card in cards:
        if card.card_images:
            return card
    for card in cards:
        if card.effects:
            return card
    return cards[0]


class FusionEngine:
    """Fuses any number of normalized cards into one :class:`FusionResult`."""

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

    def fuse(self, cards: Iterable[NormalizedCard], batch_urls: Iterable[str] = ()) -> FusionResult:
        """
        Merge ``cards`` into one card.

        Never raises on empty input; a placeholder card is returned instead.
        Numeric stats and rarity are always re-stamped from the final category.
        """
        cards = [card for card in cards if isinstance(card, NormalizedCard)]
        batch_urls = [url.strip() for url in batch_urls if isinstance(url, str) and url.strip()]

        if not cards:
            logger.debug("Fusing an empty batch, returning the placeholder card")
            return FusionResult(card=self.placeholder(), sources=unique_urls(batch_urls, MAX_SOURCES))

        primary = select_primary(cards)
        ordered = [primary] + [card for card in cards if card is not primary]

        def scalar(name: str, default: str = "") -> str:
            return _first_scalar(ordered, name, default)

        name = scalar("name", self.config.fusion_title)
        source_url = scalar("source_url")
        about = scalar("about")

        effects = self._merge_effects(ordered)
        tags = unique_casefold((tag for card in ordered for tag in card.tags), MAX_TAGS)
        card_sets = unique_casefold((s for card in ordered for s in card.card_sets), MAX_CARD_SETS)
        images = unique_urls((image.image_url for card in ordered for image in card.card_images), MAX_IMAGES)

        category = _first_label(ordered) or self.classifier.classify(
            tags=tags,
            title=name,
            descriptions=[effect.text for effect in effects[:2]],
            brand=about,
        )
        stats = self.synthesizer.synthesize(category, card_identity(name, source_url))

        tribute = scalar("tribute")
        if not tribute or not tribute.replace(self.synthesizer.glyph, "").strip():
            tribute = stats.tribute

        sources = unique_urls(
            [card.source_url for card in ordered if card.source_url] + batch_urls,
            MAX_SOURCES,
        )

        fused = NormalizedCard(
            id=scalar("id") or short_id(source_url or name),
            name=name,
            icon=scalar("icon", stats.icon),
            about=about,
            tribute=tribute,
            effects=effects,
            rarity=stats.rarity,
            tags=tags,
            card_sets=card_sets,
            timestamp=scalar("timestamp") or format_timestamp(self._clock()),
            footer=scalar("footer", self.config.brand_footer),
            card_images=[CardImage(image_url=url) for url in images],
            frame_type=scalar("frame_type", stats.frame_type),
            category=category,
            atk=stats.atk,
            defense=stats.defense,
            level=stats.level,
            tribute_count=stats.tribute_count,
            source_url=source_url,
        )
        logger.debug("Fused %d cards into %s (%s)", len(cards), fused.id, fused.category)
        return FusionResult(card=fused, sources=sources)

    def placeholder(self) -> NormalizedCard:
        """The card returned for an empty batch."""
        name = self.config.fusion_title
        category = self.classifier.classify(title=name)
        stats = self.synthesizer.synthesize(category, card_identity(name, ""))
        return NormalizedCard(
            id=short_id(name),
            name=name,
            icon=stats.icon,
            about="",
            tribute=stats.tribute,
            effects=[],
            rarity=stats.rarity,
            tags=[],
            card_sets=[],
            timestamp=format_timestamp(self._clock()),
            footer=self.config.brand_footer,
            card_images=[],
            frame_type=stats.frame_type,
            category=category,
            atk=stats.atk,
            defense=stats.defense,
            level=stats.level,
            tribute_count=stats.tribute_count,
            source_url="",
        )

    @staticmethod
    def _merge_effects(cards: Sequence[NormalizedCard]) -> List[Effect]:
        seen = set()
        merged: List[Effect] = []
        for card in cards:
            for effect in card.effects:
                key = effect.text.strip().casefold()
                if not key or key in seen:
                    continue
                seen.add(key)
                merged.append(effect)
                if len(merged) >= MAX_EFFECTS:
                    return merged
        return merged
