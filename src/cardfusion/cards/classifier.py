"""
Keyword-driven category classification.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, List, Literal, Optional, Sequence

from .categories import BRAND_KEYWORDS, CATEGORY_LABELS, KEYWORD_RULES, Category, canonical_label
from .stats import stable_hash

logger = logging.getLogger(__name__)


class CategoryClassifier:
    """
    Maps free-text signals to one label of the fixed category enumeration.

    The candidate pool is tags first, then the hint, title, the two
    descriptions and the brand. Brand keywords anywhere in the pool win
    outright; an exact category hint wins next; otherwise the pool is scanned
    in order and the first entry matching any keyword rule decides.
    """

    def __init__(self, fallback: Literal["hash", "random"] = "hash", rng: Optional[random.Random] = None) -> None:
        if fallback not in ("hash", "random"):
            raise ValueError(f"Unknown category fallback: {fallback!r}")
        self.fallback = fallback
        self._rng = rng or random.Random()

    @staticmethod
    def build_pool(
        hint: Optional[str],
        tags: Iterable[str],
        title: Optional[str],
        descriptions: Sequence[Optional[str]],
        brand: Optional[str],
    ) -> List[str]:
        raw: List[object] = list(tags or [])
        raw.append(hint)
        raw.append(title)
        raw.extend(list(descriptions or [])[:2])
        raw.append(brand)

        pool = []
        for item in raw:
            if item is None:
                continue
            text = str(item).strip().lower()
            if text:
                pool.append(text)
        return pool

    def classify(
        self,
        hint: Optional[str] = None,
        tags: Iterable[str] = (),
        title: Optional[str] = None,
        descriptions: Sequence[Optional[str]] = (),
        brand: Optional[str] = None,
    ) -> str:
        pool = self.build_pool(hint, tags, title, descriptions, brand)

        if any(keyword in entry for entry in pool for keyword in BRAND_KEYWORDS):
            return Category.ZETSUMETSU.value

        if isinstance(hint, str):
            exact = canonical_label(hint)
            if exact:
                return exact

        for entry in pool:
            for keywords, category in KEYWORD_RULES:
                if any(keyword in entry for keyword in keywords):
                    return category.value

        return self._fallback(pool)

    def _fallback(self, pool: List[str]) -> str:
        if self.fallback == "random":
            return self._rng.choice(CATEGORY_LABELS)
        label = CATEGORY_LABELS[stable_hash("|".join(pool)) % len(CATEGORY_LABELS)]
        logger.debug("No category rule matched, using hash fallback: %s", label)
        return label
