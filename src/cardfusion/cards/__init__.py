"""
Card building: classification, stat synthesis, normalization and fusion.
"""

from .categories import CATEGORY_LABELS, CATEGORY_TABLE, Category, CategoryProfile, profile_for
from .classifier import CategoryClassifier
from .footer import flatten_footer
from .fusion import FusionEngine
from .hero import build_hero
from .normalizer import CardNormalizer
from .stats import CardStats, StatSynthesizer, short_id, stable_hash

__all__ = [
    "CATEGORY_LABELS",
    "CATEGORY_TABLE",
    "CardNormalizer",
    "CardStats",
    "Category",
    "CategoryClassifier",
    "CategoryProfile",
    "FusionEngine",
    "StatSynthesizer",
    "build_hero",
    "flatten_footer",
    "profile_for",
    "short_id",
    "stable_hash",
]
