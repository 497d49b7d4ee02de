"""
CardFusion - turns web pages and partial card records into one canonical,
gamified summary card.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .pipeline import CardPipeline

__all__ = ["__version__", "CardPipeline", "Config"]
