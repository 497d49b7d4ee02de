"""Utility modules for CardFusion."""

from .slugify import slugify

__all__ = ["slugify"]
