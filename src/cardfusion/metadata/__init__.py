"""
CardFusion Metadata Extraction Module

Turns fetched pages (or oEmbed documents) into the metadata a card is built from.

Components:
- MetadataExtractor: Field resolution for title, description, hero image,
  site name, keywords, author and video
- StructuredDataParser: Meta tag / OpenGraph / Twitter Card / link collection
- image_filter: Tracker and tracking-pixel rejection, brand icon fallbacks
"""

from .image_filter import BRAND_ICONS, TRACKER_PATTERNS, brand_icon, is_acceptable_image, is_tracking_pixel
from .metadata_extractor import MetadataExtractor, split_keywords
from .structured_data_parser import StructuredDataParser, StructuredDataResult

__all__ = [
    # Main extractor
    "MetadataExtractor",
    "split_keywords",
    # Document head parsing
    "StructuredDataParser",
    "StructuredDataResult",
    # Image filtering
    "BRAND_ICONS",
    "TRACKER_PATTERNS",
    "brand_icon",
    "is_acceptable_image",
    "is_tracking_pixel",
]
