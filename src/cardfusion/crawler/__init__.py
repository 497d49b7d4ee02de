"""
CardFusion Crawler Module

Fetches pages and oEmbed documents for the card pipeline.

Key Features:
- One shared aiohttp session with a fixed header set
- Per-request timeout, redirects followed, no retries
- Failures returned as status-0 responses instead of exceptions
- oEmbed endpoint table for video, music and social platforms
"""

from .http_client import CrawlerResponse, HttpClient
from .oembed import OEMBED_ENDPOINTS, is_usable_oembed, oembed_endpoint

__all__ = [
    "CrawlerResponse",
    "HttpClient",
    "OEMBED_ENDPOINTS",
    "is_usable_oembed",
    "oembed_endpoint",
]
