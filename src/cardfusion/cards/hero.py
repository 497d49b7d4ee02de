"""
Hero payload for the static page publisher.

Turns a fusion result into the small record the publisher renders above the
card: headline, subtitle, hero image, call to action and page slug.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Literal

from ..protocols import FusionResult
from ..utils.slugify import slugify
from .resolve import hostname

HeroMode = Literal["auto", "sell", "info", "hybrid"]

BUY_SIGNALS = re.compile(
    r"(buy|shop|store|product|merch|tee|shirt|hoodie|cap|hat|limited|drop|price|\$\s*[0-9])",
    re.IGNORECASE,
)
RETAIL_HOSTS = re.compile(
    r"(amazon|etsy|ebay|bestbuy|walmart|aliexpress|shopify|myshopify|bigcartel|gumroad|ko-fi)",
    re.IGNORECASE,
)
# "Product Name | Shop" / "Product Name - Shop"
SITE_SUFFIX = re.compile(r"\s+[|\-–]\s+[^|\-–]+$")

SELL_CTA = "Shop Now"
INFO_CTA = "Learn More"


def market_title(name: str) -> str:
    """Card name with a trailing ``| Site`` or ``- Site`` segment removed."""
    name = " ".join((name or "").split())
    trimmed = SITE_SUFFIX.sub("", name).strip()
    return trimmed or name


def has_commerce_signals(result: FusionResult) -> bool:
    card = result.card
    text = " ".join([card.name, card.about] + [effect.text for effect in card.effects])
    if BUY_SIGNALS.search(text):
        return True
    hosts = [hostname(url) for url in [card.source_url, *result.sources] if url]
    return any(RETAIL_HOSTS.search(host) for host in hosts)


def decide_mode(commerce: bool, sell: bool = True, info: bool = False) -> str:
    if commerce and sell and info:
        return "hybrid"
    if commerce and sell:
        return "sell"
    return "info"


def build_hero(result: FusionResult, mode: HeroMode = "auto", sell: bool = True, info: bool = False) -> Dict[str, Any]:
    """
    Build the publisher's hero record for ``result``.

    Args:
        result: The fused card and its sources.
        mode: ``auto`` decides from commerce signals; any other value is used as is.
        sell: Whether selling is enabled for this page.
        info: Whether the informational layout is enabled for this page.

    Returns:
        ``{title, subtitle, image, ctaText, ctaLink, slug, mode, sources}``
    """
    card = result.card
    commerce = has_commerce_signals(result)
    resolved_mode = decide_mode(commerce, sell, info) if mode == "auto" else mode

    title = market_title(card.name)
    subtitle = card.effects[0].text if card.effects else card.about
    link = next((url for url in result.sources if url), card.source_url or "#")
    cta_text = SELL_CTA if resolved_mode == "sell" or (resolved_mode == "hybrid" and commerce) else INFO_CTA

    return {
        "title": title,
        "subtitle": subtitle,
        "image": card.card_images[0].image_url if card.card_images else "",
        "ctaText": cta_text,
        "ctaLink": link,
        "slug": slugify(title) or f"drop-{card.id}",
        "mode": resolved_mode,
        "sources": list(result.sources),
    }
