"""
Tests for the publisher hero payload.
"""

import pytest

from cardfusion.cards.hero import build_hero, decide_mode, has_commerce_signals, market_title
from cardfusion.protocols import CardImage, Effect, FusionResult, NormalizedCard
from cardfusion.utils import slugify


def make_result(name="", about="", effects=(), images=(), source_url="", sources=(), card_id="abc123"):
    card = NormalizedCard(
        id=card_id,
        name=name,
        icon="",
        about=about,
        tribute="",
        effects=[Effect(text) for text in effects],
        rarity="C",
        tags=[],
        card_sets=[],
        timestamp="",
        footer="",
        card_images=[CardImage(url) for url in images],
        frame_type="",
        category="",
        atk=1000,
        defense=1000,
        level=1,
        tribute_count=1,
        source_url=source_url,
    )
    return FusionResult(card=card, sources=list(sources))


@pytest.mark.unit
class TestMarketTitle:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Gadget | Store", "Gadget"),
            ("Gadget - Example Store", "Gadget"),
            ("A - B - C", "A - B"),
            ("Plain  name ", "Plain name"),
            ("| Only", "| Only"),
        ],
    )
    def test_site_suffix_removed(self, name, expected):
        assert market_title(name) == expected


@pytest.mark.unit
class TestModeDecision:
    @pytest.mark.parametrize(
        "commerce, sell, info, expected",
        [
            (True, True, False, "sell"),
            (True, True, True, "hybrid"),
            (True, False, True, "info"),
            (False, True, True, "info"),
            (False, True, False, "info"),
        ],
    )
    def test_decide_mode(self, commerce, sell, info, expected):
        assert decide_mode(commerce, sell, info) == expected

    def test_buy_signal_in_text(self):
        assert has_commerce_signals(make_result(name="Limited Tee"))

    def test_price_signal(self):
        assert has_commerce_signals(make_result(name="Poster", effects=["Only $ 25 this week"]))

    def test_retail_host(self):
        assert has_commerce_signals(make_result(name="Gift idea", sources=["https://www.etsy.com/listing/1"]))

    def test_no_signals(self):
        assert not has_commerce_signals(
            make_result(name="City council approves budget", about="Example News", sources=["https://news.example.com/a"])
        )


@pytest.mark.unit
class TestBuildHero:
    """Test the hero record shape and its fallbacks."""

    def test_commerce_page_sells(self):
        result = make_result(
            name="Limited Tee | Shop Example",
            effects=["Soft cotton"],
            images=["https://shop.example.com/img/a.png"],
            sources=["https://shop.example.com/p/1"],
        )
        hero = build_hero(result)

        assert hero == {
            "title": "Limited Tee",
            "subtitle": "Soft cotton",
            "image": "https://shop.example.com/img/a.png",
            "ctaText": "Shop Now",
            "ctaLink": "https://shop.example.com/p/1",
            "slug": "limited-tee",
            "mode": "sell",
            "sources": ["https://shop.example.com/p/1"],
        }

    def test_news_page_informs(self):
        result = make_result(
            name="City council approves budget", about="Example News", sources=["https://news.example.com/a"]
        )
        hero = build_hero(result)

        assert hero["mode"] == "info"
        assert hero["ctaText"] == "Learn More"
        assert hero["subtitle"] == "Example News"
        assert hero["image"] == ""

    def test_hybrid_mode(self):
        hero = build_hero(make_result(name="Limited Tee"), sell=True, info=True)
        assert hero["mode"] == "hybrid"
        assert hero["ctaText"] == "Shop Now"

    def test_explicit_mode_overrides_signals(self):
        hero = build_hero(make_result(name="Limited Tee"), mode="info")
        assert hero["mode"] == "info"
        assert hero["ctaText"] == "Learn More"

    def test_cta_link_fallbacks(self):
        assert build_hero(make_result(name="x", source_url="https://example.com/x"))["ctaLink"] == "https://example.com/x"
        assert build_hero(make_result(name="x"))["ctaLink"] == "#"

    def test_slug_fallback_uses_card_id(self):
        assert build_hero(make_result(name="!!!", card_id="k9"))["slug"] == "drop-k9"

    def test_slug_length_bounded(self):
        hero = build_hero(make_result(name="word " * 40))
        assert 0 < len(hero["slug"]) <= 64
        assert not hero["slug"].endswith("-")


@pytest.mark.unit
class TestSlugify:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Hello World!", "hello-world"),
            ("  Ünïcode -- Drop #3 ", "n-code-drop-3"),
            ("", ""),
            (None, ""),
            ("***", ""),
        ],
    )
    def test_slugify(self, text, expected):
        assert slugify(text) == expected

    def test_custom_separator(self):
        assert slugify("a b", replacement="_") == "a_b"

    def test_unlimited_length(self):
        assert len(slugify("a" * 100, max_length=None)) == 100
