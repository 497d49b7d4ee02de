"""
Tests for the card metadata extractor.

Covers the field fallback chains for HTML documents and the oEmbed mapping.
"""

import pytest

from cardfusion.metadata import MetadataExtractor
from cardfusion.metadata.metadata_extractor import handle_from_social_title, split_keywords, title_keywords

PAGE_URL = "https://example.com/tech/chip"


def page(head: str = "", body: str = "") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


@pytest.mark.unit
class TestMetadataExtractorHead:
    """Test extraction from head-level signals."""

    def test_article_fields(self, extractor, article_html):
        metadata = extractor.extract(article_html, PAGE_URL)

        assert metadata.url == PAGE_URL
        assert metadata.title == "Tech giant unveils new chip"
        assert metadata.description == "Chipmakers race to ship faster silicon."
        assert metadata.image == "https://example.com/images/hero.jpg"
        assert metadata.site_name == "Example News"
        assert metadata.keywords == ["chips", "Hardware"]
        assert metadata.author == "Dana Reporter"
        assert metadata.video == "https://video.example.com/v/1.mp4"

    def test_title_falls_back_to_title_tag(self, extractor):
        metadata = extractor.extract(page("<title> The Quick brown fox and the lazy dogs </title>"), PAGE_URL)

        assert metadata.title == "The Quick brown fox and the lazy dogs"
        assert metadata.keywords == ["Quick", "brown", "lazy", "dogs"]

    def test_twitter_tags_used_when_og_missing(self, extractor):
        head = (
            '<meta name="twitter:title" content="Bird title">'
            '<meta name="twitter:description" content="Bird description">'
            '<meta name="twitter:image" content="https://cdn.example.com/bird.png">'
        )
        metadata = extractor.extract(page(head), PAGE_URL)

        assert metadata.title == "Bird title"
        assert metadata.description == "Bird description"
        assert metadata.image == "https://cdn.example.com/bird.png"

    def test_site_name_falls_back_to_host(self, extractor):
        metadata = extractor.extract(page("<title>x</title>"), "https://www.example.com/a")
        assert metadata.site_name == "example.com"

    def test_author_from_social_title(self, extractor):
        head = '<meta property="og:title" content="@spz.drops • Instagram photos and videos">'
        metadata = extractor.extract(page(head), "https://www.instagram.com/spz.drops/")
        assert metadata.author == "@spz.drops"


@pytest.mark.unit
class TestMetadataExtractorDescription:
    def test_first_long_paragraph(self, extractor):
        body = (
            "<p>Too short.</p>"
            "<p>We use cookies to improve your experience on this website, please accept them to continue reading.</p>"
            "<p>The city council approved the new transit budget after a long debate that ran late into the night.</p>"
        )
        metadata = extractor.extract(page(body=body), PAGE_URL)
        assert metadata.description.startswith("The city council approved")

    def test_heading_when_no_paragraph(self, extractor):
        body = "<h2>Council approves the transit budget after debate</h2><p>short</p>"
        metadata = extractor.extract(page(body=body), PAGE_URL)
        assert metadata.description == "Council approves the transit budget after debate"

    def test_no_description(self, extractor):
        assert extractor.extract(page(body="<p>tiny</p>"), PAGE_URL).description is None


@pytest.mark.unit
class TestMetadataExtractorImages:
    """Test hero image selection and fallbacks."""

    def test_tracker_and_pixel_meta_images_skipped(self, extractor):
        head = (
            '<meta property="og:image" content="https://cdn.example.com/pixel.gif">'
            '<meta name="twitter:image" content="https://stats.example.com/t.png">'
        )
        body = (
            '<img src="https://example.com/small.jpg" width="100" height="100">'
            '<img data-src="/big.jpg" width="800" height="600">'
            '<img src="https://example.com/dot.gif" width="1" height="1">'
        )
        metadata = extractor.extract(page(head, body), PAGE_URL)
        assert metadata.image == "https://example.com/big.jpg"

    def test_og_image_declared_tiny_is_rejected(self, extractor):
        head = (
            '<meta property="og:image" content="https://example.com/share.png">'
            '<meta property="og:image:width" content="1">'
            '<meta property="og:image:height" content="1">'
        )
        body = '<img src="/inline.jpg">'
        assert extractor.extract(page(head, body), PAGE_URL).image == "https://example.com/inline.jpg"

    def test_og_image_size_does_not_reject_twitter_image(self, extractor):
        head = (
            '<meta property="og:image" content="https://cdn.example.com/p.gif">'
            '<meta property="og:image:width" content="1">'
            '<meta property="og:image:height" content="1">'
            '<meta name="twitter:image" content="https://cdn.example.com/hero.jpg">'
        )
        metadata = extractor.extract(page(head), "https://news.example.com/story")
        assert metadata.image == "https://cdn.example.com/hero.jpg"

    def test_twitter_image_declared_tiny_is_rejected(self, extractor):
        head = (
            '<meta name="twitter:image" content="https://cdn.example.com/card.png">'
            '<meta name="twitter:image:width" content="1">'
            '<meta name="twitter:image:height" content="1">'
        )
        body = '<img src="/inline.jpg">'
        assert extractor.extract(page(head, body), PAGE_URL).image == "https://example.com/inline.jpg"

    def test_image_src_link(self, extractor):
        head = '<link rel="image_src" href="/linked.png">'
        assert extractor.extract(page(head), PAGE_URL).image == "https://example.com/linked.png"

    def test_equal_area_keeps_first_image(self, extractor):
        body = '<img src="/first.jpg"><img src="/second.jpg">'
        assert extractor.extract(page(body=body), PAGE_URL).image == "https://example.com/first.jpg"

    def test_brand_icon_fallback(self, extractor):
        metadata = extractor.extract(page("<title>Video</title>"), "https://www.youtube.com/watch?v=1")
        assert metadata.image == "https://cdn.simpleicons.org/youtube"

    def test_favicon_fallback(self, extractor):
        metadata = extractor.extract(page("<title>Post</title>"), "https://blog.example.org/post")
        assert metadata.image == "https://www.google.com/s2/favicons?domain=blog.example.org&sz=128"

    def test_placeholder_fallback(self, extractor):
        metadata = extractor.extract(page("<title>Local</title>"), "http://localhost/x")
        assert metadata.image == "https://placehold.co/600x400/png?text=SPZ"


@pytest.mark.unit
class TestMetadataExtractorRobustness:
    def test_empty_document(self, extractor):
        metadata = extractor.extract("", PAGE_URL)

        assert metadata.title is None
        assert metadata.description is None
        assert metadata.keywords == []
        assert metadata.site_name == "example.com"
        assert metadata.image == "https://www.google.com/s2/favicons?domain=example.com&sz=128"

    def test_malformed_markup(self, extractor):
        html = "<html><head><title>Broken</title><meta property='og:title' content='Kept'><body><p>unclosed <div><img src=/a.png"
        metadata = extractor.extract(html, PAGE_URL)

        assert metadata.url == PAGE_URL
        assert metadata.title == "Kept"


@pytest.mark.unit
class TestOEmbedMapping:
    """Test metadata built from oEmbed documents."""

    def test_full_document(self, extractor):
        data = {
            "title": "My Video",
            "author_name": "Jess",
            "provider_name": "YouTube",
            "thumbnail_url": "https://i.ytimg.com/vi/1/hqdefault.jpg",
            "thumbnail_width": 480,
            "thumbnail_height": 360,
        }
        metadata = extractor.from_oembed("https://www.youtube.com/watch?v=1", data)

        assert metadata.title == "My Video"
        assert metadata.description == "My Video by Jess"
        assert metadata.image == "https://i.ytimg.com/vi/1/hqdefault.jpg"
        assert metadata.site_name == "YouTube"
        assert metadata.author == "Jess"
        assert metadata.keywords == ["Video"]
        assert metadata.video is None

    def test_missing_thumbnail_uses_brand_icon(self, extractor):
        metadata = extractor.from_oembed("https://vimeo.com/1", {"title": "Clip"})

        assert metadata.image == "https://cdn.simpleicons.org/vimeo"
        assert metadata.description is None
        assert metadata.site_name == "vimeo.com"


@pytest.mark.unit
class TestExtractionHelpers:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("@spz.drops • Instagram photos and videos", "@spz.drops"),
            ('Jessica on Instagram: "new drop"', "Jessica"),
            ("Jessica on TikTok: clip", "Jessica"),
            ("Dana shared a post", "Dana"),
            ("Regular headline", None),
            (None, None),
        ],
    )
    def test_handle_from_social_title(self, title, expected):
        assert handle_from_social_title(title) == expected

    def test_split_keywords(self):
        assert split_keywords("a, a, B , ") == ["a", "B"]
        assert split_keywords(None) == []

    def test_split_keywords_limit(self):
        assert len(split_keywords(",".join(f"k{i}" for i in range(30)))) == 20

    def test_title_keywords_limit(self):
        title = " ".join(f"word{i}" for i in range(15))
        assert len(title_keywords(title)) == 10

    def test_extractor_default_config(self):
        assert MetadataExtractor().config.brand_footer == "Jessica AI • SPZ"
