"""
Shared test configuration for CardFusion.

Provides deterministic card-building components (fixed clock, default
configuration) and an initialized HTTP client for aioresponses-backed tests.
"""

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from cardfusion.cards.classifier import CategoryClassifier
from cardfusion.cards.fusion import FusionEngine
from cardfusion.cards.normalizer import CardNormalizer
from cardfusion.cards.stats import StatSynthesizer
from cardfusion.config.config import CardConfig, Config
from cardfusion.crawler.http_client import HttpClient
from cardfusion.metadata.metadata_extractor import MetadataExtractor

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2024-05-01T12:00:00.000Z"
BRAND = "Jessica AI • SPZ"

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Core Test Fixtures
# ============================================================================


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def card_config() -> CardConfig:
    return CardConfig()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def classifier() -> CategoryClassifier:
    return CategoryClassifier()


@pytest.fixture
def synthesizer() -> StatSynthesizer:
    return StatSynthesizer()


@pytest.fixture
def normalizer(card_config, classifier, synthesizer, clock) -> CardNormalizer:
    return CardNormalizer(card_config, classifier, synthesizer, clock=clock)


@pytest.fixture
def fusion_engine(card_config, classifier, synthesizer, clock) -> FusionEngine:
    return FusionEngine(card_config, classifier, synthesizer, clock=clock)


@pytest.fixture
def extractor(card_config) -> MetadataExtractor:
    return MetadataExtractor(card_config)


@pytest_asyncio.fixture
async def http_client(config) -> AsyncGenerator[HttpClient, None]:
    client = HttpClient(config)
    await client.initialize()
    yield client
    await client.close()


# ============================================================================
# Sample documents
# ============================================================================

ARTICLE_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Fallback Title</title>
    <meta name="description" content="Chipmakers race to ship faster silicon.">
    <meta name="keywords" content="chips, Hardware, chips , ">
    <meta name="author" content="Dana Reporter">
    <meta property="og:title" content="Tech giant unveils new chip">
    <meta property="og:site_name" content="Example News">
    <meta property="og:image" content="/images/hero.jpg">
    <meta property="og:video" content="https://video.example.com/v/1.mp4">
    <link rel="canonical" href="https://example.com/tech/chip">
</head>
<body>
    <h1>Tech giant unveils new chip</h1>
    <p>Short intro.</p>
    <img src="/images/inline.jpg" width="640" height="480">
</body>
</html>
"""


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML
