"""
Pipeline orchestration for CardFusion.

fetch -> extract -> normalize -> fuse, for one request at a time. Network
work runs as independent coroutines bounded by a semaphore; everything after
extraction is synchronous and pure.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

import structlog

from cardfusion.cards.classifier import CategoryClassifier
from cardfusion.cards.fusion import FusionEngine
from cardfusion.cards.hero import build_hero
from cardfusion.cards.normalizer import CardNormalizer, source_url_of
from cardfusion.cards.resolve import canonical_url
from cardfusion.cards.stats import StatSynthesizer
from cardfusion.config.config import Config
from cardfusion.crawler.http_client import HttpClient
from cardfusion.crawler.oembed import is_usable_oembed, oembed_endpoint
from cardfusion.exceptions import FusionError
from cardfusion.intake import BatchRequest
from cardfusion.metadata.metadata_extractor import MetadataExtractor
from cardfusion.observability import increment
from cardfusion.protocols import (
    ExtractedMetadata,
    ExtractionResult,
    FetchError,
    FusionResult,
    NormalizedCard,
    ParseError,
)

logger = structlog.get_logger(__name__)


def ensure_scheme(url: str) -> str:
    """Prefix ``https://`` when ``url`` has no http(s) scheme."""
    url = (url or "").strip()
    if url.lower().startswith(("http://", "https://")):
        return url
    return "https://" + url


class CardPipeline:
    """
    Batch card builder.

    ``crawl`` turns URLs into per-URL extraction results; ``build`` pairs any
    supplied partial cards with those results, normalizes everything and
    fuses it into one card.
    """

    def __init__(self, config: Optional[Config] = None, client: Optional[HttpClient] = None):
        self.config = config or Config()
        card_config = self.config.cards

        classifier = CategoryClassifier(fallback=card_config.category_fallback)
        synthesizer = StatSynthesizer(mode=card_config.stat_mode, glyph=card_config.tribute_glyph)

        self.extractor = MetadataExtractor(card_config)
        self.normalizer = CardNormalizer(card_config, classifier, synthesizer)
        self.fusion = FusionEngine(card_config, classifier, synthesizer)
        self._client = client

    @asynccontextmanager
    async def _http_client(self) -> AsyncIterator[HttpClient]:
        if self._client is not None:
            await self._client.initialize()
            yield self._client
            return
        async with HttpClient(self.config) as client:
            yield client

    # --- Crawl ---

    async def crawl(self, urls: Iterable[str]) -> List[ExtractionResult]:
        """
        Fetch and extract every URL.

        Args:
            urls: URLs to crawl; ``https://`` is assumed when no scheme is given

        Returns:
            One ExtractionResult per URL, in input order
        """
        targets = [ensure_scheme(url) for url in urls if isinstance(url, str) and url.strip()]
        if not targets:
            return []

        semaphore = asyncio.Semaphore(self.config.crawler.max_workers)
        async with self._http_client() as client:
            results = await asyncio.gather(*(self._crawl_one(client, semaphore, url) for url in targets))

        failed = sum(1 for result in results if not result.ok)
        logger.info("Crawl finished", urls=len(targets), failed=failed)
        return list(results)

    async def _crawl_one(self, client: HttpClient, semaphore: asyncio.Semaphore, url: str) -> ExtractionResult:
        async with semaphore:
            start_time = time.perf_counter()

            if self.config.crawler.oembed_enabled:
                endpoint = oembed_endpoint(url)
                if endpoint:
                    data = await client.fetch_json(endpoint)
                    if is_usable_oembed(data):
                        increment("fetch_total", labels={"outcome": "oembed"})
                        logger.debug("Used oEmbed", url=url, endpoint=endpoint)
                        return ExtractionResult(url=url, metadata=self.extractor.from_oembed(url, data))

            response = await client.fetch(url)
            if response.status == 0:
                increment("fetch_total", labels={"outcome": "transport_error"})
                return ExtractionResult(url=url, error=FetchError(status=0, reason=response.error or "Fetch failed"))
            if not response.ok:
                increment("fetch_total", labels={"outcome": "http_error"})
                return ExtractionResult(
                    url=url, error=FetchError(status=response.status, reason=f"Fetch {response.status}")
                )

            try:
                metadata = self.extractor.extract(response.text(), response.final_url or url)
            except Exception as e:
                increment("fetch_total", labels={"outcome": "parse_error"})
                logger.warning("Extraction failed", url=url, error=str(e))
                return ExtractionResult(url=url, error=ParseError(reason=str(e) or e.__class__.__name__))

            metadata.url = url
            increment("fetch_total", labels={"outcome": "ok"})
            logger.debug("Extracted", url=url, elapsed=round(time.perf_counter() - start_time, 3))
            return ExtractionResult(url=url, metadata=metadata)

    # --- Build ---

    def normalize_batch(
        self, cards: Iterable[Any], metadata: Iterable[ExtractedMetadata]
    ) -> List[NormalizedCard]:
        """
        Pair partial cards with metadata by canonical URL and normalize them.

        Cards come first in request order; metadata no card consumed follows.
        """
        pending: List[Optional[ExtractedMetadata]] = list(metadata)
        normalized: List[NormalizedCard] = []

        for raw in cards:
            key = canonical_url(source_url_of(raw))
            match = None
            if key:
                for index, candidate in enumerate(pending):
                    if candidate is not None and canonical_url(candidate.url) == key:
                        match, pending[index] = candidate, None
                        break
            normalized.append(self.normalizer.normalize(raw, match))

        normalized.extend(self.normalizer.normalize(None, item) for item in pending if item is not None)
        increment("cards_normalized_total", len(normalized))
        return normalized

    async def build(self, request: BatchRequest) -> FusionResult:
        """
        Crawl, normalize and fuse one batch request.

        Raises:
            FusionError: Normalization or fusion failed unexpectedly
        """
        results = await self.crawl(request.urls) if request.urls else []
        metadata = [result.metadata for result in results if result.metadata is not None] + list(request.results)

        try:
            cards = self.normalize_batch(request.cards, metadata)
            fused = self.fusion.fuse(cards, [ensure_scheme(url) for url in request.batch_urls])
        except Exception as e:
            increment("fusion_failures_total")
            logger.exception("Fusion failed", session=request.session)
            raise FusionError(str(e) or e.__class__.__name__) from e

        increment("fusions_total")
        logger.info("Fused batch", cards=len(cards), sources=len(fused.sources), category=fused.card.category)
        return fused

    async def fuse_response(self, request: BatchRequest) -> Dict[str, Any]:
        """The ``/api/fuse`` payload: session, card, sources and hero."""
        fused = await self.build(request)
        return {
            "session": request.session,
            "card": fused.card.to_dict(),
            "sources": list(fused.sources),
            "hero": build_hero(fused, mode=request.mode, sell=request.sell, info=request.info),  # type: ignore[arg-type]
        }

    async def crawl_response(self, request: BatchRequest) -> Dict[str, Any]:
        """The ``/api/crawl`` payload: session and per-URL results."""
        results = await self.crawl(request.urls)
        return {"session": request.session, "results": [result.to_dict() for result in results]}
