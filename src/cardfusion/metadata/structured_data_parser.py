"""
Structured Data Parser - meta tags, OpenGraph, Twitter Cards and link relations

Collects the head-level signals of a document once, so the metadata extractor
can resolve every field from plain dictionaries.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(value: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", value or "").strip()


@dataclass
class StructuredDataResult:
    """Head-level signals of one document."""

    # name/property (lower-cased) -> content; first occurrence wins
    meta: Dict[str, str] = field(default_factory=dict)
    # rel token (lower-cased) -> href; first occurrence wins
    links: Dict[str, str] = field(default_factory=dict)
    title: Optional[str] = None

    def first(self, *keys: str) -> Optional[str]:
        """Content of the first present meta key, in the order given."""
        for key in keys:
            value = self.meta.get(key)
            if value:
                return value
        return None


class MetaTagParser:
    """Parser for ``<meta name=...>`` and ``<meta property=...>`` tags."""

    @staticmethod
    def parse(soup: Any) -> Dict[str, str]:
        meta: Dict[str, str] = {}
        for tag in soup.find_all("meta"):
            if not isinstance(tag, Tag):
                continue
            content = collapse_whitespace(str(tag.get("content") or ""))
            if not content:
                continue
            for attribute in ("property", "name"):
                key = str(tag.get(attribute) or "").strip().lower()
                if key and key not in meta:
                    meta[key] = content
        return meta


class LinkRelParser:
    """Parser for ``<link rel=... href=...>`` tags."""

    @staticmethod
    def parse(soup: Any) -> Dict[str, str]:
        links: Dict[str, str] = {}
        for tag in soup.find_all("link"):
            if not isinstance(tag, Tag):
                continue
            href = str(tag.get("href") or "").strip()
            if not href:
                continue
            rel = tag.get("rel") or []
            # bs4 returns multi-valued rel as a list
            tokens: List[str] = rel if isinstance(rel, list) else str(rel).split()
            for token in tokens:
                token = token.strip().lower()
                if token and token not in links:
                    links[token] = href
        return links


class StructuredDataParser:
    """
    Document head parser.

    Meta tags are keyed by both their ``name`` and ``property`` attributes,
    lower-cased, so OpenGraph (``og:*``), Twitter Cards (``twitter:*``) and
    standard tags (``description``, ``keywords``, ``author``) share one lookup.
    """

    def __init__(self) -> None:
        self.meta_parser = MetaTagParser()
        self.link_parser = LinkRelParser()

    @staticmethod
    def make_soup(html_content: str) -> BeautifulSoup:
        return BeautifulSoup(html_content or "", "html.parser")

    def parse(self, soup: BeautifulSoup) -> StructuredDataResult:
        """
        Collect meta tags, link relations and the document title.

        Args:
            soup: Parsed document

        Returns:
            StructuredDataResult with every head-level signal found
        """
        title_tag = soup.find("title")
        title = collapse_whitespace(title_tag.get_text()) if isinstance(title_tag, Tag) else ""

        result = StructuredDataResult(
            meta=self.meta_parser.parse(soup),
            links=self.link_parser.parse(soup),
            title=title or None,
        )
        logger.debug("Parsed %d meta tags and %d link relations", len(result.meta), len(result.links))
        return result

    def parse_html(self, html_content: str) -> StructuredDataResult:
        return self.parse(self.make_soup(html_content))
