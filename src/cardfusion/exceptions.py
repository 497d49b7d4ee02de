"""
Exception hierarchy for CardFusion.

Per-URL fetch and parse failures are not exceptions: they are returned as
``FetchError`` / ``ParseError`` records so one bad URL never aborts a batch.
"""

from __future__ import annotations


class CardFusionError(Exception):
    """Base class for errors raised by CardFusion."""


class InvalidRequestError(CardFusionError):
    """The request body cannot be turned into a batch. Maps to HTTP 400."""


class FusionError(CardFusionError):
    """Building the fused card failed unexpectedly. Maps to HTTP 500."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
