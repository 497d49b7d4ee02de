"""
Defines Prometheus metrics for the card pipeline.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, the CLI importing the web app)
# must reuse the collectors already in the registry instead of raising.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "fetch_total": Counter(
            "cardfusion_fetch_total",
            "Per-URL extraction outcomes",
            ["outcome"],
        ),
        "fetch_latency_seconds": Histogram(
            "cardfusion_fetch_latency_seconds",
            "Time taken to fetch one URL",
            buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
        ),
        "cards_normalized_total": Counter(
            "cardfusion_cards_normalized_total",
            "Cards produced by the normalizer",
        ),
        "fusions_total": Counter(
            "cardfusion_fusions_total",
            "Batches fused into a single card",
        ),
        "fusion_failures_total": Counter(
            "cardfusion_fusion_failures_total",
            "Batches whose fusion failed unexpectedly",
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
