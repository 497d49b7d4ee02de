"""
Tests for metrics helpers and logging configuration.
"""

import json
import logging

import pytest
import structlog
from prometheus_client import REGISTRY

from cardfusion.config.config import MonitoringConfig
from cardfusion.observability import configure_logging, export_prometheus, increment, observe


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.unit
class TestMetrics:
    def test_increment_labelled_counter(self):
        before = REGISTRY.get_sample_value("cardfusion_fetch_total", {"outcome": "ok"}) or 0.0
        increment("fetch_total", labels={"outcome": "ok"})
        assert REGISTRY.get_sample_value("cardfusion_fetch_total", {"outcome": "ok"}) == before + 1

    def test_observe_histogram(self):
        before = REGISTRY.get_sample_value("cardfusion_fetch_latency_seconds_count") or 0.0
        observe("fetch_latency_seconds", 0.2)
        assert REGISTRY.get_sample_value("cardfusion_fetch_latency_seconds_count") == before + 1

    def test_unknown_metric_ignored(self):
        increment("no_such_metric")
        observe("no_such_metric", 1.0)

    def test_export(self):
        assert "cardfusion_fusions_total" in export_prometheus()


@pytest.mark.unit
class TestLogging:
    def test_file_logging_is_json(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "cardfusion.log"
        configure_logging(MonitoringConfig(log_level="INFO", log_file=str(log_file)))

        structlog.get_logger("cardfusion.test").info("Card built", card_id="abc")
        for handler in logging.getLogger().handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        record = next(r for r in records if r["event"] == "Card built")
        assert record["card_id"] == "abc"
        assert record["level"] == "info"
        assert record["logger"] == "cardfusion.test"

    def test_level_applied(self, restore_logging):
        configure_logging(MonitoringConfig(log_level="warning"))
        assert logging.getLogger().level == logging.WARNING
