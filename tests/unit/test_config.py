"""
Tests for configuration loading.
"""

import pytest
import yaml
from pydantic import ValidationError

from cardfusion.config.config import CardConfig, Config, load_config


@pytest.mark.unit
class TestConfigDefaults:
    def test_defaults(self):
        config = Config()

        assert config.cards.brand_footer == "Jessica AI • SPZ"
        assert config.cards.stat_mode == "range"
        assert config.cards.category_fallback == "hash"
        assert config.crawler.oembed_enabled is True
        assert config.monitoring.metrics_enabled is True

    def test_request_headers(self):
        headers = Config().crawler.request_headers()
        assert set(headers) == {"User-Agent", "Accept", "Accept-Language"}


@pytest.mark.unit
class TestConfigSources:
    """Test environment and YAML configuration sources."""

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("CARDFUSION_CARDS__STAT_MODE", "fixed")
        monkeypatch.setenv("CARDFUSION_CRAWLER__MAX_WORKERS", "3")

        config = Config()

        assert config.cards.stat_mode == "fixed"
        assert config.crawler.max_workers == 3

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "cardfusion.yaml"
        path.write_text(yaml.safe_dump({"cards": {"brand_footer": "Other Brand"}, "web": {"port": 9000}}))

        config = Config.from_yaml(path)

        assert config.cards.brand_footer == "Other Brand"
        assert config.web.port == 9000

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Config.from_yaml(path).cards.brand_footer == "Jessica AI • SPZ"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "absent.yaml")

    def test_load_config_discovers_file(self, tmp_path, monkeypatch):
        (tmp_path / "cardfusion.yaml").write_text("cards:\n  stat_mode: fixed\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().cards.stat_mode == "fixed"

    def test_load_config_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config().cards.stat_mode == "range"


@pytest.mark.unit
class TestConfigValidation:
    @pytest.mark.parametrize("footer", ["", "   ", "A | B"])
    def test_invalid_brand_footer(self, footer):
        with pytest.raises(ValidationError):
            CardConfig(brand_footer=footer)

    def test_favicon_template_needs_placeholder(self):
        with pytest.raises(ValidationError):
            CardConfig(favicon_template="https://icons.example.com/x.png")

    def test_invalid_stat_mode(self):
        with pytest.raises(ValidationError):
            CardConfig(stat_mode="wild")

    def test_log_file_parent_created(self, tmp_path):
        log_file = tmp_path / "logs" / "cardfusion.log"
        Config(monitoring={"log_file": str(log_file)})
        assert log_file.parent.is_dir()
