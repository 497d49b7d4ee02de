"""
Configuration management for CardFusion using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, Literal, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class CrawlerConfig(BaseModel):
    """Outbound fetch configuration."""

    timeout: float = Field(default=10.0, gt=0, description="Per-request timeout in seconds.")
    max_workers: int = Field(default=8, ge=1, description="Maximum URLs fetched concurrently per batch.")
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; CardFusion/0.1; +https://github.com/cardfusion/cardfusion)",
        description="User-Agent string for HTTP requests.",
    )
    accept: str = Field(
        default="text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        description="Accept header sent with page fetches.",
    )
    accept_language: str = Field(default="en-US,en;q=0.9", description="Accept-Language header.")
    oembed_enabled: bool = Field(default=True, description="Probe oEmbed endpoints for recognized platforms.")

    def request_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Language": self.accept_language,
        }


class CardConfig(BaseModel):
    """Card building configuration."""

    brand_footer: str = Field(default="Jessica AI • SPZ", description="Suffix appended once to every footer.")
    placeholder_image: str = Field(
        default="https://placehold.co/600x400/png?text=SPZ",
        description="Hero image used when a page offers nothing usable.",
    )
    favicon_template: str = Field(
        default="https://www.google.com/s2/favicons?domain={host}&sz=128",
        description="Remote favicon service; {host} is replaced with the page hostname.",
    )
    stat_mode: Literal["fixed", "range"] = Field(
        default="range", description="How tribute counts are derived from the category table."
    )
    category_fallback: Literal["hash", "random"] = Field(
        default="hash", description="Category picked when no keyword rule matches."
    )
    tribute_glyph: str = Field(default="🙇‍♂️", description="Glyph repeated once per tribute.")
    fusion_title: str = Field(default="Zetsu-Grade Fusion Page", description="Name of the placeholder card.")

    @field_validator("brand_footer")
    @classmethod
    def validate_brand_footer(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("brand_footer must not be empty")
        if "|" in v:
            raise ValueError("brand_footer must not contain the '|' segment separator")
        return v

    @field_validator("favicon_template")
    @classmethod
    def validate_favicon_template(cls, v: str) -> str:
        if "{host}" not in v:
            raise ValueError("favicon_template must contain a {host} placeholder")
        return v


class WebConfig(BaseModel):
    """Configuration for the HTTP API."""

    host: str = Field(default="127.0.0.1", description="Host for the web server.")
    port: int = Field(default=8000, description="Port for the web server.")


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics at /metrics.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "CardFusion"
    version: str = "0.1.0"
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    cards: CardConfig = Field(default_factory=CardConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    model_config = SettingsConfigDict(env_prefix="CARDFUSION_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "cardfusion.yaml",
        current_dir / "cardfusion.yml",
        current_dir / "config.yaml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None


def load_config(path: Path | None = None) -> Config:
    """Load an explicit config file, the first discovered one, or defaults."""
    config_path = path or find_config_file()
    if config_path is None:
        return Config()
    return Config.from_yaml(config_path)


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed. This prevents configuration errors
    from crashing the application on import.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. "
                    "Falling back to default settings. Please check your config file.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
