"""Configuration models and loaders."""

from .config import CardConfig, Config, CrawlerConfig, MonitoringConfig, WebConfig, load_config, settings

__all__ = ["CardConfig", "Config", "CrawlerConfig", "MonitoringConfig", "WebConfig", "load_config", "settings"]
