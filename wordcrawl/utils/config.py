"""
Configuration management for the word cloud crawler.
"""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, fields

from ..crawler.fetcher import DEFAULT_USER_AGENT, DEFAULT_ACCEPT, DEFAULT_ACCEPT_LANGUAGE
from ..crawler.scheduler import CrawlOptions, MAX_PAGES_LIMIT, MAX_CONCURRENT_FETCHES_LIMIT


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    follow_links: bool = False
    max_pages: int = 5
    max_concurrent_requests: int = 4
    request_timeout_ms: int = 10000
    refetch_for_links: bool = False
    max_entry_urls: int = 10
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE


@dataclass
class AnalyzerConfig:
    """Configuration for word frequency analysis."""
    top_n: int = 100
    min_frequency: int = 2
    stopwords_file: Optional[str] = None
    extra_stopwords: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = 'INFO'
    file: Optional[str] = None
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    json: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def crawl_options(self, follow_links: Optional[bool] = None,
                      max_pages: Optional[int] = None) -> CrawlOptions:
        """Build crawl options from the crawler section, with optional overrides."""
        return CrawlOptions(
            follow_links=self.crawler.follow_links if follow_links is None else follow_links,
            max_pages=self.crawler.max_pages if max_pages is None else max_pages,
            max_concurrent_fetches=self.crawler.max_concurrent_requests,
            timeout_ms=self.crawler.request_timeout_ms,
            refetch_for_links=self.crawler.refetch_for_links
        )


SECTIONS = {
    'crawler': CrawlerConfig,
    'analyzer': AnalyzerConfig,
    'logging': LoggingConfig,
}


def _matches_type(value, expected) -> bool:
    """Check a YAML value against a section field's declared type."""
    if expected is bool:
        return isinstance(value, bool)
    if expected is int:
        # bool is a subclass of int but never a valid count
        return isinstance(value, int) and not isinstance(value, bool)
    if expected is str:
        return isinstance(value, str)
    if expected == Optional[str]:
        return value is None or isinstance(value, str)
    if expected == List[str]:
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    raise TypeError(f"Unsupported configuration field type: {expected}")


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from a YAML file, or defaults when no path is set."""
        config_data: Dict[str, Any] = {}
        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as file:
                config_data = yaml.safe_load(file) or {}

        if not isinstance(config_data, dict):
            raise ValueError("Configuration root must be a mapping")

        unknown = set(config_data) - set(SECTIONS)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

        self._config = Config(**{
            name: self._parse_section(name, section_cls, config_data.get(name))
            for name, section_cls in SECTIONS.items()
        })

        self._validate_config()
        return self._config

    def _parse_section(self, name: str, section_cls, data: Optional[Dict[str, Any]]):
        """Build one section dataclass, rejecting unknown keys."""
        if data is None:
            return section_cls()
        if not isinstance(data, dict):
            raise ValueError(f"Configuration section '{name}' must be a mapping")

        field_types = {f.name: f.type for f in fields(section_cls)}
        unknown = set(data) - set(field_types)
        if unknown:
            raise ValueError(f"Unknown keys in '{name}' section: {', '.join(sorted(unknown))}")

        for key, value in data.items():
            if not _matches_type(value, field_types[key]):
                raise ValueError(f"Invalid value for '{name}.{key}': {value!r}")
        return section_cls(**data)

    def _validate_config(self):
        """Validate configuration values."""
        if not self._config:
            raise ValueError("Configuration not loaded")

        crawler = self._config.crawler
        if not 1 <= crawler.max_pages <= MAX_PAGES_LIMIT:
            raise ValueError(f"max_pages must be between 1 and {MAX_PAGES_LIMIT}")

        if not 1 <= crawler.max_concurrent_requests <= MAX_CONCURRENT_FETCHES_LIMIT:
            raise ValueError(f"max_concurrent_requests must be between 1 and {MAX_CONCURRENT_FETCHES_LIMIT}")

        if crawler.request_timeout_ms <= 0:
            raise ValueError("request_timeout_ms must be positive")

        if crawler.max_entry_urls < 1:
            raise ValueError("max_entry_urls must be at least 1")

        if self._config.analyzer.top_n < 1:
            raise ValueError("top_n must be at least 1")

        level = self._config.logging.level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown logging level: {self._config.logging.level}")


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file, or the defaults when no path is given."""
    return ConfigManager(config_path).load_config()
