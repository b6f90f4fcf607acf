"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: HTTP fetching settings
- CacheConfig: Page cache location and switches
- OutputConfig: Result artifact settings
- ExtractConfig: Readable-text extraction settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class FetchConfig:
    """Configuration for HTTP page fetching.

    Attributes:
        timeout_seconds: HTTP request timeout
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings
        follow_redirects: Whether the client follows HTTP redirects
    """

    timeout_seconds: float = 20.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    trust_env: bool = True
    follow_redirects: bool = True


@dataclass
class CacheConfig:
    """Configuration for the page cache.

    Attributes:
        enabled: Whether fetched pages are cached and served from cache
        dir: Cache root directory
        write_index: Whether to write the cache index JSONL file
        index_filename: Name of the cache index file
    """

    enabled: bool = True
    dir: str = ".cache"
    write_index: bool = False
    index_filename: str = "index.jsonl"

    @property
    def path(self) -> Path:
        return Path(self.dir)


@dataclass
class OutputConfig:
    """Configuration for result artifacts.

    Attributes:
        results_dir: Directory where <name>.json artifacts are written
        indent: JSON indentation, or None for a compact single line
    """

    results_dir: str = "data"
    indent: int | None = 2

    @property
    def path(self) -> Path:
        return Path(self.results_dir)


@dataclass
class ExtractConfig:
    """Configuration for readable-text extraction.

    Attributes:
        primary: Primary extraction method ("trafilatura", "readability", or "bs4")
        fallback: List of fallback methods to try if primary fails
    """

    primary: str = "trafilatura"
    fallback: list[str] = field(default_factory=lambda: ["readability", "bs4"])


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file, relative to the results directory
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    A fresh AppConfig is returned on every call, so callers may mutate it
    (e.g. with CLI overrides) without affecting other runs.
    """
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown sections and unknown keys inside a section are ignored. An empty
    section (a bare "cache:" line) keeps its defaults.
    """
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data or value is None:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "fetch": {
            "timeout_seconds": cfg.fetch.timeout_seconds,
            "user_agent": cfg.fetch.user_agent,
            "trust_env": cfg.fetch.trust_env,
            "follow_redirects": cfg.fetch.follow_redirects,
        },
        "cache": {
            "enabled": cfg.cache.enabled,
            "dir": cfg.cache.dir,
            "write_index": cfg.cache.write_index,
            "index_filename": cfg.cache.index_filename,
        },
        "output": {
            "results_dir": cfg.output.results_dir,
            "indent": cfg.output.indent,
        },
        "extract": {
            "primary": cfg.extract.primary,
            "fallback": list(cfg.extract.fallback),
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        fetch=FetchConfig(**data["fetch"]),
        cache=CacheConfig(**data["cache"]),
        output=OutputConfig(**data["output"]),
        extract=ExtractConfig(**data["extract"]),
        logging=LoggingConfig(**data["logging"]),
    )
