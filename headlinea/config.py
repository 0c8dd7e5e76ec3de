"""Configuration loading for the aggregator and its source catalog."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree as ET

import requests

from .models import FeedSource, SourceCatalog

logger = logging.getLogger(__name__)

DEFAULT_CONVERTER_URL = "https://api.rss2json.com/v1/api.json"


class CatalogError(RuntimeError):
    """Raised when the source catalog cannot be fetched or parsed."""


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    sources: str
    converter_url: str = DEFAULT_CONVERTER_URL
    refresh_interval: float = 60.0
    max_articles_per_feed: int = 10
    # Not read by the pipeline, which keeps no response cache.
    cache_expiry: float = 3600.0
    concurrency: int = 10
    request_timeout: Optional[float] = None
    auto_refresh: bool = False
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _positive(name: str, value: float) -> float:
    if value <= 0:
        raise ValueError(f"<{name}> must be positive, got {value}")
    return value


def parse_app_config(path: str) -> AppConfig:
    """Parse the main application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    sources_node = root.find("sources")
    if sources_node is None or not sources_node.text:
        raise ValueError("Config missing <sources> location")
    sources = sources_node.text.strip()
    if not _is_url(sources):
        sources = _resolve_path(config_path, sources)

    converter_url = root.findtext("converter-url", DEFAULT_CONVERTER_URL).strip()
    refresh_interval = _positive(
        "refresh-interval-seconds",
        float(root.findtext("refresh-interval-seconds", "60")),
    )
    max_articles = int(root.findtext("max-articles-per-feed", "10"))
    _positive("max-articles-per-feed", max_articles)
    cache_expiry = float(root.findtext("cache-expiry-seconds", "3600"))
    concurrency = int(root.findtext("concurrency", "10"))
    _positive("concurrency", concurrency)

    timeout_node = root.find("request-timeout-seconds")
    request_timeout = (
        _positive("request-timeout-seconds", float(timeout_node.text))
        if timeout_node is not None and timeout_node.text
        else None
    )

    auto_refresh = root.findtext("auto-refresh", "false").strip().lower() == "true"

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        sources=sources,
        converter_url=converter_url,
        refresh_interval=refresh_interval,
        max_articles_per_feed=max_articles,
        cache_expiry=cache_expiry,
        concurrency=concurrency,
        request_timeout=request_timeout,
        auto_refresh=auto_refresh,
        logging=logging_config,
    )


def parse_catalog(payload: Any) -> SourceCatalog:
    """Validate a decoded source document and build the catalog."""
    if not isinstance(payload, dict) or not isinstance(payload.get("topics"), dict):
        raise CatalogError("Source document must contain a 'topics' object.")

    topics: Dict[str, List[FeedSource]] = {}
    for category, feeds in payload["topics"].items():
        if not isinstance(feeds, list):
            raise CatalogError(f"Category '{category}' must be a list of feeds.")
        entries: List[FeedSource] = []
        for feed in feeds:
            if not isinstance(feed, dict):
                raise CatalogError(f"Category '{category}' contains a non-object feed.")
            name = feed.get("name")
            rss = feed.get("rss")
            if not isinstance(name, str) or not isinstance(rss, str):
                raise CatalogError(
                    f"Feed in category '{category}' needs string 'name' and 'rss'."
                )
            entries.append(FeedSource(name=name, rss=rss))
            logger.debug("Registered feed '%s' (category='%s')", name, category)
        topics[category] = entries

    return SourceCatalog(topics=topics)


def load_catalog(
    location: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> SourceCatalog:
    """Load the source catalog from a local JSON file or an HTTP URL."""
    logger.info("Loading news sources from %s", location)
    try:
        if _is_url(location):
            http = session or requests.Session()
            response = http.get(location, timeout=timeout)
            response.raise_for_status()
            payload = response.json()
        else:
            payload = json.loads(Path(location).read_text(encoding="utf-8"))
    except (OSError, ValueError, requests.RequestException) as exc:
        raise CatalogError(
            f"Failed to load news sources from {location}: {exc}"
        ) from exc

    catalog = parse_catalog(payload)
    logger.info(
        "Loaded %d feeds across %d categories", len(catalog), len(catalog.topics)
    )
    return catalog
