"""Feed fetching through the RSS-to-JSON converter, plus merge helpers."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, List, Optional

import requests

from .models import (
    STATUS_ERROR,
    STATUS_SUCCESS,
    Article,
    FeedResult,
    FeedSource,
    FeedStatus,
)

logger = logging.getLogger(__name__)

NO_ITEMS_MESSAGE = "No items found"

_IMG_SRC_RE = re.compile(r'<img[^>]+src="([^">]+)"')


class FeedFetchError(RuntimeError):
    """Raised when the converter answers with a non-success status."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_pub_date(value: Any, now: Optional[datetime] = None) -> datetime:
    """Normalize an ISO-8601 or RFC 2822 timestamp to an aware UTC datetime."""
    if not value:
        return now or _utcnow()

    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid publish date: {value!r}") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def thumbnail_from_description(description: Optional[str]) -> Optional[str]:
    """Return the first <img src> URL embedded in an HTML description."""
    if not description:
        return None
    match = _IMG_SRC_RE.search(description)
    return match.group(1) if match else None


def _text(*values: Any, default: Optional[str] = None) -> Optional[str]:
    """Return the first non-empty value as a string, else ``default``."""
    for value in values:
        if value:
            return str(value)
    return default


def normalize_item(
    item: dict, feed: FeedSource, category: str, now: Optional[datetime] = None
) -> Article:
    """Map one converted feed item to an Article, filling in fallbacks.

    Text fields are coerced to ``str`` here so that converter quirks such as a
    numeric title cannot break deduplication or search later on.
    """
    description = _text(item.get("description"))
    return Article(
        title=_text(item.get("title"), default="Untitled"),
        description=_text(
            description, item.get("content"), default="No description available"
        ),
        link=_text(item.get("link"), default=feed.rss),
        source=feed.name,
        category=category,
        published=parse_pub_date(item.get("pubDate") or item.get("isoDate"), now),
        author=_text(item.get("author"), default="Unknown"),
        thumbnail=_text(item.get("thumbnail"))
        or thumbnail_from_description(description),
        guid=_text(item.get("guid"), item.get("link")),
    )


def fetch_feed(
    feed: FeedSource,
    category: str,
    session: requests.Session,
    converter_url: str,
    max_items: int = 10,
    timeout: Optional[float] = None,
) -> FeedResult:
    """Fetch one feed through the converter and normalize its newest items.

    Failures are never raised; they are reported through the returned status
    so that one broken feed cannot abort a refresh.
    """
    logger.info("Fetching feed '%s' (%s)", feed.name, feed.rss)
    try:
        response = session.get(
            converter_url, params={"rss_url": feed.rss}, timeout=timeout
        )
        if not response.ok:
            raise FeedFetchError(f"HTTP {response.status_code}")

        data = response.json()
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            logger.warning("Feed '%s' returned no items", feed.name)
            return FeedResult(
                articles=[],
                status=FeedStatus(
                    status=STATUS_ERROR,
                    message=NO_ITEMS_MESSAGE,
                    last_fetch=_utcnow(),
                ),
            )

        now = _utcnow()
        articles = [
            normalize_item(item, feed, category, now) for item in items[:max_items]
        ]
    except Exception as exc:  # noqa: BLE001
        logger.warning("Error fetching '%s' (%s): %s", feed.name, feed.rss, exc)
        return FeedResult(
            articles=[],
            status=FeedStatus(
                status=STATUS_ERROR, message=str(exc), last_fetch=_utcnow()
            ),
        )

    logger.info("Collected %d articles from feed '%s'", len(articles), feed.name)
    return FeedResult(
        articles=articles,
        status=FeedStatus(
            status=STATUS_SUCCESS, count=len(articles), last_fetch=_utcnow()
        ),
    )


def deduplicate_articles(articles: Iterable[Article]) -> List[Article]:
    """Keep the first article for each normalized title, preserving order."""
    seen = set()
    unique: List[Article] = []
    for article in articles:
        key = article.dedup_key
        if key in seen:
            logger.debug(
                "Dropping duplicate article '%s' from %s", article.title, article.source
            )
            continue
        seen.add(key)
        unique.append(article)
    return unique


def sort_articles(articles: Iterable[Article]) -> List[Article]:
    """Newest first; equal timestamps keep their relative order."""
    return sorted(articles, key=lambda item: item.published, reverse=True)
