"""High-level orchestration: catalog loading, refresh cycles and filtering."""

from __future__ import annotations

import concurrent.futures
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import requests

from .config import AppConfig, CatalogError, load_catalog
from .feeds import deduplicate_articles, fetch_feed, sort_articles
from .filters import filter_articles
from .models import (
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_SUCCESS,
    AppState,
    Article,
    FeedResult,
    FeedStatus,
    SourceCatalog,
    StatusSummary,
)
from .renderers import DisplaySink, NullSink

logger = logging.getLogger(__name__)


def summarize_status(state: AppState) -> StatusSummary:
    statuses = list(state.feed_status.values())
    return StatusSummary(
        success_count=sum(1 for item in statuses if item.status == STATUS_SUCCESS),
        error_count=sum(1 for item in statuses if item.status == STATUS_ERROR),
        last_refresh=state.last_refresh,
    )


def save_articles_to_file(path: str, articles: List[Article]) -> None:
    location = Path(path)
    if location.parent and not location.parent.exists():
        location.parent.mkdir(parents=True, exist_ok=True)

    serialisable = [article.to_dict() for article in articles]
    location.write_text(
        json.dumps(serialisable, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    logger.info("Saved %d articles to %s", len(serialisable), location)


class NewsAggregator:
    """Owns the application state and runs refresh cycles against it."""

    def __init__(
        self,
        config: AppConfig,
        sink: Optional[DisplaySink] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.state = AppState()
        self._sink = sink or NullSink()
        self._session = session or requests.Session()
        # Timer and manual refreshes share this; overlapping cycles queue up.
        self._refresh_lock = threading.Lock()

    def load_sources(self) -> bool:
        """Load the catalog; on failure keep it empty and report False."""
        try:
            catalog = load_catalog(
                self.config.sources,
                session=self._session,
                timeout=self.config.request_timeout,
            )
        except CatalogError as exc:
            logger.error("Failed to load news sources: %s", exc)
            self.state.sources = SourceCatalog()
            return False

        self.state.sources = catalog
        for _category, feed in catalog.iter_feeds():
            self.state.feed_status[feed.name] = FeedStatus(status=STATUS_PENDING)
        return True

    def refresh(self) -> List[Article]:
        """Run one full refresh cycle and return the aggregated articles."""
        with self._refresh_lock:
            return self._refresh_locked()

    def _refresh_locked(self) -> List[Article]:
        logger.info("Refreshing news feeds...")
        self._sink.show_loading(True)
        state = self.state
        state.articles = []
        state.feed_status = {}

        feeds = list(state.sources.iter_feeds())
        results: List[List[Article]] = [[] for _ in feeds]

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, min(self.config.concurrency, len(feeds)))
        ) as executor:
            future_to_index = {
                executor.submit(
                    fetch_feed,
                    feed,
                    category,
                    self._session,
                    self.config.converter_url,
                    self.config.max_articles_per_feed,
                    self.config.request_timeout,
                ): index
                for index, (category, feed) in enumerate(feeds)
            }
            for future in concurrent.futures.as_completed(future_to_index):
                index = future_to_index[future]
                feed = feeds[index][1]
                try:
                    result = future.result()
                except Exception as exc:
                    logger.exception("Failed to process feed %s", feed.name)
                    result = FeedResult(
                        articles=[],
                        status=FeedStatus(
                            status=STATUS_ERROR,
                            message=str(exc),
                            last_fetch=datetime.now(timezone.utc),
                        ),
                    )
                state.feed_status[feed.name] = result.status
                results[index] = result.articles

        combined = [article for articles in results for article in articles]
        state.articles = sort_articles(deduplicate_articles(combined))
        state.last_refresh = datetime.now(timezone.utc)

        summary = self.status_summary()
        logger.info(
            "Refresh complete: %d articles, %d feeds ok, %d feeds failed",
            len(state.articles),
            summary.success_count,
            summary.error_count,
        )

        self._sink.show_loading(False)
        self.apply_filters()
        self._sink.show_status(summary)
        return state.articles

    def apply_filters(self) -> List[Article]:
        """Recompute the displayed subset and hand it to the sink."""
        state = self.state
        state.filtered_articles = filter_articles(
            state.articles, state.current_filter, state.current_search
        )
        self._sink.show_articles(state.filtered_articles)
        return state.filtered_articles

    def set_filter(self, category: str) -> List[Article]:
        if not category:
            return self.state.filtered_articles
        self.state.current_filter = category
        return self.apply_filters()

    def set_search(self, text: str) -> List[Article]:
        self.state.current_search = (text or "").lower().strip()
        return self.apply_filters()

    def status_summary(self) -> StatusSummary:
        return summarize_status(self.state)

    def close(self) -> None:
        self._session.close()
