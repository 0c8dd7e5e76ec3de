"""Rendering helpers and display sinks for the filtered article list."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, TextIO

from .models import Article, StatusSummary
from .templating import get_environment

logger = logging.getLogger(__name__)


def build_articles_text(
    articles: Sequence[Article], now: Optional[datetime] = None
) -> str:
    """Render the article list as plain text."""
    template = get_environment().get_template("articles.txt.j2")
    return template.render(articles=articles, now=now)


def build_status_text(summary: StatusSummary, now: Optional[datetime] = None) -> str:
    """Render the success/error tally as plain text."""
    template = get_environment().get_template("status.txt.j2")
    return template.render(summary=summary, now=now)


def build_page_html(
    articles: Sequence[Article],
    summary: StatusSummary,
    now: Optional[datetime] = None,
) -> str:
    """Render a static HTML page with article cards and the source status."""
    template = get_environment().get_template("page.html.j2")
    return template.render(articles=articles, summary=summary, now=now)


class DisplaySink(Protocol):
    """Consumer of the aggregator's output."""

    def show_loading(self, loading: bool) -> None: ...

    def show_articles(self, articles: Sequence[Article]) -> None: ...

    def show_status(self, summary: StatusSummary) -> None: ...


class NullSink:
    """Sink that discards everything."""

    def show_loading(self, loading: bool) -> None:
        pass

    def show_articles(self, articles: Sequence[Article]) -> None:
        pass

    def show_status(self, summary: StatusSummary) -> None:
        pass


class ConsoleSink:
    """Write the rendered list and status to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream or sys.stdout

    def show_loading(self, loading: bool) -> None:
        if loading:
            self._stream.write("Loading news...\n")
            self._stream.flush()

    def show_articles(self, articles: Sequence[Article]) -> None:
        self._stream.write(build_articles_text(articles))
        self._stream.flush()

    def show_status(self, summary: StatusSummary) -> None:
        self._stream.write(build_status_text(summary))
        self._stream.flush()


class HtmlFileSink:
    """Keep a static HTML page on disk in sync with the latest output.

    During a refresh cycle the page is written once, when the status summary
    arrives, so articles and tally on disk always belong to the same cycle.
    Filter changes outside a cycle rewrite the page immediately.
    """

    def __init__(self, path: str):
        self._path = Path(path)
        self._articles: List[Article] = []
        self._summary = StatusSummary(success_count=0, error_count=0)
        self._in_cycle = False

    @property
    def path(self) -> Path:
        return self._path

    def show_loading(self, loading: bool) -> None:
        if loading:
            self._in_cycle = True

    def show_articles(self, articles: Sequence[Article]) -> None:
        self._articles = list(articles)
        if not self._in_cycle:
            self._write()

    def show_status(self, summary: StatusSummary) -> None:
        self._summary = summary
        self._in_cycle = False
        self._write()

    def _write(self) -> None:
        if self._path.parent and not self._path.parent.exists():
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            build_page_html(self._articles, self._summary), encoding="utf-8"
        )
        logger.debug("Wrote %d articles to %s", len(self._articles), self._path)
