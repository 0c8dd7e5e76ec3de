"""Shared data models for headlinea."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

STATUS_PENDING = "pending"
STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class FeedSource:
    """A single RSS feed declared in the source catalog."""

    name: str
    rss: str


@dataclass
class SourceCatalog:
    """Feeds grouped by category, in document order."""

    topics: Dict[str, List[FeedSource]] = field(default_factory=dict)

    def iter_feeds(self) -> Iterator[Tuple[str, FeedSource]]:
        for category, feeds in self.topics.items():
            for feed in feeds:
                yield category, feed

    def __len__(self) -> int:
        return sum(len(feeds) for feeds in self.topics.values())


@dataclass
class FeedStatus:
    """Outcome of the most recent fetch of one feed."""

    status: str
    message: Optional[str] = None
    count: Optional[int] = None
    last_fetch: Optional[datetime] = None


@dataclass(frozen=True)
class Article:
    """Normalized news item produced from one converted feed entry."""

    title: str
    description: str
    link: str
    source: str
    category: str
    published: datetime
    author: str
    thumbnail: Optional[str] = None
    guid: Optional[str] = None

    @property
    def pub_date(self) -> str:
        return self.published.isoformat(timespec="milliseconds").replace(
            "+00:00", "Z"
        )

    @property
    def dedup_key(self) -> str:
        return self.title.strip().lower()

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "link": self.link,
            "source": self.source,
            "category": self.category,
            "pubDate": self.pub_date,
            "author": self.author,
            "thumbnail": self.thumbnail,
            "guid": self.guid,
        }


@dataclass
class FeedResult:
    """Articles and status produced by a single feed fetch."""

    articles: List[Article]
    status: FeedStatus


@dataclass
class StatusSummary:
    """Success/error tally shown next to the article list."""

    success_count: int
    error_count: int
    last_refresh: Optional[datetime] = None


@dataclass
class AppState:
    """Mutable state owned by a single aggregator instance."""

    sources: SourceCatalog = field(default_factory=SourceCatalog)
    articles: List[Article] = field(default_factory=list)
    filtered_articles: List[Article] = field(default_factory=list)
    current_filter: str = ALL_CATEGORIES
    current_search: str = ""
    last_refresh: Optional[datetime] = None
    feed_status: Dict[str, FeedStatus] = field(default_factory=dict)
