"""Category and free-text filtering of the aggregated article list."""

from __future__ import annotations

from typing import List, Sequence

from .models import ALL_CATEGORIES, Article


def _matches_search(article: Article, needle: str) -> bool:
    return (
        needle in article.title.lower()
        or needle in article.description.lower()
        or needle in article.source.lower()
    )


def filter_articles(
    articles: Sequence[Article],
    category: str = ALL_CATEGORIES,
    search: str = "",
) -> List[Article]:
    """Return the articles matching both the category and the search text.

    The input sequence is never modified and the result keeps its order.
    """
    filtered = list(articles)

    if category != ALL_CATEGORIES:
        filtered = [article for article in filtered if article.category == category]

    needle = (search or "").strip().lower()
    if needle:
        filtered = [article for article in filtered if _matches_search(article, needle)]

    return filtered
