"""Jinja2 environment for headlinea templates."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from importlib import resources

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

_ENV: Environment | None = None

EXCERPT_LENGTH = 200

CATEGORY_LABELS = {
    "latest_technologies": "Technology",
    "economic_trends_and_business_models": "Economy",
    "global_trends_world_news": "World News",
}


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def strip_html(raw_value: str) -> str:
    """Return text content extracted from HTML fragments."""
    soup = BeautifulSoup(raw_value, "html.parser")
    text = soup.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+([.,;:!?])", r"\1", text)
    text = re.sub(r"\s{2,}", " ", text)
    return text.strip()


def excerpt(value: str | None, limit: int = EXCERPT_LENGTH) -> str:
    """Plain-text preview of an HTML description."""
    if not value:
        return "No description available"
    text = strip_html(value)
    if len(text) > limit:
        text = text[:limit] + "..."
    return text


def relative_date(value: datetime | None, now: datetime | None = None) -> str:
    """Render a timestamp as "5m ago", "3h ago" and so on."""
    if value is None:
        return "Unknown date"

    now = now or datetime.now(timezone.utc)
    seconds = (now - value).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"
    return f"{value:%b} {value.day}, {value.year}"


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _ENV.filters["category_label"] = category_label
        _ENV.filters["excerpt"] = excerpt
        _ENV.filters["relative_date"] = relative_date
    return _ENV
