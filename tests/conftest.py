import json
import threading
from datetime import datetime, timezone

import pytest
import requests

from headlinea.config import AppConfig
from headlinea.models import Article


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return json.loads(self.text)

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Answer converter requests from a dict keyed by the feed's RSS URL.

    Values may be a JSON payload, a FakeResponse, an exception instance to
    raise, or a callable returning one of those.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None):
        with self._lock:
            self.calls.append({"url": url, "params": params, "timeout": timeout})
        key = params["rss_url"] if params else url
        route = self.routes[key]
        if callable(route):
            route = route()
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(route)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def write_sources(tmp_path):
    def _write(topics):
        path = tmp_path / "sources.json"
        path.write_text(json.dumps({"topics": topics}), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def app_config(tmp_path):
    return AppConfig(
        sources=str(tmp_path / "sources.json"),
        converter_url="https://converter.example.com/api.json",
    )


def make_article(title, **overrides):
    values = dict(
        title=title,
        description="Description",
        link=f"https://example.com/{title}",
        source="Feed",
        category="tech",
        published=datetime(2024, 1, 1, tzinfo=timezone.utc),
        author="Unknown",
    )
    values.update(overrides)
    return Article(**values)


@pytest.fixture
def article_factory():
    return make_article
