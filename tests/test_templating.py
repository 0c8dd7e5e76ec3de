from datetime import datetime, timedelta, timezone

from headlinea.templating import category_label, excerpt, get_environment, relative_date

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_get_environment_registers_filters():
    env = get_environment()
    assert {"category_label", "excerpt", "relative_date"} <= set(env.filters)
    rendered = env.from_string("{{ value | category_label }}").render(
        value="latest_technologies"
    )
    assert rendered == "Technology"


def test_category_label_passes_unknown_keys_through():
    assert category_label("global_trends_world_news") == "World News"
    assert category_label("sports") == "sports"


def test_excerpt_strips_html_and_truncates():
    assert excerpt("<p>Hello <b>world</b>.</p>") == "Hello world."
    long_text = "<div>" + "a" * 250 + "</div>"
    assert excerpt(long_text) == "a" * 200 + "..."
    assert excerpt("") == "No description available"


def test_relative_date_buckets():
    assert relative_date(None, NOW) == "Unknown date"
    assert relative_date(NOW - timedelta(seconds=30), NOW) == "Just now"
    assert relative_date(NOW - timedelta(minutes=5), NOW) == "5m ago"
    assert relative_date(NOW - timedelta(hours=3), NOW) == "3h ago"
    assert relative_date(NOW - timedelta(days=2), NOW) == "2d ago"
    old = datetime(2024, 1, 5, tzinfo=timezone.utc)
    assert relative_date(old, NOW) == "Jan 5, 2024"


def test_relative_date_future_is_just_now():
    assert relative_date(NOW + timedelta(hours=1), NOW) == "Just now"
