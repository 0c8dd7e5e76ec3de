"""Command-line interface for the headlinea aggregator."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pprint
import sys
import threading
from pathlib import Path
from typing import List, Optional

from .config import parse_app_config
from .models import ALL_CATEGORIES
from .renderers import ConsoleSink, HtmlFileSink
from .runner import NewsAggregator, save_articles_to_file
from .scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Aggregate, deduplicate and filter news from RSS feeds."
    )
    parser.add_argument(
        "--config",
        default="configs/config.xml",
        help="Path to the main configuration XML file.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    parser.add_argument(
        "--category",
        default=ALL_CATEGORIES,
        help="Only show articles from this category (default: all).",
    )
    parser.add_argument(
        "--search",
        default="",
        help="Only show articles whose title, description or source contain TEXT.",
    )
    parser.add_argument(
        "--html",
        metavar="PATH",
        help="Write a static HTML page to PATH instead of printing to the console.",
    )
    parser.add_argument(
        "--save-articles",
        metavar="PATH",
        help="Write the aggregated articles to PATH as JSON after each refresh.",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and refresh on the configured interval.",
    )

    return parser


LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"

# Per-request connection chatter from requests' transport.
_NOISY_LOGGERS = ("urllib3",)


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options.

    Log records go to stderr so they never mix with the article list that
    ``ConsoleSink`` prints on stdout. The thread name is included because feed
    fetches and timed refreshes run off the main thread.
    """
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    log_path = Path(log_file) if log_file else None
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logger.debug(
        "headlinea logging at %s (file: %s)", level_name.upper(), log_path or "none"
    )


def _wait_for_interrupt(stop_event: threading.Event) -> None:
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config)

        # CLI overrides config
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file
        configure_logging(log_level, log_file)

        logger.info(
            "Active Configuration:\n%s", pprint.pformat(dataclasses.asdict(app_config))
        )

        sink = HtmlFileSink(args.html) if args.html else ConsoleSink()
        aggregator = NewsAggregator(app_config, sink=sink)
        aggregator.state.current_filter = args.category or ALL_CATEGORIES
        aggregator.state.current_search = args.search.lower().strip()

        def refresh_and_save():
            articles = aggregator.refresh()
            if args.save_articles:
                save_articles_to_file(args.save_articles, articles)
            return articles

        aggregator.load_sources()
        scheduler = RefreshScheduler(
            refresh_and_save, interval=app_config.refresh_interval
        )
        try:
            scheduler.trigger_now()
            if args.watch or app_config.auto_refresh:
                scheduler.enable()
                try:
                    _wait_for_interrupt(threading.Event())
                finally:
                    scheduler.disable()
        finally:
            aggregator.close()
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    return 0
