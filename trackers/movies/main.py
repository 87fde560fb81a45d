"""CLI entry point for the movie tracker.

Usage:
    python -m trackers.movies.main trending --html trending.html
    python -m trackers.movies.main search "blade runner"
    python -m trackers.movies.main details tt1375666
    python -m trackers.movies.main mark tt1375666 --status watched
    python -m trackers.movies.main toggle tt1375666
    python -m trackers.movies.main list --tab watched --html watchlist.html
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from ..common.config import settings
from ..common.logging import setup_logging
from ..common.notify import Notifier, Toast
from ..common.storage import open_store
from ..template_engine import CardRenderer
from .models import WatchStatus
from .tracker import MovieTracker

logger = logging.getLogger(__name__)


def _print_toast(toast: Toast) -> None:
    print(f"{toast.icon} {toast.message}")


def _print_grid(tracker: MovieTracker, html: str | None) -> None:
    cards = tracker.grid()
    for card in cards:
        rating = f" ⭐ {card.rating}" if card.rating else ""
        badge = f" [{card.badge}]" if card.badge else ""
        print(f"  {card.id}  {card.title} ({card.year}){rating}{badge}")
    if html:
        Path(html).write_text(CardRenderer().render_movie_grid(cards), encoding="utf-8")
        logger.info("Cards written to %s", html)


def _print_watchlist(tracker: MovieTracker, tab: str, html: str | None) -> None:
    view = tracker.watchlist_view(tab)
    print(f"Total: {view.total}  Watched: {view.watched}  To watch: {view.pending}")
    if view.empty:
        print("Nothing here yet.")
    for item in view.items:
        print(f"  {item.id}  {item.title} ({item.year}) · {item.status_label} · added {item.added}")
    if html:
        Path(html).write_text(CardRenderer().render_watchlist(view), encoding="utf-8")
        logger.info("Watchlist written to %s", html)


async def _print_details(tracker: MovieTracker, movie_id: str, html: str | None) -> None:
    view = await tracker.detail_view(movie_id)
    if view is None:
        return
    if html:
        Path(html).write_text(CardRenderer().render_movie_detail(view), encoding="utf-8")
        logger.info("Details written to %s", html)
    details = view.details
    print(f"{details.title} ({details.year})  {details.rated}  {details.runtime}")
    if details.rating != "N/A":
        print(f"⭐ {details.rating} / 10")
    print(details.plot)
    for label, value in view.facts:
        print(f"  {label}: {value}")


async def _run(args: argparse.Namespace, tracker: MovieTracker) -> None:
    try:
        if args.command == "trending":
            await tracker.load_trending()
            _print_grid(tracker, args.html)
        elif args.command == "search":
            if await tracker.search(args.query):
                _print_grid(tracker, args.html)
        elif args.command == "details":
            await _print_details(tracker, args.id, args.html)
        elif args.command == "mark":
            await tracker.mark(args.id, args.status)
        elif args.command == "toggle":
            if tracker.toggle_watched(args.id) is None:
                logger.warning("%s is not on the watchlist", args.id)
        elif args.command == "refresh":
            await tracker.refresh_entry(args.id)
        elif args.command == "remove":
            if tracker.remove(args.id) is None:
                logger.warning("%s is not on the watchlist", args.id)
        elif args.command == "list":
            _print_watchlist(tracker, args.tab, args.html)
    finally:
        await tracker.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Movie Tracker")
    parser.add_argument(
        "--storage",
        choices=["sqlite", "json", "memory"],
        help="Override the storage backend from settings",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    trending = sub.add_parser("trending", help="Show this week's trending movies")
    trending.add_argument("--html", type=str, help="Also render cards to this HTML file")

    search = sub.add_parser("search", help="Search movies by title")
    search.add_argument("query")
    search.add_argument("--html", type=str, help="Also render cards to this HTML file")

    details = sub.add_parser("details", help="Show full details for a movie id")
    details.add_argument("id")
    details.add_argument("--html", type=str, help="Also render the detail card to this HTML file")

    mark = sub.add_parser("mark", help="Put a movie on the list (again to take it off)")
    mark.add_argument("id")
    mark.add_argument(
        "--status",
        choices=[s.value for s in WatchStatus],
        default=WatchStatus.WATCHLIST.value,
    )

    toggle = sub.add_parser("toggle", help="Flip between to-watch and watched")
    toggle.add_argument("id")

    refresh = sub.add_parser("refresh", help="Re-read a listed movie's metadata")
    refresh.add_argument("id")

    remove = sub.add_parser("remove", help="Remove a movie from the list")
    remove.add_argument("id")

    list_cmd = sub.add_parser("list", help="Show the watchlist")
    list_cmd.add_argument("--tab", choices=["all"] + [s.value for s in WatchStatus], default="all")
    list_cmd.add_argument("--html", type=str, help="Also render the list to this HTML file")

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.storage:
        settings.storage.backend = args.storage

    notifier = Notifier()
    notifier.subscribe(_print_toast)
    tracker = MovieTracker(open_store(settings), notifier=notifier)
    asyncio.run(_run(args, tracker))


if __name__ == "__main__":
    main()
