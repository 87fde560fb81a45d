"""CLI entry point for the shopping list.

Usage:
    python -m trackers.shopping.main search nutella
    python -m trackers.shopping.main add "Nutella 400g" --price 4.99 --category groceries --lookup nutella
    python -m trackers.shopping.main list --category groceries --sort price --html list.html
    python -m trackers.shopping.main toggle item_1760803200000
    python -m trackers.shopping.main qty item_1760803200000 --inc
    python -m trackers.shopping.main budget 150
    python -m trackers.shopping.main clear-purchased
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from ..common.config import settings
from ..common.errors import TrackerError
from ..common.logging import setup_logging
from ..common.notify import Notifier, Toast
from ..common.projection import SORT_KEYS
from ..common.storage import open_store
from ..template_engine import CardRenderer
from .models import CATEGORIES, PRIORITY_LABELS
from .tracker import ShoppingTracker

logger = logging.getLogger(__name__)


def _print_toast(toast: Toast) -> None:
    print(f"{toast.icon} {toast.message}")


def _print_summary(tracker: ShoppingTracker, category: str, sort: str) -> None:
    summary = tracker.summary(category, sort)
    print(
        f"Items: {summary.item_count}  Total: {summary.total}  "
        f"Purchased: {summary.purchased_total}  Budget: {summary.budget.remaining_text}"
    )
    print("  " + "  ".join(f"{t.icon} {t.label} ({t.count})" for t in summary.tabs))
    if summary.empty:
        print("Your list is empty.")
        return
    for card in summary.cards:
        check = "✓" if card.purchased else " "
        alert = " 🔔 Price Alert!" if card.alert_triggered else ""
        print(
            f"  [{check}] [{card.id}] {card.name} - {card.price} x{card.qty} "
            f"{card.category.icon} {card.category.label} · {card.priority_label}{alert}"
        )


async def _search(tracker: ShoppingTracker, query: str) -> None:
    try:
        candidates = await tracker.search_products(query)
    except TrackerError as exc:
        tracker.notifier.error(str(exc))
        return
    for candidate in candidates:
        code = f" [{candidate.code}]" if candidate.code else ""
        print(f"  {candidate.display_name}{code}")


async def _run(args: argparse.Namespace, tracker: ShoppingTracker) -> None:
    try:
        if args.command == "search":
            await _search(tracker, args.query)
        elif args.command == "add":
            preview = await tracker.preview_search(args.lookup) if args.lookup else None
            await tracker.add_item(
                args.name,
                price=args.price,
                qty=args.qty,
                category=args.category,
                priority=args.priority,
                alert_price=args.alert,
                note=args.note,
                preview=preview,
            )
        elif args.command == "toggle":
            if tracker.toggle_purchased(args.id) is None:
                logger.warning("No item with id %s", args.id)
        elif args.command == "qty":
            item = tracker.decrement_qty(args.id) if args.dec else tracker.increment_qty(args.id)
            if item is None:
                logger.warning("No item with id %s", args.id)
        elif args.command == "remove":
            if tracker.remove_item(args.id) is None:
                logger.warning("No item with id %s", args.id)
        elif args.command == "clear-purchased":
            tracker.clear_purchased()
        elif args.command == "budget":
            if tracker.set_budget(args.amount):
                print(f"Budget set to {args.amount}")
        elif args.command == "list":
            _print_summary(tracker, args.category, args.sort)
            if args.html:
                html = CardRenderer().render_shopping(tracker.summary(args.category, args.sort))
                Path(args.html).write_text(html, encoding="utf-8")
                logger.info("Cards written to %s", args.html)
    finally:
        await tracker.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Shopping Tracker")
    parser.add_argument(
        "--storage",
        choices=["sqlite", "json", "memory"],
        help="Override the storage backend from settings",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Look up products by name or barcode")
    search.add_argument("query")

    add = sub.add_parser("add", help="Add an item to the list")
    add.add_argument("name")
    add.add_argument("--price", type=float, default=0.0)
    add.add_argument("--qty", type=int, default=1)
    add.add_argument("--category", choices=sorted(CATEGORIES), default="other")
    add.add_argument("--priority", choices=sorted(PRIORITY_LABELS), default="medium")
    add.add_argument("--alert", type=float, help="Price alert threshold")
    add.add_argument("--note", default="")
    add.add_argument("--lookup", help="Product search whose image is attached when names match")

    toggle = sub.add_parser("toggle", help="Toggle purchased")
    toggle.add_argument("id")

    qty = sub.add_parser("qty", help="Change an item's quantity by one")
    qty.add_argument("id")
    direction = qty.add_mutually_exclusive_group()
    direction.add_argument("--inc", action="store_true", help="Increase (default)")
    direction.add_argument("--dec", action="store_true", help="Decrease")

    remove = sub.add_parser("remove", help="Remove an item")
    remove.add_argument("id")

    sub.add_parser("clear-purchased", help="Remove every purchased item")

    budget = sub.add_parser("budget", help="Set the shopping budget")
    budget.add_argument("amount", type=float)

    list_cmd = sub.add_parser("list", help="Show the list")
    list_cmd.add_argument("--category", default="all")
    list_cmd.add_argument("--sort", choices=SORT_KEYS, default="added_at")
    list_cmd.add_argument("--html", type=str, help="Also render cards to this HTML file")

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.storage:
        settings.storage.backend = args.storage

    notifier = Notifier()
    notifier.subscribe(_print_toast)
    tracker = ShoppingTracker(open_store(settings), notifier=notifier)
    asyncio.run(_run(args, tracker))


if __name__ == "__main__":
    main()
