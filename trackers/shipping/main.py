"""CLI entry point for the shipping tracker.

Usage:
    python -m trackers.shipping.main add 1Z999AA1012345678D --carrier ups --label "New laptop"
    python -m trackers.shipping.main list
    python -m trackers.shipping.main list --status delivered --html shipments.html
    python -m trackers.shipping.main refresh pkg_1760803200000
    python -m trackers.shipping.main remove pkg_1760803200000
    python -m trackers.shipping.main clear --yes
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
from .models import CARRIERS
from .tracker import ShippingTracker

logger = logging.getLogger(__name__)


def _print_toast(toast: Toast) -> None:
    print(f"{toast.icon} {toast.message}")


def _print_dashboard(tracker: ShippingTracker, status: str | None) -> None:
    dashboard = tracker.dashboard(status)
    print(
        f"Total: {dashboard.total}  In transit: {dashboard.in_transit}  "
        f"Delivered: {dashboard.delivered}"
    )
    if dashboard.empty:
        print("No shipments yet.")
        return
    for card in dashboard.cards:
        eta = ""
        if card.eta and card.eta.delivered:
            eta = "✓ Delivered"
        elif card.eta:
            eta = f"ETA {card.eta.date} ({card.eta.countdown})"
        print(
            f"  [{card.id}] {card.carrier.icon} {card.label} - {card.carrier.name} "
            f"{card.tracking_number} · {card.status_label} "
            f"({card.progress_percent}%) {eta}"
        )


async def _run(args: argparse.Namespace, tracker: ShippingTracker) -> None:
    try:
        if args.command == "add":
            await tracker.add_package(args.tracking_number, args.carrier, args.label)
        elif args.command == "refresh":
            await tracker.refresh_package(args.id)
        elif args.command == "remove":
            if tracker.remove_package(args.id) is None:
                logger.warning("No shipment with id %s", args.id)
        elif args.command == "clear":
            if args.yes:
                tracker.clear_all()
            else:
                print("Refusing to clear without --yes")
        elif args.command == "list":
            _print_dashboard(tracker, args.status)
            if args.html:
                html = CardRenderer().render_shipping(tracker.dashboard(args.status))
                Path(args.html).write_text(html, encoding="utf-8")
                logger.info("Cards written to %s", args.html)
    finally:
        await tracker.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Shipping Tracker")
    parser.add_argument(
        "--storage",
        choices=["sqlite", "json", "memory"],
        help="Override the storage backend from settings",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Track a new package")
    add.add_argument("tracking_number")
    add.add_argument("--carrier", choices=sorted(CARRIERS), default=settings.shipping.default_carrier)
    add.add_argument("--label", default="")

    refresh = sub.add_parser("refresh", help="Re-fetch tracking for a package")
    refresh.add_argument("id")

    remove = sub.add_parser("remove", help="Stop tracking a package")
    remove.add_argument("id")

    clear = sub.add_parser("clear", help="Remove all tracked packages")
    clear.add_argument("--yes", action="store_true", help="Confirm clearing everything")

    list_cmd = sub.add_parser("list", help="Show tracked packages")
    list_cmd.add_argument("--status", help="Only show one status (default: all)")
    list_cmd.add_argument("--html", type=str, help="Also render cards to this HTML file")

    args = parser.parse_args()
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.storage:
        settings.storage.backend = args.storage

    notifier = Notifier()
    notifier.subscribe(_print_toast)
    tracker = ShippingTracker(open_store(settings), notifier=notifier)

    if settings.shipping.demo_mode:
        logger.info("Running in DEMO MODE: simulated tracking data.")

    asyncio.run(_run(args, tracker))


if __name__ == "__main__":
    main()
