"""Shopping list service: product search, items, budget."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

from ..common.collection import PersistedCollection
from ..common.config import ShoppingSettings, settings
from ..common.debounce import Debouncer
from ..common.errors import PersistenceError, TrackerError, ValidationError
from ..common.formatting import format_currency
from ..common.notify import Notifier
from ..common.projection import project, where
from ..common.service import TrackerService
from ..common.storage import KeyValueStore
from .exchange_client import ExchangeRateClient
from .models import CATEGORIES, Conversion, ProductCandidate, ShoppingItem
from .product_client import ProductLookupClient
from .views import ShoppingSummary, build_summary

logger = logging.getLogger(__name__)


class ShoppingTracker(TrackerService[ShoppingItem]):
    """Shopping list with product lookup, price alerts and a budget.

    Usage:
        tracker = ShoppingTracker(open_store())
        tracker.search_as_you_type("nutel")
        tracker.search_as_you_type("nutella")
        preview = await tracker.wait_for_search()
        item = await tracker.add_item("Nutella", price=4.99, preview=preview)
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: ShoppingSettings | None = None,
        product_client: ProductLookupClient | None = None,
        exchange_client: ExchangeRateClient | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.config = config or settings.shopping
        super().__init__(
            PersistedCollection(store, self.config.store_key, ShoppingItem),
            notifier,
        )
        self.store = store
        self.product_client = product_client or ProductLookupClient(self.config)
        self.exchange_client = exchange_client or ExchangeRateClient(self.config)
        self.budget = self._load_budget()
        self.preview: ProductCandidate | None = None
        self.last_conversion: Conversion | None = None
        self._search = Debouncer(self.preview_search, delay=self.config.search_debounce_seconds)

    # --- Product search ---

    async def search_products(self, query: str) -> list[ProductCandidate]:
        """Raw product lookup; raises NotFound / FetchError / ValidationError."""
        return await self.product_client.search(query)

    async def preview_search(self, query: str) -> ProductCandidate | None:
        """Look up query and keep the first candidate as the preview.

        Queries shorter than the configured minimum are ignored.
        """
        query = (query or "").strip()
        if len(query) < self.config.min_query_length:
            return None
        try:
            results = await self.search_products(query)
        except TrackerError as exc:
            self.notifier.error(str(exc))
            return None
        self.preview = results[0]
        return self.preview

    def search_as_you_type(self, query: str) -> asyncio.Task:
        """Debounced preview_search; only the last call in the window runs."""
        return self._search.trigger(query)

    async def wait_for_search(self) -> ProductCandidate | None:
        return await self._search.wait()

    # --- Items ---

    async def add_item(
        self,
        name: str,
        price: float | str | None = 0,
        qty: int | str | None = 1,
        category: str = "other",
        priority: str | None = "medium",
        alert_price: float | str | None = None,
        note: str = "",
        preview: ProductCandidate | None = None,
    ) -> ShoppingItem | None:
        """Add an item to the list.

        The image (and barcode) of the previewed product is attached when
        the item name contains the start of the product's name.
        """
        try:
            item = self._build_item(name, price, qty, category, priority, alert_price, note,
                                    preview or self.preview)
        except ValidationError as exc:
            self.notifier.error(str(exc))
            return None

        try:
            self.collection.add(item)
        except PersistenceError as exc:
            self._warn_persistence(exc)

        if item.alert_triggered:
            self.notifier.success(
                f'🔔 Price alert: "{item.name}" is at or below your alert price of '
                f"{format_currency(item.alert_price)}!",
                duration_ms=5000,
            )
        else:
            self.notifier.success(f'Added: "{item.name}"')

        if item.price > 0:
            await self._log_conversion(item.price)

        self.preview = None
        return item

    def _build_item(
        self,
        name: str,
        price: Any,
        qty: Any,
        category: str,
        priority: str | None,
        alert_price: Any,
        note: str,
        preview: ProductCandidate | None,
    ) -> ShoppingItem:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter an item name.")

        price_value = _to_float(price) or 0.0
        if price_value < 0:
            raise ValidationError("Price cannot be negative.")
        qty_value = _to_int(qty) or 1
        qty_value = min(max(qty_value, 1), self.config.max_quantity)
        alert_value = _to_float(alert_price) or None

        image = None
        barcode = None
        if preview is not None:
            prefix = preview.name.lower()[:8]
            if prefix in name.lower():
                image = preview.image
                barcode = preview.code

        return ShoppingItem(
            id=self._new_id("item"),
            name=name,
            price=price_value,
            qty=qty_value,
            category=category if category in CATEGORIES else "other",
            priority=(priority or "").strip().lower() or None,
            alert_price=alert_value,
            image=image,
            note=(note or "").strip(),
            barcode=barcode,
        )

    async def _log_conversion(self, usd_amount: float) -> None:
        try:
            self.last_conversion = await self.exchange_client.convert(
                usd_amount, self.config.display_currency
            )
        except TrackerError as exc:
            logger.warning("Currency conversion failed: %s", exc)
            return
        logger.info("[Currency] %s ≈ %s", format_currency(usd_amount), self.last_conversion)

    def _mutate(self, item_id: str, patch: dict) -> ShoppingItem | None:
        if item_id not in self.collection:
            return None
        try:
            return self.collection.update(item_id, patch)
        except PersistenceError as exc:
            self._warn_persistence(exc)
            return self.collection.get(item_id)

    def toggle_purchased(self, item_id: str) -> ShoppingItem | None:
        item = self.collection.get(item_id)
        if item is None:
            return None
        return self._mutate(item_id, {"purchased": not item.purchased})

    def increment_qty(self, item_id: str) -> ShoppingItem | None:
        item = self.collection.get(item_id)
        if item is None:
            return None
        return self._mutate(item_id, {"qty": min(item.qty + 1, self.config.max_quantity)})

    def decrement_qty(self, item_id: str) -> ShoppingItem | None:
        item = self.collection.get(item_id)
        if item is None or item.qty <= 1:
            return item
        return self._mutate(item_id, {"qty": item.qty - 1})

    def remove_item(self, item_id: str) -> ShoppingItem | None:
        item = self.collection.get(item_id)
        if item is None:
            return None
        try:
            self.collection.remove(item_id)
        except PersistenceError as exc:
            self._warn_persistence(exc)
        self.notifier.info(f'Removed: "{item.name}"')
        return item

    def clear_purchased(self) -> int:
        """Remove purchased items; returns how many were removed."""
        count = sum(1 for item in self.collection.values() if item.purchased)
        if not count:
            self.notifier.info("No purchased items to clear.")
            return 0
        try:
            self.collection.remove_where(lambda item: item.purchased)
        except PersistenceError as exc:
            self._warn_persistence(exc)
        self.notifier.success(f"Cleared {count} purchased item{'s' if count != 1 else ''}.")
        return count

    # --- Budget ---

    def _load_budget(self) -> float:
        value = _to_float(self.store.get(self.config.budget_store_key, self.config.default_budget))
        if value is None or value < 0:
            logger.warning("Ignoring invalid stored budget; using default")
            return self.config.default_budget
        return value

    def set_budget(self, value: float | str) -> bool:
        budget = _to_float(value)
        if budget is None or budget < 0:
            self.notifier.error("Budget must be a non-negative number.")
            return False
        self.budget = budget
        try:
            self.store.set(self.config.budget_store_key, budget)
        except PersistenceError as exc:
            self._warn_persistence(exc)
        return True

    # --- Views ---

    def items(self, category: str = "all", sort: str = "added_at") -> list[ShoppingItem]:
        return project(self.collection.values(), where("category", category), sort=sort)

    def summary(self, category: str = "all", sort: str = "added_at") -> ShoppingSummary:
        return build_summary(
            self.collection.values(),
            self.items(category, sort),
            budget=self.budget,
            active_category=category,
        )

    async def aclose(self) -> None:
        self._search.cancel()
        await self.product_client.aclose()
        await self.exchange_client.aclose()


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    return int(number) if number is not None else None
