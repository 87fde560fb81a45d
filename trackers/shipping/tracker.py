"""Shipping tracker service: add, refresh, remove and list shipments."""

from __future__ import annotations

import logging
from datetime import datetime

from ..common.collection import PersistedCollection
from ..common.config import ShippingSettings, settings
from ..common.errors import DuplicateError, FetchError, PersistenceError, ValidationError
from ..common.notify import Notifier
from ..common.projection import project, where
from ..common.service import TrackerService
from ..common.storage import KeyValueStore
from .geocoder import Geocoder
from .models import CARRIERS, Shipment
from .tracking_client import TrackingClient
from .views import ShippingDashboard, build_dashboard

logger = logging.getLogger(__name__)


class ShippingTracker(TrackerService[Shipment]):
    """Tracks packages by tracking number and carrier.

    Usage:
        tracker = ShippingTracker(open_store())
        shipment = await tracker.add_package("1Z999AA1012345678D", "ups")
        await tracker.refresh_package(shipment.id)
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: ShippingSettings | None = None,
        tracking_client: TrackingClient | None = None,
        geocoder: Geocoder | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.config = config or settings.shipping
        super().__init__(
            PersistedCollection(store, self.config.store_key, Shipment),
            notifier,
        )
        self.tracking_client = tracking_client or TrackingClient(self.config)
        self.geocoder = geocoder or Geocoder(self.config)
        self._pending_numbers: set[str] = set()

    # --- Add ---

    async def add_package(
        self,
        tracking_number: str,
        carrier: str | None = None,
        label: str | None = None,
    ) -> Shipment | None:
        """Start tracking a package.

        Returns the new shipment, or None when the add was rejected or the
        lookup failed (the reason is sent to the notifier).
        """
        try:
            number, carrier_code, label = self._validate_new(tracking_number, carrier, label)
        except ValidationError as exc:
            self.notifier.error(str(exc))
            return None
        except DuplicateError as exc:
            self.notifier.info(str(exc))
            return None

        self._pending_numbers.add(number)
        try:
            result = await self.tracking_client.fetch_tracking(number, carrier_code)
            latest_location = result.events[0].location if result.events else None
            geocode = await self.geocoder.geocode(latest_location)
        except FetchError as exc:
            logger.error("Tracking error for %s: %s", number, exc)
            self.notifier.error(f"Error: {exc}")
            return None
        finally:
            self._pending_numbers.discard(number)

        shipment = Shipment(
            id=self._new_id("pkg"),
            tracking_number=number,
            carrier=carrier_code,
            label=label,
            status=result.status,
            events=result.events,
            estimated_delivery=result.estimated_delivery,
            geocode=geocode,
        )
        try:
            self.collection.add(shipment)
        except PersistenceError as exc:
            self._warn_persistence(exc)

        logger.info("Tracking %s (%s) as %s", number, carrier_code, shipment.id)
        self.notifier.success(f'Now tracking: "{label}"')
        return shipment

    def _validate_new(
        self,
        tracking_number: str,
        carrier: str | None,
        label: str | None,
    ) -> tuple[str, str, str]:
        number = (tracking_number or "").strip().upper()
        if not number:
            raise ValidationError("Please enter a tracking number.")

        carrier_code = (carrier or self.config.default_carrier).strip().lower()
        if carrier_code not in CARRIERS:
            raise ValidationError(
                f"Unknown carrier '{carrier}'. Choose one of: {', '.join(CARRIERS)}."
            )

        if number in self._pending_numbers or self.collection.find_by("tracking_number", number):
            raise DuplicateError("That tracking number is already being tracked.")

        label = (label or "").strip() or f"Package {number[-6:]}"
        return number, carrier_code, label

    # --- Refresh ---

    async def refresh_package(self, shipment_id: str) -> Shipment | None:
        """Re-fetch tracking data for an existing shipment.

        On failure the stored shipment is left untouched. A response that
        arrives after the shipment was removed, or after a newer refresh was
        started, is discarded.
        """
        shipment = self.collection.get(shipment_id)
        if shipment is None:
            logger.debug("Refresh requested for unknown shipment %s", shipment_id)
            return None

        self.notifier.info(f'Refreshing tracking for "{shipment.label}"…')
        token = self._begin_request(shipment_id)

        try:
            result = await self.tracking_client.fetch_tracking(
                shipment.tracking_number, shipment.carrier
            )
            latest_location = result.events[0].location if result.events else None
            geocode = await self.geocoder.geocode(latest_location)
        except FetchError as exc:
            self.notifier.error(f"Refresh failed: {exc}")
            return None

        if not self._accepts(shipment_id, token):
            return None

        patch = {**result.to_patch(), "geocode": geocode}
        try:
            updated = self.collection.update(shipment_id, patch)
        except PersistenceError as exc:
            self._warn_persistence(exc)
            updated = self.collection.get(shipment_id)

        self.notifier.success("Tracking updated!")
        return updated

    # --- Remove / clear ---

    def remove_package(self, shipment_id: str) -> Shipment | None:
        shipment = self.collection.get(shipment_id)
        if shipment is None:
            return None
        try:
            self.collection.remove(shipment_id)
        except PersistenceError as exc:
            self._warn_persistence(exc)
        self._forget(shipment_id)
        self.notifier.info(f'Removed "{shipment.label}"')
        return shipment

    def clear_all(self) -> int:
        """Remove every shipment; returns how many were removed."""
        count = len(self.collection)
        if count == 0:
            return 0
        try:
            self.collection.clear()
        except PersistenceError as exc:
            self._warn_persistence(exc)
        self._request_tokens.clear()
        self.notifier.info("All packages cleared.")
        return count

    # --- Views ---

    def shipments(self, status: str | None = None) -> list[Shipment]:
        """Shipments in insertion order, optionally limited to one status."""
        return project(self.collection.values(), where("status", status), sort=None)

    def dashboard(self, status: str | None = None, now: datetime | None = None) -> ShippingDashboard:
        return build_dashboard(self.collection.values(), self.shipments(status), now=now)

    async def aclose(self) -> None:
        await self.tracking_client.aclose()
        await self.geocoder.aclose()
