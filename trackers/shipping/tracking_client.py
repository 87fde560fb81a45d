"""Package tracking lookups.

Live mode queries the AfterShip v4 API. Demo mode (the default, since
AfterShip requires a paid key) simulates realistic tracking data so the
tracker is usable without credentials. Simulated status depends only on the
tracking number, so repeated lookups of the same package agree.
"""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

from pydantic import ValidationError as ModelValidationError

from ..common.config import ShippingSettings, get_aftership_api_key, settings
from ..common.errors import FetchError
from ..common.http_client import AsyncHTTPClient
from .models import ShipmentStatus, TrackingEvent, TrackingResult

logger = logging.getLogger(__name__)

_SIMULATION_TABLE = "ABCDEFGHIJ"
_SIMULATION_STATUSES = (
    ShipmentStatus.PENDING,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.OUT_FOR_DELIVERY,
    ShipmentStatus.DELIVERED,
)

# AfterShip tags that do not map by name alone
_TAG_ALIASES = {
    "info_received": ShipmentStatus.PENDING,
    "attempt_fail": ShipmentStatus.FAILED_ATTEMPT,
    "available_for_pickup": ShipmentStatus.OUT_FOR_DELIVERY,
}


def simulated_status(tracking_number: str) -> ShipmentStatus:
    """Derive a stable demo status from the tracking number's last character.

    The character's position in "ABCDEFGHIJ" modulo 4 picks the status;
    characters outside the table land on in_transit.
    """
    last_char = tracking_number[-1:].upper()
    idx = _SIMULATION_TABLE.find(last_char) if last_char else -1
    step = idx % 4 if idx >= 0 else 1
    return _SIMULATION_STATUSES[step]


def simulate_tracking(
    tracking_number: str,
    carrier: str,
    now: datetime | None = None,
) -> TrackingResult:
    """Build simulated tracking data for demo mode."""
    now = now or datetime.now(timezone.utc)
    status = simulated_status(tracking_number)
    events: list[TrackingEvent] = []

    if status in (
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.DELIVERED,
    ):
        events.extend([
            TrackingEvent(
                timestamp=now - timedelta(hours=1),
                description="Package arrived at local facility",
                location="Chicago, IL, US",
            ),
            TrackingEvent(
                timestamp=now - timedelta(days=1),
                description="Departed sorting center",
                location="Indianapolis, IN, US",
            ),
            TrackingEvent(
                timestamp=now - timedelta(days=2),
                description="Package received by carrier",
                location="Louisville, KY, US",
            ),
        ])

    if status == ShipmentStatus.OUT_FOR_DELIVERY:
        events.insert(0, TrackingEvent(
            timestamp=now - timedelta(minutes=30),
            description="Out for delivery",
            location="Chicago, IL, US",
        ))

    if status == ShipmentStatus.DELIVERED:
        events.insert(0, TrackingEvent(
            timestamp=now - timedelta(hours=2),
            description="Package delivered, left at front door",
            location="Chicago, IL, US",
        ))

    events.append(TrackingEvent(
        timestamp=now - timedelta(days=3),
        description="Order created",
        location="Seller Warehouse, US",
    ))

    if status == ShipmentStatus.DELIVERED:
        eta = None
    elif status == ShipmentStatus.OUT_FOR_DELIVERY:
        eta = now
    else:
        eta = now + timedelta(days=2)

    logger.debug("Simulated %s/%s -> %s", carrier, tracking_number, status.value)
    return TrackingResult(status=status, events=events, estimated_delivery=eta)


def map_status(tag: str | None) -> ShipmentStatus:
    """Map a carrier API status tag onto ShipmentStatus.

    Case-insensitive; CamelCase tags (InTransit) are accepted as well as
    snake_case ones. Unknown or missing tags map to pending.
    """
    if not tag:
        return ShipmentStatus.PENDING
    normalized = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", tag.strip())
    normalized = normalized.replace("-", "_").replace(" ", "_").lower()
    if normalized in _TAG_ALIASES:
        return _TAG_ALIASES[normalized]
    try:
        return ShipmentStatus(normalized)
    except ValueError:
        logger.info("Unrecognized tracking tag %r; treating as pending", tag)
        return ShipmentStatus.PENDING


class TrackingClient:
    """Fetches tracking status and events for a package.

    Usage:
        async with TrackingClient() as client:
            result = await client.fetch_tracking("1Z999AA10123456784", "ups")
    """

    def __init__(
        self,
        config: ShippingSettings | None = None,
        http: AsyncHTTPClient | None = None,
        api_key: str | None = None,
    ) -> None:
        self.config = config or settings.shipping
        self._http = http
        self._owns_http = http is None
        self.api_key = api_key if api_key is not None else get_aftership_api_key()

    @property
    def http(self) -> AsyncHTTPClient:
        if self._http is None:
            self._http = AsyncHTTPClient()
        return self._http

    async def fetch_tracking(self, tracking_number: str, carrier: str) -> TrackingResult:
        """Look up a package.

        Raises:
            FetchError: Network, HTTP or response-shape failure (live mode).
        """
        if self.config.demo_mode:
            if self.config.simulated_delay_seconds > 0:
                await asyncio.sleep(self.config.simulated_delay_seconds)
            return simulate_tracking(tracking_number, carrier)

        url = (
            f"{self.config.aftership_base_url}/trackings/"
            f"{quote(carrier, safe='')}/{quote(tracking_number, safe='')}"
        )
        data = await self.http.get_json(
            url,
            operation="fetch_tracking",
            headers={
                "aftership-api-key": self.api_key,
                "Content-Type": "application/json",
            },
        )
        return self._parse_tracking(data)

    @staticmethod
    def _parse_tracking(data: dict) -> TrackingResult:
        if not isinstance(data, dict):
            raise FetchError("fetch_tracking", "unexpected response shape: expected a JSON object")
        body = data.get("data")
        tracking = body.get("tracking") if isinstance(body, dict) else None
        if not isinstance(tracking, dict):
            tracking = {}
        try:
            events = [
                TrackingEvent(
                    timestamp=cp.get("created_at"),
                    description=cp.get("message") or "",
                    location=", ".join(
                        part for part in (cp.get("city"), cp.get("state"), cp.get("country_iso3"))
                        if part
                    ),
                )
                for cp in tracking.get("checkpoints") or []
            ]
            return TrackingResult(
                status=map_status(tracking.get("tag")),
                events=events,
                estimated_delivery=_parse_eta(tracking.get("expected_delivery")),
            )
        except (ModelValidationError, AttributeError) as exc:
            raise FetchError("fetch_tracking", f"unexpected response shape: {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()

    async def __aenter__(self) -> TrackingClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def _parse_eta(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value.replace("Z", "+00:00")
    try:
        eta = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Ignoring unparsable expected_delivery %r", value)
        return None
    return eta if eta.tzinfo else eta.replace(tzinfo=timezone.utc)
