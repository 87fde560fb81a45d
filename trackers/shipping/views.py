"""View models for shipment cards.

Pure data derived from shipments; the template engine turns these into
markup without any logic of its own.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..common.formatting import format_date
from ..common.projection import PROGRESS_STEPS, progress_index, progress_percent
from .models import CARRIERS, STATUS_BADGE, STATUS_LABEL, Carrier, Shipment, ShipmentStatus

ACTIVE_STATUSES = (ShipmentStatus.IN_TRANSIT, ShipmentStatus.OUT_FOR_DELIVERY)


@dataclass
class ProgressStep:
    label: str
    state: str  # done | current | upcoming

    @property
    def icon(self) -> str:
        return {"done": "✓", "current": "●"}.get(self.state, "○")


@dataclass
class EtaView:
    delivered: bool
    date: str = ""
    countdown: str = ""
    due_today: bool = False


@dataclass
class EventView:
    description: str
    location: str
    timestamp: str
    date: str


@dataclass
class ShipmentCardView:
    id: str
    label: str
    tracking_number: str
    carrier: Carrier
    status: str
    status_label: str
    badge_class: str
    progress_index: int
    progress_percent: int
    steps: list[ProgressStep]
    eta: EtaView | None
    events: list[EventView]
    geocode: tuple[float, float] | None = None


@dataclass
class ShippingDashboard:
    total: int
    in_transit: int
    delivered: int
    cards: list[ShipmentCardView] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.cards


def build_progress_steps(status: ShipmentStatus | str) -> list[ProgressStep]:
    idx = progress_index(status)
    steps = []
    for i, label in enumerate(PROGRESS_STEPS):
        state = "done" if i < idx else "current" if i == idx else "upcoming"
        steps.append(ProgressStep(label=label, state=state))
    return steps


def build_eta(
    eta: datetime | None,
    status: ShipmentStatus | str,
    now: datetime | None = None,
) -> EtaView | None:
    """ETA widget: delivered banner, countdown, or nothing without an ETA."""
    if ShipmentStatus(status) == ShipmentStatus.DELIVERED:
        return EtaView(delivered=True)
    if eta is None:
        return None

    now = now or datetime.now(timezone.utc)
    diff_days = math.ceil((eta - now).total_seconds() / 86400)
    if diff_days <= 0:
        countdown = "Expected today"
    else:
        countdown = f"{diff_days} day{'s' if diff_days != 1 else ''} remaining"
    return EtaView(
        delivered=False,
        date=format_date(eta, "short"),
        countdown=countdown,
        due_today=diff_days <= 0,
    )


def build_card(shipment: Shipment, now: datetime | None = None) -> ShipmentCardView:
    carrier = CARRIERS.get(shipment.carrier) or Carrier(shipment.carrier, "📦", "#888888")
    status = ShipmentStatus(shipment.status)
    return ShipmentCardView(
        id=shipment.id,
        label=shipment.label,
        tracking_number=shipment.tracking_number,
        carrier=carrier,
        status=status.value,
        status_label=STATUS_LABEL.get(status, status.value),
        badge_class=STATUS_BADGE.get(status, "badge-muted"),
        progress_index=progress_index(status),
        progress_percent=progress_percent(status),
        steps=build_progress_steps(status),
        eta=build_eta(shipment.estimated_delivery, status, now=now),
        events=[
            EventView(
                description=ev.description,
                location=ev.location,
                timestamp=ev.timestamp.isoformat(),
                date=format_date(ev.timestamp, "short"),
            )
            for ev in shipment.events
        ],
        geocode=(shipment.geocode.lat, shipment.geocode.lng) if shipment.geocode else None,
    )


def build_dashboard(
    all_shipments: list[Shipment],
    visible: list[Shipment],
    now: datetime | None = None,
) -> ShippingDashboard:
    """Stats over every shipment plus cards for the visible ones."""
    return ShippingDashboard(
        total=len(all_shipments),
        in_transit=sum(1 for s in all_shipments if s.status in ACTIVE_STATUSES),
        delivered=sum(1 for s in all_shipments if s.status == ShipmentStatus.DELIVERED),
        cards=[build_card(s, now=now) for s in visible],
    )
