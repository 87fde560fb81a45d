"""Data models for shipment tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ..common.models import TrackedEntity


class ShipmentStatus(str, Enum):
    """Lifecycle status of a shipment."""
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED_ATTEMPT = "failed_attempt"
    EXCEPTION = "exception"


STATUS_LABEL = {
    ShipmentStatus.PENDING: "Pending",
    ShipmentStatus.IN_TRANSIT: "In Transit",
    ShipmentStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    ShipmentStatus.DELIVERED: "Delivered",
    ShipmentStatus.FAILED_ATTEMPT: "Failed Attempt",
    ShipmentStatus.EXCEPTION: "Exception",
}

STATUS_BADGE = {
    ShipmentStatus.PENDING: "badge-muted",
    ShipmentStatus.IN_TRANSIT: "badge-info",
    ShipmentStatus.OUT_FOR_DELIVERY: "badge-warning",
    ShipmentStatus.DELIVERED: "badge-success",
    ShipmentStatus.FAILED_ATTEMPT: "badge-error",
    ShipmentStatus.EXCEPTION: "badge-error",
}


@dataclass(frozen=True)
class Carrier:
    name: str
    icon: str
    color: str


CARRIERS = {
    "ups": Carrier("UPS", "🟫", "#8B4513"),
    "fedex": Carrier("FedEx", "🟣", "#4B0082"),
    "usps": Carrier("USPS", "🦅", "#336699"),
    "dhl": Carrier("DHL", "🟡", "#FFCC00"),
    "amazon": Carrier("Amazon", "📦", "#FF9900"),
    "ontrac": Carrier("OnTrac", "🔵", "#0066CC"),
}


class TrackingEvent(BaseModel):
    """One checkpoint in a shipment's history."""
    timestamp: datetime
    description: str
    location: str = ""


class GeoPoint(BaseModel):
    lat: float
    lng: float


class Shipment(TrackedEntity):
    """A tracked package. tracking_number is the natural key."""

    tracking_number: str
    carrier: str
    label: str
    status: ShipmentStatus = ShipmentStatus.PENDING
    estimated_delivery: datetime | None = None
    events: list[TrackingEvent] = Field(default_factory=list)
    geocode: GeoPoint | None = None

    @field_validator("tracking_number")
    @classmethod
    def _normalize_tracking_number(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def latest_location(self) -> str:
        return self.events[0].location if self.events else ""


@dataclass
class TrackingResult:
    """Enrichment fields returned by a tracking lookup.

    Events keep the order the source provides (typically newest first).
    """

    status: ShipmentStatus
    events: list[TrackingEvent] = field(default_factory=list)
    estimated_delivery: datetime | None = None

    def to_patch(self) -> dict:
        return {
            "status": self.status,
            "events": list(self.events),
            "estimated_delivery": self.estimated_delivery,
        }
