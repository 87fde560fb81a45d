"""Shipping Tracker Module - package tracking with simulated or AfterShip data."""

from .geocoder import Geocoder
from .models import CARRIERS, Shipment, ShipmentStatus, TrackingEvent, TrackingResult
from .tracker import ShippingTracker
from .tracking_client import TrackingClient, map_status, simulate_tracking, simulated_status

__all__ = [
    "CARRIERS",
    "Geocoder",
    "Shipment",
    "ShipmentStatus",
    "ShippingTracker",
    "TrackingClient",
    "TrackingEvent",
    "TrackingResult",
    "map_status",
    "simulate_tracking",
    "simulated_status",
]
