"""Tests for tracking lookups: simulation, tag mapping, AfterShip parsing."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from trackers.common.config import ShippingSettings
from trackers.common.errors import FetchError
from trackers.shipping.models import ShipmentStatus
from trackers.shipping.tracking_client import (
    TrackingClient,
    map_status,
    simulate_tracking,
    simulated_status,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class TestSimulatedStatus:
    @pytest.mark.parametrize(
        "tracking_number, expected",
        [
            ("1Z999AA1A", ShipmentStatus.PENDING),           # A -> 0
            ("1Z999AA1B", ShipmentStatus.IN_TRANSIT),        # B -> 1
            ("1Z999AA1C", ShipmentStatus.OUT_FOR_DELIVERY),  # C -> 2
            ("ABC123D", ShipmentStatus.DELIVERED),           # D -> 3
            ("1Z999AA1E", ShipmentStatus.PENDING),           # E -> 4 % 4
            ("1Z999AA1J", ShipmentStatus.IN_TRANSIT),        # J -> 9 % 4
            ("1Z999AA1d", ShipmentStatus.DELIVERED),         # case-insensitive
            ("1Z999AA18", ShipmentStatus.IN_TRANSIT),        # not in table
            ("1Z999AA1Z", ShipmentStatus.IN_TRANSIT),
        ],
    )
    def test_status_from_last_character(self, tracking_number, expected):
        assert simulated_status(tracking_number) == expected

    def test_repeated_lookups_agree(self):
        statuses = {simulate_tracking("ABC123D", "ups").status for _ in range(5)}
        assert statuses == {ShipmentStatus.DELIVERED}


class TestSimulateTracking:
    def test_pending_has_only_order_created(self):
        result = simulate_tracking("X1A", "ups", now=NOW)
        assert result.status == ShipmentStatus.PENDING
        assert [e.description for e in result.events] == ["Order created"]
        assert result.estimated_delivery == NOW + timedelta(days=2)

    def test_in_transit_events(self):
        result = simulate_tracking("X1B", "fedex", now=NOW)
        assert [e.description for e in result.events] == [
            "Package arrived at local facility",
            "Departed sorting center",
            "Package received by carrier",
            "Order created",
        ]
        assert result.events[0].timestamp == NOW - timedelta(hours=1)
        assert result.events[-1].timestamp == NOW - timedelta(days=3)

    def test_out_for_delivery(self):
        result = simulate_tracking("X1C", "usps", now=NOW)
        assert result.events[0].description == "Out for delivery"
        assert result.events[0].timestamp == NOW - timedelta(minutes=30)
        assert result.estimated_delivery == NOW
        assert len(result.events) == 5

    def test_delivered(self):
        result = simulate_tracking("ABC123D", "dhl", now=NOW)
        assert result.status == ShipmentStatus.DELIVERED
        assert result.events[0].description == "Package delivered, left at front door"
        assert result.estimated_delivery is None

    def test_demo_client_uses_simulation(self, shipping_settings):
        client = TrackingClient(shipping_settings, api_key="")
        result = asyncio.run(client.fetch_tracking("ABC123D", "ups"))
        assert result.status == ShipmentStatus.DELIVERED


class TestMapStatus:
    @pytest.mark.parametrize(
        "tag, expected",
        [
            ("InTransit", ShipmentStatus.IN_TRANSIT),
            ("OutForDelivery", ShipmentStatus.OUT_FOR_DELIVERY),
            ("Delivered", ShipmentStatus.DELIVERED),
            ("AttemptFail", ShipmentStatus.FAILED_ATTEMPT),
            ("InfoReceived", ShipmentStatus.PENDING),
            ("Exception", ShipmentStatus.EXCEPTION),
            ("in_transit", ShipmentStatus.IN_TRANSIT),
            ("DELIVERED", ShipmentStatus.DELIVERED),
            ("Expired", ShipmentStatus.PENDING),
            ("", ShipmentStatus.PENDING),
            (None, ShipmentStatus.PENDING),
        ],
    )
    def test_tags(self, tag, expected):
        assert map_status(tag) == expected


class TestLiveTracking:
    @pytest.fixture
    def live_settings(self):
        return ShippingSettings(demo_mode=False, simulated_delay_seconds=0)

    def test_parses_aftership_response(self, live_settings, make_http, load_fixture):
        payload = load_fixture("aftership_tracking.json")
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=payload)

        async def scenario():
            client = TrackingClient(live_settings, http=make_http(handler), api_key="secret")
            return await client.fetch_tracking("1Z999AA10123456784", "ups")

        result = asyncio.run(scenario())
        assert result.status == ShipmentStatus.OUT_FOR_DELIVERY
        assert [e.location for e in result.events] == ["Chicago, IL, USA", "Hodgkins, USA"]
        assert result.events[0].description == "Out For Delivery Today"
        assert result.estimated_delivery == datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc)
        assert seen[0].url.path == "/v4/trackings/ups/1Z999AA10123456784"
        assert seen[0].headers["aftership-api-key"] == "secret"

    def test_http_failure_raises_fetch_error(self, live_settings, make_http):
        async def scenario():
            http = make_http(lambda request: httpx.Response(401, json={"meta": {"code": 401}}))
            client = TrackingClient(live_settings, http=http, api_key="bad")
            await client.fetch_tracking("1Z", "ups")

        with pytest.raises(FetchError) as exc_info:
            asyncio.run(scenario())
        assert exc_info.value.status == 401
        assert exc_info.value.operation == "fetch_tracking"

    def test_malformed_checkpoint_raises_fetch_error(self, live_settings, make_http):
        payload = {"data": {"tracking": {"tag": "InTransit", "checkpoints": [{"message": "no time"}]}}}

        async def scenario():
            http = make_http(lambda request: httpx.Response(200, json=payload))
            client = TrackingClient(live_settings, http=http, api_key="k")
            await client.fetch_tracking("1Z", "ups")

        with pytest.raises(FetchError):
            asyncio.run(scenario())

    def test_empty_tracking_defaults_to_pending(self, live_settings, make_http):
        async def scenario():
            http = make_http(lambda request: httpx.Response(200, json={"data": {}}))
            client = TrackingClient(live_settings, http=http, api_key="k")
            return await client.fetch_tracking("1Z", "ups")

        result = asyncio.run(scenario())
        assert result.status == ShipmentStatus.PENDING
        assert result.events == []
        assert result.estimated_delivery is None

    def test_non_object_body_raises_fetch_error(self, live_settings, make_http):
        async def scenario():
            http = make_http(lambda request: httpx.Response(200, json=[{"tag": "Delivered"}]))
            client = TrackingClient(live_settings, http=http, api_key="k")
            await client.fetch_tracking("1Z", "ups")

        with pytest.raises(FetchError) as exc_info:
            asyncio.run(scenario())
        assert "expected a JSON object" in exc_info.value.message
