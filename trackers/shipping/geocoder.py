"""Best-effort geocoding of tracking event locations (OpenCage)."""

from __future__ import annotations

import logging

from ..common.config import ShippingSettings, get_opencage_api_key, settings
from ..common.errors import FetchError
from ..common.http_client import AsyncHTTPClient
from .models import GeoPoint

logger = logging.getLogger(__name__)


class Geocoder:
    """Resolves a free-text location to coordinates.

    Geocodes are cosmetic, so geocode() never raises: demo mode, a missing
    API key, an empty location and any lookup failure all yield None.
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
        self.api_key = api_key if api_key is not None else get_opencage_api_key()

    @property
    def enabled(self) -> bool:
        return not self.config.demo_mode and bool(self.api_key)

    async def geocode(self, location: str | None) -> GeoPoint | None:
        if not self.enabled or not location:
            return None

        if self._http is None:
            self._http = AsyncHTTPClient()

        try:
            data = await self._http.get_json(
                f"{self.config.opencage_base_url}/json",
                operation="geocode",
                params={
                    "q": location,
                    "key": self.api_key,
                    "limit": 1,
                    "no_annotations": 1,
                },
            )
            results = data.get("results") or []
            if not results:
                return None
            geometry = results[0]["geometry"]
            return GeoPoint(lat=geometry["lat"], lng=geometry["lng"])
        except (FetchError, KeyError, TypeError, AttributeError, ValueError) as exc:
            logger.warning("Geocode failed for %r: %s", location, exc)
            return None

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
