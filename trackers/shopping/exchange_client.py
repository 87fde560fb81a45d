"""Currency conversion via exchangerate.host (rates relative to USD)."""

from __future__ import annotations

import logging

from ..common.config import ShoppingSettings, settings
from ..common.errors import FetchError
from ..common.http_client import AsyncHTTPClient
from .models import Conversion

logger = logging.getLogger(__name__)

QUOTE_CURRENCIES = ("EUR", "GBP", "JPY", "CAD", "AUD")

# Used when the rates API is unavailable
FALLBACK_RATES = {
    "USDEUR": 0.92,
    "USDGBP": 0.79,
    "USDJPY": 149.5,
    "USDCAD": 1.36,
    "USDAUD": 1.54,
}

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "CA$",
    "AUD": "AU$",
    "USD": "$",
}


class ExchangeRateClient:
    """Fetches USD-based quotes once and converts amounts with them."""

    def __init__(
        self,
        config: ShoppingSettings | None = None,
        http: AsyncHTTPClient | None = None,
    ) -> None:
        self.config = config or settings.shopping
        self._http = http
        self._owns_http = http is None
        self._rates: dict[str, float] | None = None

    async def fetch_rates(self) -> dict[str, float]:
        """Quotes keyed like "USDEUR", cached after the first call."""
        if self._rates is not None:
            return self._rates

        if self._http is None:
            self._http = AsyncHTTPClient()

        try:
            data = await self._http.get_json(
                self.config.exchange_api_url,
                operation="fetch_exchange_rates",
                params={
                    "access_key": "free",
                    "currencies": ",".join(QUOTE_CURRENCIES),
                    "source": "USD",
                    "format": 1,
                },
            )
        except FetchError as exc:
            logger.warning("Exchange rates unavailable (%s); using fallback rates", exc)
            self._rates = dict(FALLBACK_RATES)
            return self._rates

        quotes = data.get("quotes") if isinstance(data, dict) else None
        self._rates = dict(quotes) if isinstance(quotes, dict) else {}
        return self._rates

    async def convert(self, usd_amount: float, target_currency: str) -> Conversion:
        rates = await self.fetch_rates()
        target = target_currency.upper()
        rate = rates.get(f"USD{target}") or 1
        return Conversion(
            amount=usd_amount * rate,
            symbol=CURRENCY_SYMBOLS.get(target, target),
        )

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
