"""Product lookup against the Open Food Facts v2 API.

Numeric-only queries are treated as barcodes and need an exact match;
anything else runs a fuzzy text search.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import quote

from ..common.config import ShoppingSettings, settings
from ..common.errors import FetchError, NotFound, ValidationError
from ..common.http_client import AsyncHTTPClient
from .models import ProductCandidate

logger = logging.getLogger(__name__)

_BARCODE_RE = re.compile(r"\d+")

SEARCH_FIELDS = "product_name,brands,image_thumb_url,categories_tags,code"
SEARCH_PAGE_SIZE = 5


def is_barcode(query: str) -> bool:
    return bool(_BARCODE_RE.fullmatch(query))


class ProductLookupClient:
    """Searches products by name or barcode.

    Usage:
        async with ProductLookupClient() as client:
            candidates = await client.search("nutella")
    """

    def __init__(
        self,
        config: ShoppingSettings | None = None,
        http: AsyncHTTPClient | None = None,
    ) -> None:
        self.config = config or settings.shopping
        self._http = http
        self._owns_http = http is None

    @property
    def http(self) -> AsyncHTTPClient:
        if self._http is None:
            self._http = AsyncHTTPClient()
        return self._http

    async def search(self, query: str) -> list[ProductCandidate]:
        """Look up product candidates.

        Raises:
            ValidationError: Empty query.
            NotFound: Barcode without an exact match, or empty text results.
            FetchError: Network or HTTP failure.
        """
        query = (query or "").strip()
        if not query:
            raise ValidationError("Please enter a product name or barcode.")
        if is_barcode(query):
            return [await self.lookup_barcode(query)]
        return await self.search_text(query)

    async def lookup_barcode(self, barcode: str) -> ProductCandidate:
        try:
            data = await self.http.get_json(
                f"{self.config.open_food_facts_base_url}/product/{quote(barcode, safe='')}.json",
                operation="lookup_barcode",
            )
        except FetchError as exc:
            # unknown barcodes come back as 404 with status 0
            if exc.status == 404:
                raise NotFound("Barcode not found in Open Food Facts database.") from exc
            raise
        data = data if isinstance(data, dict) else {}
        product = data.get("product")
        if data.get("status") == 1 and product:
            return ProductCandidate.from_api(product, fallback_name=barcode)
        raise NotFound("Barcode not found in Open Food Facts database.")

    async def search_text(self, query: str) -> list[ProductCandidate]:
        data = await self.http.get_json(
            f"{self.config.open_food_facts_base_url}/search",
            operation="search_products",
            params={
                "search_terms": query,
                "fields": SEARCH_FIELDS,
                "page_size": SEARCH_PAGE_SIZE,
                "json": 1,
            },
        )
        data = data if isinstance(data, dict) else {}
        products = [p for p in data.get("products") or [] if isinstance(p, dict)]
        if not products:
            raise NotFound("No products found for that query.")
        logger.info("Found %d products for '%s'", len(products), query)
        return [ProductCandidate.from_api(p, fallback_name=query) for p in products]

    async def aclose(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()

    async def __aenter__(self) -> ProductLookupClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
