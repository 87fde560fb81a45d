"""Shopping Tracker Module - shopping list with product lookup and budget."""

from .exchange_client import ExchangeRateClient
from .models import CATEGORIES, Conversion, ProductCandidate, ShoppingItem
from .product_client import ProductLookupClient, is_barcode
from .tracker import ShoppingTracker

__all__ = [
    "CATEGORIES",
    "Conversion",
    "ExchangeRateClient",
    "ProductCandidate",
    "ProductLookupClient",
    "ShoppingItem",
    "ShoppingTracker",
    "is_barcode",
]
