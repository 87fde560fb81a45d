"""Data models for the shopping list."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import Field

from ..common.models import TrackedEntity


@dataclass(frozen=True)
class Category:
    label: str
    icon: str


CATEGORIES = {
    "groceries": Category("Groceries", "🛒"),
    "electronics": Category("Electronics", "💻"),
    "clothing": Category("Clothing", "👕"),
    "health": Category("Health", "💊"),
    "home": Category("Home", "🏠"),
    "other": Category("Other", "📦"),
}

PRIORITY_LABELS = {"high": "High", "medium": "Medium", "low": "Low"}


class ShoppingItem(TrackedEntity):
    """One entry on the shopping list."""

    name: str
    brand: str = ""
    price: float = Field(default=0.0, ge=0)
    qty: int = Field(default=1, ge=1)
    category: str = "other"
    priority: str | None = "medium"
    alert_price: float | None = None
    purchased: bool = False
    image: str | None = None
    note: str = ""
    barcode: str | None = None

    @property
    def line_total(self) -> float:
        return self.price * self.qty

    @property
    def alert_triggered(self) -> bool:
        return self.alert_price is not None and self.price <= self.alert_price


@dataclass
class ProductCandidate:
    """A product returned by a product lookup (Open Food Facts).

    Maps to the fields the search asks for: product_name, brands,
    image_thumb_url, categories_tags, code.
    """

    name: str
    brand: str = ""
    image: str | None = None
    code: str | None = None
    categories: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, product: dict, fallback_name: str = "") -> ProductCandidate:
        return cls(
            name=product.get("product_name") or fallback_name,
            brand=product.get("brands") or "",
            image=product.get("image_thumb_url") or product.get("image_small_url") or None,
            code=product.get("code") or None,
            categories=list(product.get("categories_tags") or []),
        )

    @property
    def display_name(self) -> str:
        """Name to put on the list, prefixed with the brand when missing."""
        if self.brand and self.brand not in self.name:
            return f"{self.brand} {self.name}"
        return self.name


@dataclass
class Conversion:
    amount: float
    symbol: str

    def __str__(self) -> str:
        return f"{self.symbol}{self.amount:.2f}"
