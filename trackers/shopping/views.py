"""View models for the shopping list: item cards, category tabs, budget bar."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..common.formatting import format_currency
from ..common.projection import ALL, count_by, shopping_totals
from .models import CATEGORIES, PRIORITY_LABELS, Category, ShoppingItem


@dataclass
class CategoryTab:
    key: str
    label: str
    icon: str
    count: int
    active: bool = False


@dataclass
class ItemCardView:
    id: str
    name: str
    price: str
    qty: int
    category: Category
    priority: str
    priority_label: str
    purchased: bool
    alert_triggered: bool
    image: str | None
    note: str

    @property
    def css_class(self) -> str:
        classes = ["shopping-item", f"priority-{self.priority}"]
        if self.purchased:
            classes.append("purchased")
        if self.alert_triggered:
            classes.append("alert-triggered")
        return " ".join(classes)


@dataclass
class BudgetView:
    budget: float
    percent: float
    over_budget: bool
    remaining_text: str


@dataclass
class ShoppingSummary:
    item_count: int
    total: str
    purchased_total: str
    budget: BudgetView
    tabs: list[CategoryTab] = field(default_factory=list)
    cards: list[ItemCardView] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.cards


def build_card(item: ShoppingItem) -> ItemCardView:
    category = CATEGORIES.get(item.category, CATEGORIES["other"])
    priority = item.priority or "medium"
    return ItemCardView(
        id=item.id,
        name=item.name,
        price=format_currency(item.price),
        qty=item.qty,
        category=category,
        priority=priority,
        priority_label=PRIORITY_LABELS.get(priority, priority),
        purchased=item.purchased,
        alert_triggered=item.alert_triggered,
        image=item.image,
        note=item.note,
    )


def build_tabs(items: list[ShoppingItem], active: str = ALL) -> list[CategoryTab]:
    """An "All" tab plus one tab per category that has items."""
    counts = count_by(items, "category")
    tabs = [CategoryTab(ALL, "All", "✦", len(items), active == ALL)]
    for key, category in CATEGORIES.items():
        if counts.get(key):
            tabs.append(CategoryTab(key, category.label, category.icon, counts[key], active == key))
    return tabs


def build_budget(total: float, budget: float) -> BudgetView:
    if budget > 0:
        percent = min(total / budget * 100, 100.0)
    else:
        percent = 100.0 if total > 0 else 0.0
    remaining = budget - total
    if remaining >= 0:
        remaining_text = f"{format_currency(remaining)} under budget"
    else:
        remaining_text = f"{format_currency(abs(remaining))} over budget"
    return BudgetView(
        budget=budget,
        percent=percent,
        over_budget=total > budget,
        remaining_text=remaining_text,
    )


def build_summary(
    all_items: list[ShoppingItem],
    visible: list[ShoppingItem],
    budget: float,
    active_category: str = ALL,
) -> ShoppingSummary:
    """Totals and tabs over every item, cards for the visible ones."""
    totals = shopping_totals(all_items)
    return ShoppingSummary(
        item_count=len(all_items),
        total=format_currency(totals["total"]),
        purchased_total=format_currency(totals["purchased_total"]),
        budget=build_budget(totals["total"], budget),
        tabs=build_tabs(all_items, active_category or ALL),
        cards=[build_card(item) for item in visible],
    )
