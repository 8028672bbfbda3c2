from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

from .models import Sale, SortDirection
from .warranty import WarrantyState, WarrantyStatus, compute_warranty_status, parse_timestamp

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
GROUP_SORT_KEYS = ("recent", "name", "warranty")


@dataclass(frozen=True)
class SaleView:
    sale: Sale
    warranty: WarrantyState | None

    @property
    def days_left_text(self) -> str:
        return format_days_left(self.warranty)


@dataclass
class CategoryGroup:
    category: str
    sales: list[Sale] = field(default_factory=list)


def format_days_left(state: WarrantyState | None) -> str:
    if state is None:
        return "Unknown"
    if state.status is WarrantyStatus.EXPIRED:
        return f"{state.display_days} days ago"
    return f"{state.display_days} days left"


def sale_warranty(sale: Sale, now: datetime) -> WarrantyState | None:
    if not sale.sale_date:
        return None
    try:
        return compute_warranty_status(sale.sale_date, sale.warranty_till or 0, now)
    except ValueError:
        logger.warning("sale_date_unparseable", extra={"sale_id": sale.id})
        return None


def summarize_warranty_statuses(sales: Iterable[Sale], now: datetime) -> dict[WarrantyStatus, int]:
    counts: Counter[WarrantyStatus] = Counter({status: 0 for status in WarrantyStatus})
    for sale in sales:
        state = sale_warranty(sale, now)
        if state is not None:
            counts[state.status] += 1
    return dict(counts)


def _category_name(sale: Sale) -> str:
    product = sale.product
    subcategory = product.subcategory if product else None
    category = subcategory.product_category if subcategory else None
    if category is None or not category.name:
        return UNCATEGORIZED
    return category.name


def _sale_timestamp(sale: Sale) -> float:
    if not sale.sale_date:
        return float("-inf")
    try:
        return parse_timestamp(sale.sale_date).timestamp()
    except ValueError:
        return float("-inf")


def group_sales_by_category(sales: Iterable[Sale], sort_by: str = "recent") -> list[CategoryGroup]:
    """Group sales under their product category, ordering rows within each group.

    Groups keep first-seen order; ``sort_by`` is ``recent`` (newest sale first),
    ``name`` (product name A-Z) or ``warranty`` (longest warranty first).
    """
    if sort_by not in GROUP_SORT_KEYS:
        raise ValueError(f"sort_by must be one of {GROUP_SORT_KEYS}, got {sort_by!r}")
    groups: dict[str, CategoryGroup] = {}
    for sale in sales:
        name = _category_name(sale)
        groups.setdefault(name, CategoryGroup(category=name)).sales.append(sale)

    for group in groups.values():
        if sort_by == "recent":
            group.sales.sort(key=_sale_timestamp, reverse=True)
        elif sort_by == "name":
            group.sales.sort(key=lambda sale: ((sale.product.name if sale.product else None) or "").lower())
        else:
            group.sales.sort(key=lambda sale: sale.warranty_till or 0, reverse=True)
    return list(groups.values())


def resolve_path(row: Any, path: str) -> Any:
    current = row
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def sort_rows(rows: Sequence[Any], sort: Sequence[tuple[str, SortDirection]]) -> list[Any]:
    """Stable multi-column sort over dotted attribute paths; missing values go last."""
    ordered = list(rows)
    for column, direction in reversed(list(sort)):
        present = [row for row in ordered if resolve_path(row, column) is not None]
        missing = [row for row in ordered if resolve_path(row, column) is None]
        present.sort(
            key=lambda row: resolve_path(row, column),
            reverse=SortDirection(direction) is SortDirection.DESC,
        )
        ordered = present + missing
    return ordered


def build_sale_views(sales: Iterable[Sale], now: datetime) -> list[SaleView]:
    return [SaleView(sale=sale, warranty=sale_warranty(sale, now)) for sale in sales]
