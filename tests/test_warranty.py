from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from warranty_client_sdk.models import Sale
from warranty_client_sdk.views import (
    UNCATEGORIZED,
    format_days_left,
    group_sales_by_category,
    sale_warranty,
    summarize_warranty_statuses,
)
from warranty_client_sdk.warranty import (
    WarrantyComponents,
    WarrantyStatus,
    coerce_component,
    compute_warranty_status,
    compute_warranty_total_days,
    decompose_warranty_days,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_total_days_uses_fixed_month_and_year() -> None:
    assert compute_warranty_total_days(days=0, months=1, years=1) == 395
    assert compute_warranty_total_days() == 0
    assert compute_warranty_total_days("5", "2", "1") == 430


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 0),
        ("", 0),
        ("abc", 0),
        ("12abc", 12),
        ("3.9", 3),
        (-4, 0),
        ("-4", 0),
        (2.7, 2),
        (float("nan"), 0),
        (True, 0),
    ],
)
def test_component_coercion(value, expected: int) -> None:
    assert coerce_component(value) == expected


def test_decompose_splits_total() -> None:
    assert decompose_warranty_days(395) == WarrantyComponents(years=1, months=1, days=5)
    assert decompose_warranty_days(0) == WarrantyComponents()
    assert decompose_warranty_days(-10) == WarrantyComponents()
    parts = WarrantyComponents(years=0, months=3, days=12)
    assert decompose_warranty_days(parts.total_days) == parts


def test_decompose_is_lossy_for_large_day_inputs() -> None:
    total = compute_warranty_total_days(days=31)
    assert decompose_warranty_days(total) == WarrantyComponents(years=0, months=1, days=1)
    assert decompose_warranty_days(365) == WarrantyComponents(years=1, months=0, days=5)


@pytest.mark.parametrize(
    ("days_left", "status"),
    [
        (31, WarrantyStatus.ACTIVE),
        (30, WarrantyStatus.EXPIRING_SOON),
        (1, WarrantyStatus.EXPIRING_SOON),
        (0, WarrantyStatus.EXPIRED),
        (-5, WarrantyStatus.EXPIRED),
    ],
)
def test_status_boundaries(days_left: int, status: WarrantyStatus) -> None:
    sale_date = NOW - timedelta(days=365 - days_left)
    state = compute_warranty_status(sale_date, 365, NOW)
    assert state.days_left == days_left
    assert state.status is status
    assert state.display_days == abs(days_left)


def test_partial_day_rounds_up() -> None:
    sale_date = NOW - timedelta(days=334, hours=12)
    state = compute_warranty_status(sale_date, 365, NOW)
    assert state.days_left == 31
    assert state.status is WarrantyStatus.ACTIVE
    assert state.color == "green"


def test_status_accepts_iso_strings_and_naive_datetimes() -> None:
    from_string = compute_warranty_status("2024-05-01T12:00:00.000Z", 60, NOW)
    from_naive = compute_warranty_status(datetime(2024, 5, 1, 12, 0), 60, NOW)
    assert from_string.days_left == 29
    assert from_naive.days_left == 29
    assert from_string.status is WarrantyStatus.EXPIRING_SOON


def test_days_left_text() -> None:
    expired = compute_warranty_status(NOW - timedelta(days=370), 365, NOW)
    active = compute_warranty_status(NOW, 365, NOW)
    assert format_days_left(expired) == "5 days ago"
    assert format_days_left(active) == "365 days left"
    assert format_days_left(None) == "Unknown"


def _sale(sale_id: int, *, days_ago: int, warranty: int, product: str, category: str | None) -> Sale:
    subcategory = {"id": 1, "name": "Sub", "product_category": {"id": 1, "name": category}} if category else None
    return Sale.model_validate(
        {
            "id": sale_id,
            "sale_date": (NOW - timedelta(days=days_ago)).isoformat(),
            "warranty_till": warranty,
            "product": {"id": sale_id, "name": product, "subcategory": subcategory},
        }
    )


def test_summarize_counts_each_status() -> None:
    sales = [
        _sale(1, days_ago=10, warranty=365, product="TV", category="Electronics"),
        _sale(2, days_ago=350, warranty=365, product="Fan", category="Appliances"),
        _sale(3, days_ago=400, warranty=365, product="Radio", category="Electronics"),
        Sale.model_validate({"id": 4}),
    ]
    counts = summarize_warranty_statuses(sales, NOW)
    assert counts == {
        WarrantyStatus.ACTIVE: 1,
        WarrantyStatus.EXPIRING_SOON: 1,
        WarrantyStatus.EXPIRED: 1,
    }


def test_group_sales_by_category_orders_rows() -> None:
    sales = [
        _sale(1, days_ago=30, warranty=100, product="Toaster", category="Kitchen"),
        _sale(2, days_ago=5, warranty=700, product="Blender", category="Kitchen"),
        _sale(3, days_ago=1, warranty=365, product="Cable", category=None),
    ]
    recent = group_sales_by_category(sales, "recent")
    assert [group.category for group in recent] == ["Kitchen", UNCATEGORIZED]
    assert [sale.id for sale in recent[0].sales] == [2, 1]

    by_name = group_sales_by_category(sales, "name")
    assert [sale.product.name for sale in by_name[0].sales] == ["Blender", "Toaster"]

    by_warranty = group_sales_by_category(sales, "warranty")
    assert [sale.warranty_till for sale in by_warranty[0].sales] == [700, 100]

    with pytest.raises(ValueError):
        group_sales_by_category(sales, "price")


def test_unparseable_sale_date_is_unknown() -> None:
    good = _sale(1, days_ago=10, warranty=365, product="TV", category="Electronics")
    garbage = Sale.model_validate({"id": 2, "sale_date": "garbage", "warranty_till": 365})
    european = Sale.model_validate({"id": 3, "sale_date": "15/01/2024", "warranty_till": 30})

    assert sale_warranty(garbage, NOW) is None
    assert format_days_left(sale_warranty(european, NOW)) == "Unknown"
    counts = summarize_warranty_statuses([good, garbage, european], NOW)
    assert counts[WarrantyStatus.ACTIVE] == 1
    assert sum(counts.values()) == 1


def test_unparseable_sale_date_sorts_last_in_recent_groups() -> None:
    older = _sale(1, days_ago=30, warranty=100, product="Toaster", category="Kitchen")
    garbage = Sale.model_validate(
        {
            "id": 2,
            "sale_date": "not-a-date",
            "product": {"id": 2, "name": "Kettle", "subcategory": {"id": 1, "product_category": {"id": 1, "name": "Kitchen"}}},
        }
    )

    groups = group_sales_by_category([garbage, older], "recent")

    assert [sale.id for sale in groups[0].sales] == [1, 2]
