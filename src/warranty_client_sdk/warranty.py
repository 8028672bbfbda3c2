"""Warranty period arithmetic shared by product forms and customer views.

A warranty is stored as a single day count (``Product.warranty_time``,
``Sale.warranty_till``). Forms edit it as years / months / days using the
fixed 365-day year and 30-day month, so converting back is lossy once the
day component reaches 30: ``31`` days reads back as ``1 month 1 day``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365
EXPIRING_SOON_THRESHOLD_DAYS = 30
SECONDS_PER_DAY = 86400

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


class WarrantyStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRING_SOON = "Expiring Soon"
    EXPIRED = "Expired"

    @property
    def color(self) -> str:
        return _STATUS_COLORS[self]


_STATUS_COLORS = {
    WarrantyStatus.ACTIVE: "green",
    WarrantyStatus.EXPIRING_SOON: "orange",
    WarrantyStatus.EXPIRED: "red",
}


@dataclass(frozen=True)
class WarrantyComponents:
    years: int = 0
    months: int = 0
    days: int = 0

    @property
    def total_days(self) -> int:
        return compute_warranty_total_days(self.days, self.months, self.years)


@dataclass(frozen=True)
class WarrantyState:
    status: WarrantyStatus
    days_left: int
    display_days: int
    end_date: datetime

    @property
    def color(self) -> str:
        return self.status.color


def coerce_component(value: Any) -> int:
    """Read a form value as a non-negative whole number.

    Strings contribute their leading integer ("12abc" -> 12, "3.9" -> 3);
    anything unreadable counts as zero.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return max(0, int(value))
    match = _INT_PREFIX_RE.match(str(value))
    if not match:
        return 0
    return max(0, int(match.group(1)))


def compute_warranty_total_days(days: Any = 0, months: Any = 0, years: Any = 0) -> int:
    return (
        coerce_component(days)
        + coerce_component(months) * DAYS_PER_MONTH
        + coerce_component(years) * DAYS_PER_YEAR
    )


def decompose_warranty_days(total_days: Any) -> WarrantyComponents:
    total = coerce_component(total_days)
    return WarrantyComponents(
        years=total // DAYS_PER_YEAR,
        months=(total % DAYS_PER_YEAR) // DAYS_PER_MONTH,
        days=total % DAYS_PER_MONTH,
    )


def parse_timestamp(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _align(moment: datetime, reference: datetime) -> datetime:
    if moment.tzinfo is None and reference.tzinfo is not None:
        return moment.replace(tzinfo=timezone.utc)
    if moment.tzinfo is not None and reference.tzinfo is None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def compute_warranty_status(sale_date: datetime | str, warranty_days: Any, now: datetime) -> WarrantyState:
    sale = _align(parse_timestamp(sale_date), now)
    end_date = sale + timedelta(days=coerce_component(warranty_days))
    days_left = math.ceil((end_date - now).total_seconds() / SECONDS_PER_DAY)
    if days_left > EXPIRING_SOON_THRESHOLD_DAYS:
        status = WarrantyStatus.ACTIVE
    elif days_left > 0:
        status = WarrantyStatus.EXPIRING_SOON
    else:
        status = WarrantyStatus.EXPIRED
    return WarrantyState(status=status, days_left=days_left, display_days=abs(days_left), end_date=end_date)
