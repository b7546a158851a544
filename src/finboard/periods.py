# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Month helpers for FinBoard.

Every period in FinBoard is a calendar month keyed "YYYY-MM". This module
provides:

- strict validation of month strings (used by callers *before* invoking
  the computation engine),
- month arithmetic based on integer month counts (``year * 12 + month - 1``)
  so that year boundaries roll over correctly in both directions,
- a ``MonthRange`` value object and helpers to derive the months to report
  on from CLI arguments and the data itself.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from .models import MONTHS_PER_YEAR, FinancialRow

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


class InvalidPeriodError(ValueError):
    """Raised when a month string or month range violates the caller contract."""


@dataclass(frozen=True)
class MonthRange:
    """Inclusive range of month keys with a human-readable label."""

    start: str
    end: str
    label: str


def parse_month(key: str) -> tuple[int, int]:
    """Split a "YYYY-MM" key into (year, month) with month in 1..12."""
    year_str, month_str = key.split("-")
    return int(year_str), int(month_str)


def month_index(key: str) -> int:
    """Absolute month count for a key: year * 12 + (month - 1)."""
    year, month = parse_month(key)
    return year * MONTHS_PER_YEAR + (month - 1)


def format_month(index: int) -> str:
    """Inverse of ``month_index``."""
    year, month0 = divmod(index, MONTHS_PER_YEAR)
    return f"{year:04d}-{month0 + 1:02d}"


def subtract_months(key: str, n: int) -> str:
    """Return the month key ``n`` months before ``key``."""
    return format_month(month_index(key) - n)


def month_range(start: str, end: str) -> list[str]:
    """Chronological list of month keys from ``start`` to ``end`` inclusive."""
    return [
        format_month(i) for i in range(month_index(start), month_index(end) + 1)
    ]


def validate_month(value: Optional[str], name: str = "month") -> str:
    """
    Check that ``value`` is a well-formed "YYYY-MM" key.

    Raises
    ------
    InvalidPeriodError
        If the value is missing, does not match the pattern, or the month
        part is not between 01 and 12.
    """
    if not value or not MONTH_PATTERN.match(value):
        raise InvalidPeriodError(
            f"Missing or invalid {name} parameter {value!r}. Use YYYY-MM."
        )
    _, month = parse_month(value)
    if not 1 <= month <= MONTHS_PER_YEAR:
        raise InvalidPeriodError(f"Invalid {name} {value!r}: month must be 01..12.")
    return value


def validate_month_range(start: Optional[str], end: Optional[str]) -> MonthRange:
    """Validate both bounds and require ``start <= end``."""
    start = validate_month(start, "start month")
    end = validate_month(end, "end month")
    if month_index(start) > month_index(end):
        raise InvalidPeriodError("Start month must be <= end month.")
    return MonthRange(start=start, end=end, label=f"{start} → {end}")


def latest_month(rows: Iterable[FinancialRow]) -> Optional[str]:
    """Most recent period key present across ``rows``, or None."""
    keys = [k for row in rows for k in row.periods]
    if not keys:
        return None
    return max(keys, key=month_index)


def determine_month_range_from_args(
    args,
    rows: list[FinancialRow],
    default_span: int = 12,
) -> MonthRange:
    """
    Determine the months to report on based on CLI args and the data.

    Priority (highest to lowest):

        1. args.start_month / args.end_month (custom range)
        2. args.month (single month)
        3. the latest month present in ``rows``

    A missing start month defaults to the ``default_span`` months ending at
    the end month; a missing end month defaults to the latest month.
    """
    start_raw: Optional[str] = getattr(args, "start_month", None)
    end_raw: Optional[str] = getattr(args, "end_month", None)
    single: Optional[str] = getattr(args, "month", None)

    latest = latest_month(rows)

    if start_raw or end_raw:
        end = end_raw or latest
        if end is None:
            raise InvalidPeriodError("No end month given and no data to infer it.")
        end = validate_month(end, "end month")
        start = start_raw or subtract_months(end, default_span - 1)
        return validate_month_range(start, end)

    if single:
        month = validate_month(single)
        return MonthRange(start=month, end=month, label=f"Month {month}")

    if latest is None:
        raise InvalidPeriodError("No month given and the data contains no periods.")
    return MonthRange(start=latest, end=latest, label=f"Latest month ({latest})")
