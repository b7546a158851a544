# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Multi-period projections for FinBoard.

This module builds the two views that span more than one calendar month:

1. 13-month P&L
   -------------
   ``build_13_month_pnl(cur_groups, py_groups, selected_month)`` returns a
   trailing P&L table covering the 12 months before the selected month and
   the selected month itself. The window always crosses exactly one year
   boundary:

   - phase 1: prior-year months from the selected month index to December,
   - phase 2: current-year months from January to the selected month.

   Each entry carries the eight P&L fields (see ``models.PNL_FIELDS``) and
   a label such as "Mar 24". When ``py_groups`` is None, every phase-1
   field is 0. ``totals`` is the plain per-field sum of the 13 entries.

2. Expense trend
   --------------
   ``build_expenses_trend(rows, start_month, end_month)`` returns one point
   per month in ``[start_month, end_month]`` with the Expenses value and a
   trailing 13-month rolling average. The series is materialized from
   12 months before ``start_month`` so that the earliest requested points
   are already seeded; these extra months are dropped from the output.
   The rolling average is computed with pandas over that extended series.

Callers validate the month strings (see ``periods.validate_month``)
before calling these functions.
"""

from collections.abc import Iterable
from typing import Optional

import pandas as pd

from .models import (
    EXPENSES,
    MONTH_ABBREVS,
    MONTHS_PER_YEAR,
    PNL_FIELDS,
    FinancialRow,
    GroupValues,
    PnLByMonth,
    PnLMonthEntry,
    PnLTotals,
    TrendDataPoint,
)
from .periods import month_range, parse_month, subtract_months

ROLLING_WINDOW = 13


def _group_value(groups: Optional[GroupValues], category: str, month0: int) -> float:
    """Value of ``category`` at month index ``month0``; 0.0 when unavailable."""
    if groups is None:
        return 0.0
    values = groups.get(category)
    if not values or not 0 <= month0 < len(values):
        return 0.0
    return values[month0]


def _month_entry(
    groups: Optional[GroupValues], month0: int, year: int
) -> PnLMonthEntry:
    fields = {
        field: _group_value(groups, category, month0)
        for category, field in PNL_FIELDS.items()
    }
    label = f"{MONTH_ABBREVS[month0]} {year % 100:02d}"
    return PnLMonthEntry(label=label, **fields)


def build_13_month_pnl(
    cur_groups: GroupValues,
    py_groups: Optional[GroupValues],
    selected_month: str,
) -> PnLByMonth:
    """Build the trailing 13-month P&L ending at ``selected_month``.

    Args:
        cur_groups: Group values of the selected year.
        py_groups: Group values of the prior year, or None.
        selected_month: "YYYY-MM" month closing the window. It must already
            be validated (see ``periods.validate_month``); a malformed key
            raises instead of producing a partial table.

    Returns:
        A PnLByMonth with exactly 13 chronological entries and their totals.
    """
    year, month = parse_month(selected_month)
    mo_idx = month - 1

    months: list[PnLMonthEntry] = []

    # Phase 1: prior year, from the selected month index through December
    for m in range(mo_idx, MONTHS_PER_YEAR):
        months.append(_month_entry(py_groups, m, year - 1))

    # Phase 2: current year, from January through the selected month
    for m in range(0, mo_idx + 1):
        months.append(_month_entry(cur_groups, m, year))

    totals: dict[str, float] = dict.fromkeys(PNL_FIELDS.values(), 0.0)
    for entry in months:
        for field, value in entry.to_dict().items():
            if field in totals:
                totals[field] += value

    return PnLByMonth(months=months, totals=PnLTotals(**totals))


def build_expenses_trend(
    rows: Iterable[FinancialRow],
    start_month: str,
    end_month: str,
) -> list[TrendDataPoint]:
    """Monthly Expenses with a trailing 13-month average over a month range.

    Args:
        rows: Financial rows; only the "Expenses" row is used. Without one,
            every expense value is 0.
        start_month, end_month: Inclusive "YYYY-MM" bounds,
            ``start_month <= end_month``.

    Returns:
        One TrendDataPoint per month from ``start_month`` to ``end_month``.
        ``avg13`` is None only when the extended series is too short to
        fill a 13-month window ending at that point.
    """
    expenses_row = next((r for r in rows if r.category == EXPENSES), None)
    periods = expenses_row.periods if expenses_row is not None else {}

    extended_start = subtract_months(start_month, ROLLING_WINDOW - 1)
    all_months = month_range(extended_start, end_month)

    series = pd.Series(
        [float(periods.get(m, 0.0)) for m in all_months],
        index=all_months,
        dtype="float64",
    )
    avg13 = series.rolling(window=ROLLING_WINDOW, min_periods=ROLLING_WINDOW).mean()

    points: list[TrendDataPoint] = []
    for i, month in enumerate(all_months):
        if month < start_month:
            continue
        avg = avg13.iloc[i]
        points.append(
            TrendDataPoint(
                month=month,
                expenses=float(series.iloc[i]),
                avg13=None if pd.isna(avg) else float(avg),
            )
        )

    return points
