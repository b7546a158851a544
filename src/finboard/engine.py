# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core financial computation engine for FinBoard.

This module turns normalized ``FinancialRow`` objects into year-scoped
arrays and computes the dashboard KPIs from them.

1. Group values
   -------------
   ``build_group_values(rows, year)`` projects the sparse per-month values
   of each row into a dense list of 13 floats:

       [Jan, Feb, ..., Dec, annual total]

   Missing months default to 0.0 and the annual total is always computed
   from the twelve monthly values, never read from the source.

2. KPIs
   -----
   ``compute_kpis(cur_groups, py_groups, month_idx)`` computes the fixed
   set of year-over-year KPIs (see ``models.KPIs``) for a selected month
   (0 = January). When ``py_groups`` is None, every prior-year derived
   field is None.

   The engine never raises for well-typed numeric input:
   - out-of-range indexes read as 0 (or are skipped in averages),
   - margins with a zero Income denominator are 0,
   - the YoY revenue percentage with a zero prior-year base is None,
     because a percentage over an empty base is undefined.

3. Prior-year heuristic
   ---------------------
   Data sources return all-zero placeholder rows for years without data.
   ``prior_year_has_data(groups)`` is the check every caller must apply
   before passing prior-year groups to the engine: prior-year data is
   considered present only if one of the first twelve monthly values of
   at least one category is non-zero.

Notes
-----
All functions are pure: no I/O, no shared state, a fresh container per
call. They are safe to call concurrently.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

from .models import (
    GROSS_PROFIT,
    INCOME,
    MONTHS_PER_YEAR,
    NET_INCOME,
    FinancialRow,
    GroupValues,
    KPIs,
)


def build_group_values(rows: Iterable[FinancialRow], year: int) -> GroupValues:
    """Project rows into a category -> 13 floats lookup for ``year``.

    If two rows share a category, the later one wins.
    """
    groups: GroupValues = {}

    for row in rows:
        values = [
            float(row.periods.get(f"{year}-{m:02d}", 0.0))
            for m in range(1, MONTHS_PER_YEAR + 1)
        ]
        # Index 12 = computed annual total
        values.append(sum(values))
        groups[row.category] = values

    return groups


def sum_range(values: Sequence[float], start: int, end: int) -> float:
    """Sum ``values[start..end]`` inclusive, clamped to the sequence bounds."""
    lo = max(start, 0)
    hi = min(end, len(values) - 1)
    total = 0.0
    for i in range(lo, hi + 1):
        total += values[i]
    return total


def prior_year_has_data(groups: GroupValues) -> bool:
    """True if any category holds a non-zero value in its first 12 months."""
    return any(
        v != 0 for values in groups.values() for v in values[:MONTHS_PER_YEAR]
    )


def _monthly(groups: Optional[GroupValues], category: str) -> list[float]:
    """Monthly values (annual total excluded) of a category, or []."""
    if groups is None:
        return []
    return list(groups.get(category, []))[:MONTHS_PER_YEAR]


def _at(values: Sequence[float], idx: int) -> float:
    """``values[idx]`` with out-of-range indexes reading as 0.0."""
    if 0 <= idx < len(values):
        return values[idx]
    return 0.0


def _revenue_3mo_avg(
    income: Sequence[float],
    py_income: Optional[Sequence[float]],
    month_idx: int,
) -> float:
    """Average Income of the three months before ``month_idx``.

    Negative indexes roll back into the prior year (-1 -> December).
    Terms that are unavailable are dropped and the denominator shrinks.
    """
    total = 0.0
    count = 0
    for i in range(month_idx - 3, month_idx):
        if 0 <= i < len(income):
            total += income[i]
            count += 1
        elif i < 0 and py_income is not None:
            py_idx = MONTHS_PER_YEAR + i
            if 0 <= py_idx < len(py_income):
                total += py_income[py_idx]
                count += 1
    return total / count if count > 0 else 0.0


def compute_kpis(
    cur_groups: GroupValues,
    py_groups: Optional[GroupValues],
    month_idx: int,
) -> KPIs:
    """Compute the dashboard KPIs for the selected month.

    Args:
        cur_groups: Group values of the selected year.
        py_groups: Group values of the prior year, or None when the caller
            decided that no prior-year comparison is available.
        month_idx: Selected month, 0 (January) to 11 (December).

    Returns:
        A KPIs instance. Prior-year fields are None when ``py_groups`` is
        None.
    """
    income = _monthly(cur_groups, INCOME)
    gross_profit = _monthly(cur_groups, GROSS_PROFIT)
    net_income = _monthly(cur_groups, NET_INCOME)

    py_income = _monthly(py_groups, INCOME) if py_groups is not None else None

    # Current month values
    revenue_current_mo = _at(income, month_idx)
    gp_current_mo = _at(gross_profit, month_idx)
    current_mo_net_income = _at(net_income, month_idx)

    revenue_3mo_avg = _revenue_3mo_avg(income, py_income, month_idx)

    # YTD sums (Jan through selected month)
    ytd_revenue = sum_range(income, 0, month_idx)
    ytd_gp = sum_range(gross_profit, 0, month_idx)
    net_income_ytd = sum_range(net_income, 0, month_idx)

    gross_margin_current_mo = (
        gp_current_mo / revenue_current_mo * 100 if revenue_current_mo != 0 else 0.0
    )
    gross_margin_ytd = ytd_gp / ytd_revenue * 100 if ytd_revenue != 0 else 0.0

    py_to_date_revenue: Optional[float] = None
    yoy_revenue_variance: Optional[float] = None
    yoy_revenue_variance_pct: Optional[float] = None
    py_to_date_net_income: Optional[float] = None
    net_income_yoy_variance: Optional[float] = None

    if py_groups is not None:
        py_net_income = _monthly(py_groups, NET_INCOME)

        py_to_date_revenue = sum_range(py_income or [], 0, month_idx)
        py_to_date_net_income = sum_range(py_net_income, 0, month_idx)

        yoy_revenue_variance = ytd_revenue - py_to_date_revenue
        if py_to_date_revenue != 0:
            yoy_revenue_variance_pct = yoy_revenue_variance / py_to_date_revenue * 100
        net_income_yoy_variance = net_income_ytd - py_to_date_net_income

    return KPIs(
        revenue_current_mo=revenue_current_mo,
        revenue_3mo_avg=revenue_3mo_avg,
        ytd_revenue=ytd_revenue,
        py_to_date_revenue=py_to_date_revenue,
        yoy_revenue_variance=yoy_revenue_variance,
        yoy_revenue_variance_pct=yoy_revenue_variance_pct,
        gross_margin_current_mo=gross_margin_current_mo,
        gross_margin_ytd=gross_margin_ytd,
        current_mo_net_income=current_mo_net_income,
        net_income_ytd=net_income_ytd,
        py_to_date_net_income=py_to_date_net_income,
        net_income_yoy_variance=net_income_yoy_variance,
    )
