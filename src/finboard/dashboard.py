# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard assembly for FinBoard.

The engine functions (``engine``, ``multi_periods``) trust their inputs.
This module is their caller: it validates request parameters, builds the
year-scoped group values and applies the prior-year heuristic once, so
that every surface (CLI, HTTP layer, previews) computes dashboards the
same way.

- ``build_dashboard``      : KPIs + 13-month P&L for a selected month.
- ``build_trend``          : expense trend over a month range.
- ``build_widget_preview`` : one widget rendered on the latest month
                             present in the data.
"""

from dataclasses import dataclass
from typing import Optional

from .engine import build_group_values, compute_kpis, prior_year_has_data
from .models import FinancialRow, GroupValues, KPIs, PnLByMonth, TrendDataPoint
from .multi_periods import build_13_month_pnl, build_expenses_trend
from .periods import (
    latest_month,
    parse_month,
    subtract_months,
    validate_month,
    validate_month_range,
)
from .widgets import KPI_WIDGETS, get_widget_type

TREND_PREVIEW_SPAN = 12


@dataclass(frozen=True)
class DashboardView:
    """KPIs and 13-month P&L computed for one selected month."""

    kpis: KPIs
    pnl_by_month: PnLByMonth
    selected_month: str
    entity_name: Optional[str] = None
    cur_groups: Optional[GroupValues] = None
    py_groups: Optional[GroupValues] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "kpis": self.kpis.to_dict(),
            "pnl_by_month": self.pnl_by_month.to_dict(),
            "selected_month": self.selected_month,
            "entity_name": self.entity_name,
        }


@dataclass(frozen=True)
class TrendView:
    data: list[TrendDataPoint]
    start_month: str
    end_month: str
    entity_name: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "data": [p.to_dict() for p in self.data],
            "start_month": self.start_month,
            "end_month": self.end_month,
            "entity_name": self.entity_name,
        }


@dataclass(frozen=True)
class WidgetPreview:
    """
    Result of a widget preview.

    ``available`` is False when the data holds no period to preview. When
    available, exactly one of ``kpis``, ``pnl`` or ``trend`` is set,
    depending on the widget component.
    """

    available: bool
    widget_id: str
    component: Optional[str] = None
    selected_month: Optional[str] = None
    kpis: Optional[KPIs] = None
    pnl: Optional[PnLByMonth] = None
    trend: Optional[list[TrendDataPoint]] = None


def _groups_for_year(
    rows: list[FinancialRow], year: int
) -> tuple[GroupValues, Optional[GroupValues]]:
    """Current-year groups and prior-year groups (None without PY data)."""
    cur_groups = build_group_values(rows, year)
    py_groups = build_group_values(rows, year - 1)
    if not prior_year_has_data(py_groups):
        return cur_groups, None
    return cur_groups, py_groups


def build_dashboard(
    rows: list[FinancialRow],
    selected_month: Optional[str],
    entity_name: Optional[str] = None,
) -> DashboardView:
    """Compute KPIs and the 13-month P&L for ``selected_month``.

    Raises:
        InvalidPeriodError: if ``selected_month`` is not "YYYY-MM".
    """
    month = validate_month(selected_month)
    year, mo = parse_month(month)

    cur_groups, py_groups = _groups_for_year(rows, year)

    kpis = compute_kpis(cur_groups, py_groups, mo - 1)
    pnl = build_13_month_pnl(cur_groups, py_groups, month)

    return DashboardView(
        kpis=kpis,
        pnl_by_month=pnl,
        selected_month=month,
        entity_name=entity_name,
        cur_groups=cur_groups,
        py_groups=py_groups,
    )


def build_trend(
    rows: list[FinancialRow],
    start_month: Optional[str],
    end_month: Optional[str],
    entity_name: Optional[str] = None,
) -> TrendView:
    """Compute the expense trend for ``[start_month, end_month]``.

    Raises:
        InvalidPeriodError: on malformed months or ``start_month > end_month``.
    """
    months = validate_month_range(start_month, end_month)
    data = build_expenses_trend(rows, months.start, months.end)
    return TrendView(
        data=data,
        start_month=months.start,
        end_month=months.end,
        entity_name=entity_name,
    )


def build_widget_preview(rows: list[FinancialRow], widget_id: str) -> WidgetPreview:
    """Render one widget on the latest month found in ``rows``.

    Raises:
        KeyError: if ``widget_id`` is not a known widget type.
    """
    widget = get_widget_type(widget_id)
    if widget is None:
        raise KeyError(f"Widget type not found: {widget_id!r}")

    month = latest_month(rows)
    if month is None:
        return WidgetPreview(available=False, widget_id=widget_id)

    year, mo = parse_month(month)
    cur_groups, py_groups = _groups_for_year(rows, year)

    if widget.component == "KpiCard" and widget_id in KPI_WIDGETS:
        return WidgetPreview(
            available=True,
            widget_id=widget_id,
            component=widget.component,
            selected_month=month,
            kpis=compute_kpis(cur_groups, py_groups, mo - 1),
        )

    if widget.component == "PnlTable":
        return WidgetPreview(
            available=True,
            widget_id=widget_id,
            component=widget.component,
            selected_month=month,
            pnl=build_13_month_pnl(cur_groups, py_groups, month),
        )

    start = subtract_months(month, TREND_PREVIEW_SPAN - 1)
    return WidgetPreview(
        available=True,
        widget_id=widget_id,
        component=widget.component,
        selected_month=month,
        trend=build_expenses_trend(rows, start, month),
    )
