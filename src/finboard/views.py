# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for FinBoard.

This module turns the computed view models (KPIs, 13-month P&L, expense
trend, group values) into pandas DataFrames ready for console display or
CSV export. It does not compute anything itself: all values come from
``engine``, ``multi_periods`` and ``widgets``.
"""

import pandas as pd

from .models import PNL_FIELDS, GroupValues, KPIs, PnLByMonth, TrendDataPoint
from .widgets import KPI_WIDGETS, render_kpi_card

# P&L field -> row label in the 13-month table.
PNL_ROW_LABELS: dict[str, str] = {
    "revenue": "Revenue",
    "cogs": "Cost of goods sold",
    "gross_profit": "Gross profit",
    "expenses": "Expenses",
    "net_operating_income": "Net operating income",
    "other_expenses": "Other expenses",
    "net_other_income": "Net other income",
    "net_income": "Net income",
}


def kpis_to_dataframe(kpis: KPIs) -> pd.DataFrame:
    """
    One row per KPI card with its formatted value and variance.

    Columns: widget, header, value, variance.
    """
    rows: list[dict[str, object]] = []
    for widget_id in KPI_WIDGETS:
        card = render_kpi_card(widget_id, kpis)
        variance = card.variance or ""
        if card.variance and card.variance_label:
            variance = f"{card.variance} ({card.variance_label})"
        rows.append(
            {
                "widget": widget_id,
                "header": f"{card.header_line1} {card.header_line2}",
                "value": card.value,
                "variance": variance,
            }
        )
    return pd.DataFrame(rows, columns=["widget", "header", "value", "variance"])


def pnl_to_dataframe(pnl: PnLByMonth, decimals: int = 2) -> pd.DataFrame:
    """
    13-month P&L as a table: one row per P&L line, one column per month,
    plus a trailing 'Total' column.
    """
    data: dict[str, list[float]] = {}
    for entry in pnl.months:
        values = entry.to_dict()
        data[entry.label] = [float(values[f]) for f in PNL_FIELDS.values()]

    totals = pnl.totals.to_dict()
    data["Total"] = [float(totals[f]) for f in PNL_FIELDS.values()]

    df = pd.DataFrame(data, index=[PNL_ROW_LABELS[f] for f in PNL_FIELDS.values()])
    df.index.name = "line"
    return df.round(decimals).reset_index()


def trend_to_dataframe(points: list[TrendDataPoint], decimals: int = 2) -> pd.DataFrame:
    """Expense trend as a table with columns month, expenses, avg13."""
    if not points:
        return pd.DataFrame(columns=["month", "expenses", "avg13"])

    df = pd.DataFrame(
        [p.to_dict() for p in points], columns=["month", "expenses", "avg13"]
    )
    df["avg13"] = df["avg13"].astype("float64")
    return df.round({"expenses": decimals, "avg13": decimals})


def group_values_to_dataframe(groups: GroupValues, year: int) -> pd.DataFrame:
    """Group values as a table: one row per category, Jan..Dec + Total."""
    columns = [f"{year}-{m:02d}" for m in range(1, 13)] + ["Total"]
    if not groups:
        return pd.DataFrame(columns=["category", *columns])

    df = pd.DataFrame.from_dict(groups, orient="index", columns=columns)
    df.index.name = "category"
    return df.reset_index()
