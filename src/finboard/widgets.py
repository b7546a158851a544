# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Read-only widget registry for FinBoard dashboards.

Dashboards are assembled from a closed set of widget types:

- nine KPI cards, each displaying one KPI field (and optionally a
  year-over-year variance),
- the 13-month P&L table,
- the expense trend chart.

KPI cards refer to KPI values through the ``KpiField`` enum. Values are
read through ``KPI_ACCESSORS``, an enum-keyed table of accessor functions,
so that widget configurations never look fields up by attribute name.

``render_kpi_card`` turns a card configuration and a ``KPIs`` instance
into display strings, using the helpers from ``formatting``.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from .formatting import format_abbrev, format_pct, format_variance
from .models import KNOWN_CATEGORIES, KPIs


class KpiField(str, Enum):
    """KPI values a widget can display."""

    REVENUE_CURRENT_MO = "revenue_current_mo"
    REVENUE_3MO_AVG = "revenue_3mo_avg"
    YTD_REVENUE = "ytd_revenue"
    PY_TO_DATE_REVENUE = "py_to_date_revenue"
    YOY_REVENUE_VARIANCE = "yoy_revenue_variance"
    YOY_REVENUE_VARIANCE_PCT = "yoy_revenue_variance_pct"
    GROSS_MARGIN_CURRENT_MO = "gross_margin_current_mo"
    GROSS_MARGIN_YTD = "gross_margin_ytd"
    CURRENT_MO_NET_INCOME = "current_mo_net_income"
    NET_INCOME_YTD = "net_income_ytd"
    PY_TO_DATE_NET_INCOME = "py_to_date_net_income"
    NET_INCOME_YOY_VARIANCE = "net_income_yoy_variance"


KPI_ACCESSORS: dict[KpiField, Callable[[KPIs], Optional[float]]] = {
    KpiField.REVENUE_CURRENT_MO: lambda k: k.revenue_current_mo,
    KpiField.REVENUE_3MO_AVG: lambda k: k.revenue_3mo_avg,
    KpiField.YTD_REVENUE: lambda k: k.ytd_revenue,
    KpiField.PY_TO_DATE_REVENUE: lambda k: k.py_to_date_revenue,
    KpiField.YOY_REVENUE_VARIANCE: lambda k: k.yoy_revenue_variance,
    KpiField.YOY_REVENUE_VARIANCE_PCT: lambda k: k.yoy_revenue_variance_pct,
    KpiField.GROSS_MARGIN_CURRENT_MO: lambda k: k.gross_margin_current_mo,
    KpiField.GROSS_MARGIN_YTD: lambda k: k.gross_margin_ytd,
    KpiField.CURRENT_MO_NET_INCOME: lambda k: k.current_mo_net_income,
    KpiField.NET_INCOME_YTD: lambda k: k.net_income_ytd,
    KpiField.PY_TO_DATE_NET_INCOME: lambda k: k.py_to_date_net_income,
    KpiField.NET_INCOME_YOY_VARIANCE: lambda k: k.net_income_yoy_variance,
}


def get_kpi_value(kpis: KPIs, field: KpiField) -> Optional[float]:
    return KPI_ACCESSORS[field](kpis)


# ---------------------------------------------------------------------------
# Widget types
# ---------------------------------------------------------------------------

WidgetComponent = Literal["KpiCard", "PnlTable", "TrendChart"]


@dataclass(frozen=True)
class WidgetType:
    id: str
    category: str
    component: WidgetComponent


@dataclass(frozen=True)
class KpiWidgetConfig:
    """
    Display configuration of a KPI card.

    Attributes
    ----------
    header_line1, header_line2 :
        Two-line card header.
    field :
        KPI displayed as the main value.
    format :
        'currency' (abbreviated amount) or 'percent'.
    variance_field, variance_pct_field, variance_label :
        Optional variance line shown under the value.
    nullable :
        If True, a None value is displayed as 'N/A' instead of 0.
    """

    header_line1: str
    header_line2: str
    field: KpiField
    format: Literal["currency", "percent"]
    variance_field: Optional[KpiField] = None
    variance_pct_field: Optional[KpiField] = None
    variance_label: Optional[str] = None
    nullable: bool = False


KPI_WIDGETS: dict[str, KpiWidgetConfig] = {
    "kpi-revenue-current-mo": KpiWidgetConfig(
        "Revenue", "Current Mo.", KpiField.REVENUE_CURRENT_MO, "currency"
    ),
    "kpi-revenue-3mo-avg": KpiWidgetConfig(
        "Revenue 3", "prior mos. avg.", KpiField.REVENUE_3MO_AVG, "currency"
    ),
    "kpi-ytd-revenue": KpiWidgetConfig(
        "YTD",
        "Revenue",
        KpiField.YTD_REVENUE,
        "currency",
        variance_field=KpiField.YOY_REVENUE_VARIANCE,
        variance_pct_field=KpiField.YOY_REVENUE_VARIANCE_PCT,
        variance_label="YOY Variance",
    ),
    "kpi-py-revenue": KpiWidgetConfig(
        "PY to Date",
        "Revenue",
        KpiField.PY_TO_DATE_REVENUE,
        "currency",
        nullable=True,
    ),
    "kpi-gross-margin-current-mo": KpiWidgetConfig(
        "Gross margin", "Current Mo.", KpiField.GROSS_MARGIN_CURRENT_MO, "percent"
    ),
    "kpi-gross-margin-ytd": KpiWidgetConfig(
        "Gross", "margin YTD", KpiField.GROSS_MARGIN_YTD, "percent"
    ),
    "kpi-net-income-current-mo": KpiWidgetConfig(
        "Current Mo.", "Net Income", KpiField.CURRENT_MO_NET_INCOME, "currency"
    ),
    "kpi-net-income-ytd": KpiWidgetConfig(
        "Net Income",
        "YTD",
        KpiField.NET_INCOME_YTD,
        "currency",
        variance_field=KpiField.NET_INCOME_YOY_VARIANCE,
    ),
    "kpi-py-net-income": KpiWidgetConfig(
        "PY to Date",
        "Net Income",
        KpiField.PY_TO_DATE_NET_INCOME,
        "currency",
        nullable=True,
    ),
}

PNL_TABLE_WIDGET = "pnl-table-13mo"
TREND_CHART_WIDGET = "trend-chart-expenses"

WIDGET_TYPES: list[WidgetType] = [
    *(WidgetType(wid, "KPI Card", "KpiCard") for wid in KPI_WIDGETS),
    WidgetType(PNL_TABLE_WIDGET, "Table", "PnlTable"),
    WidgetType(TREND_CHART_WIDGET, "Chart", "TrendChart"),
]


@dataclass(frozen=True)
class WidgetFormula:
    formula: str
    sources: tuple[str, ...]
    variance: Optional[str] = None


WIDGET_FORMULAS: dict[str, WidgetFormula] = {
    "kpi-revenue-current-mo": WidgetFormula("Income[month]", ("Income",)),
    "kpi-revenue-3mo-avg": WidgetFormula(
        "( Income[month−1] + Income[month−2] + Income[month−3] ) / 3", ("Income",)
    ),
    "kpi-ytd-revenue": WidgetFormula(
        "Σ Income[ Jan … month ]",
        ("Income",),
        variance="YTD Revenue − PY to Date Revenue",
    ),
    "kpi-py-revenue": WidgetFormula(
        "Σ PriorYear.Income[ Jan … month ]", ("Income (prior year)",)
    ),
    "kpi-gross-margin-current-mo": WidgetFormula(
        "GrossProfit[month] / Income[month] × 100", ("GrossProfit", "Income")
    ),
    "kpi-gross-margin-ytd": WidgetFormula(
        "Σ GrossProfit[ Jan … month ] / Σ Income[ Jan … month ] × 100",
        ("GrossProfit", "Income"),
    ),
    "kpi-net-income-current-mo": WidgetFormula("NetIncome[month]", ("NetIncome",)),
    "kpi-net-income-ytd": WidgetFormula(
        "Σ NetIncome[ Jan … month ]",
        ("NetIncome",),
        variance="YTD Net Income − PY to Date Net Income",
    ),
    "kpi-py-net-income": WidgetFormula(
        "Σ PriorYear.NetIncome[ Jan … month ]", ("NetIncome (prior year)",)
    ),
    PNL_TABLE_WIDGET: WidgetFormula(
        "13-month trailing window [ month−12 … month ]", KNOWN_CATEGORIES
    ),
    TREND_CHART_WIDGET: WidgetFormula(
        "Expenses[month] with 13-month rolling avg",
        ("Expenses",),
        variance="Rolling avg = Σ Expenses[ month−12 … month ] / 13",
    ),
}


def get_widget_type(widget_id: str) -> Optional[WidgetType]:
    return next((w for w in WIDGET_TYPES if w.id == widget_id), None)


# ---------------------------------------------------------------------------
# KPI card rendering
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KpiCardView:
    header_line1: str
    header_line2: str
    value: str
    variance: Optional[str] = None
    variance_label: Optional[str] = None
    variance_positive: Optional[bool] = None


def render_kpi_card(widget_id: str, kpis: KPIs) -> KpiCardView:
    """Format a KPI card's value and variance line.

    Raises:
        KeyError: if ``widget_id`` is not a KPI card.
    """
    config = KPI_WIDGETS[widget_id]
    raw = get_kpi_value(kpis, config.field)

    if config.nullable and raw is None:
        value = "N/A"
    else:
        number = raw if raw is not None else 0.0
        if config.format == "percent":
            value = format_pct(number)
        else:
            value = format_abbrev(number)

    variance: Optional[str] = None
    variance_label: Optional[str] = None
    variance_positive: Optional[bool] = None
    if config.variance_field is not None:
        variance_value = get_kpi_value(kpis, config.variance_field)
        if variance_value is not None:
            variance = format_variance(variance_value)
            if config.variance_pct_field is not None:
                pct = get_kpi_value(kpis, config.variance_pct_field)
                if pct is not None:
                    sign = "+" if pct >= 0 else ""
                    variance += f"  {sign}{pct:.2f}%"
            variance_label = config.variance_label
            variance_positive = variance_value >= 0

    return KpiCardView(
        header_line1=config.header_line1,
        header_line2=config.header_line2,
        value=value,
        variance=variance,
        variance_label=variance_label,
        variance_positive=variance_positive,
    )
