# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for FinBoard.

All data sources are normalized into the same canonical shape before any
computation happens:

- ``FinancialRow``:
    one row per P&L category for one entity, holding a sparse mapping
    from calendar month key ("YYYY-MM") to a numeric value. An absent key
    means "no data for that month", which is distinct from an explicit 0.

- ``GroupValues``:
    dense, year-scoped projection of rows: category -> 13 floats
    (January..December of one calendar year + the annual total).

The remaining dataclasses are derived view models (KPIs, 13-month P&L,
expense trend points). They are rebuilt on every request and are never
persisted as canonical data. Each exposes ``to_dict()`` returning only
numbers, strings and None so that results can be serialized as JSON.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional

# ---------------------------------------------------------------------------
# Static lookup tables
# ---------------------------------------------------------------------------

MONTHS_PER_YEAR = 12

# Amounts are kept to the cent by every source and by the warehouse.
CENT_DECIMALS = 2

MONTH_ABBREVS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# Canonical category labels produced by the adapters.
INCOME = "Income"
COGS = "COGS"
GROSS_PROFIT = "GrossProfit"
EXPENSES = "Expenses"
NET_OPERATING_INCOME = "NetOperatingIncome"
OTHER_EXPENSES = "OtherExpenses"
NET_OTHER_INCOME = "NetOtherIncome"
NET_INCOME = "NetIncome"

# Category -> P&L field, in display order.
PNL_FIELDS: dict[str, str] = {
    INCOME: "revenue",
    COGS: "cogs",
    GROSS_PROFIT: "gross_profit",
    EXPENSES: "expenses",
    NET_OPERATING_INCOME: "net_operating_income",
    OTHER_EXPENSES: "other_expenses",
    NET_OTHER_INCOME: "net_other_income",
    NET_INCOME: "net_income",
}

KNOWN_CATEGORIES: tuple[str, ...] = tuple(PNL_FIELDS)

GroupValues = dict[str, list[float]]
"""
Category -> 13 floats. Indices 0..11 are January..December of one year,
index 12 is the annual total (always computed, never read from source).
"""


# ---------------------------------------------------------------------------
# Source rows
# ---------------------------------------------------------------------------


@dataclass
class FinancialRow:
    """One P&L category for one entity, with sparse monthly values."""

    category: str
    periods: dict[str, float] = field(default_factory=dict)

    def copy(self) -> "FinancialRow":
        """Return an independent copy (the periods mapping is not shared)."""
        return FinancialRow(category=self.category, periods=dict(self.periods))

    def to_dict(self) -> dict[str, object]:
        return {"category": self.category, "periods": dict(self.periods)}


# ---------------------------------------------------------------------------
# Derived view models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KPIs:
    """
    Year-over-year KPIs for one selected month.

    Attributes
    ----------
    revenue_current_mo :
        Income of the selected month.
    revenue_3mo_avg :
        Average Income of the three months preceding the selected month,
        reaching into the prior year when needed.
    ytd_revenue :
        Income from January through the selected month.
    py_to_date_revenue :
        Prior-year Income over the same months, or None without prior-year
        data.
    yoy_revenue_variance, yoy_revenue_variance_pct :
        ytd_revenue - py_to_date_revenue and the same variance as a
        percentage of the prior-year base (None when the base is 0).
    gross_margin_current_mo, gross_margin_ytd :
        Gross profit / Income x 100 (0 when Income is 0).
    current_mo_net_income, net_income_ytd :
        NetIncome of the selected month and year-to-date.
    py_to_date_net_income, net_income_yoy_variance :
        Prior-year comparison for NetIncome, or None.
    """

    revenue_current_mo: float
    revenue_3mo_avg: float
    ytd_revenue: float
    py_to_date_revenue: Optional[float]
    yoy_revenue_variance: Optional[float]
    yoy_revenue_variance_pct: Optional[float]
    gross_margin_current_mo: float
    gross_margin_ytd: float
    current_mo_net_income: float
    net_income_ytd: float
    py_to_date_net_income: Optional[float]
    net_income_yoy_variance: Optional[float]

    def to_dict(self) -> dict[str, Optional[float]]:
        return asdict(self)


@dataclass(frozen=True)
class PnLTotals:
    """Per-field P&L amounts without a label."""

    revenue: float = 0.0
    cogs: float = 0.0
    gross_profit: float = 0.0
    expenses: float = 0.0
    net_operating_income: float = 0.0
    other_expenses: float = 0.0
    net_other_income: float = 0.0
    net_income: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class PnLMonthEntry(PnLTotals):
    """P&L amounts for one month, labelled like 'Mar 24'."""

    label: str = ""

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = asdict(self)
        label = data.pop("label")
        return {"label": label, **data}


@dataclass(frozen=True)
class PnLByMonth:
    """Trailing 13-month P&L table with column totals."""

    months: list[PnLMonthEntry]
    totals: PnLTotals

    def to_dict(self) -> dict[str, object]:
        return {
            "months": [m.to_dict() for m in self.months],
            "totals": self.totals.to_dict(),
        }


@dataclass(frozen=True)
class TrendDataPoint:
    """Monthly expenses with the trailing 13-month average (None if unseeded)."""

    month: str
    expenses: float
    avg13: Optional[float]

    def to_dict(self) -> dict[str, object]:
        return asdict(self)
