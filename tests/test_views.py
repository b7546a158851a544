import pytest

from finboard.engine import build_group_values, compute_kpis
from finboard.models import FinancialRow
from finboard.multi_periods import build_13_month_pnl, build_expenses_trend
from finboard.views import (
    group_values_to_dataframe,
    kpis_to_dataframe,
    pnl_to_dataframe,
    trend_to_dataframe,
)
from finboard.widgets import KPI_WIDGETS

ROWS = [
    FinancialRow("Income", {"2024-01": 1000.0, "2024-02": 2000.0}),
    FinancialRow("Expenses", {"2024-01": 123.456}),
]


def test_kpis_table_has_one_row_per_card() -> None:
    kpis = compute_kpis(build_group_values(ROWS, 2024), None, 1)
    df = kpis_to_dataframe(kpis)

    assert list(df.columns) == ["widget", "header", "value", "variance"]
    assert list(df["widget"]) == list(KPI_WIDGETS)
    py = df.loc[df["widget"] == "kpi-py-revenue", "value"].iloc[0]
    assert py == "N/A"


def test_pnl_table_layout() -> None:
    pnl = build_13_month_pnl(build_group_values(ROWS, 2024), None, "2024-02")
    df = pnl_to_dataframe(pnl, decimals=1)

    assert list(df.columns)[0] == "line"
    assert list(df.columns)[-1] == "Total"
    assert len(df.columns) == 1 + 13 + 1
    assert list(df["line"])[0] == "Revenue"

    revenue = df.set_index("line").loc["Revenue"]
    assert revenue["Feb 24"] == pytest.approx(2000.0)
    assert revenue["Total"] == pytest.approx(3000.0)
    expenses = df.set_index("line").loc["Expenses"]
    assert expenses["Jan 24"] == pytest.approx(123.5)


def test_trend_table() -> None:
    df = trend_to_dataframe(build_expenses_trend(ROWS, "2024-01", "2024-02"))
    assert list(df.columns) == ["month", "expenses", "avg13"]
    assert df.loc[0, "expenses"] == pytest.approx(123.46)

    assert trend_to_dataframe([]).empty


def test_group_values_table() -> None:
    df = group_values_to_dataframe(build_group_values(ROWS, 2024), 2024)

    assert list(df.columns)[:2] == ["category", "2024-01"]
    assert list(df.columns)[-1] == "Total"
    assert df.set_index("category").loc["Income", "Total"] == pytest.approx(3000.0)

    assert group_values_to_dataframe({}, 2024).empty
