import pytest

from finboard.dashboard import build_dashboard, build_trend, build_widget_preview
from finboard.models import FinancialRow
from finboard.periods import InvalidPeriodError


def _rows(with_prior_year: bool = True):
    income = {f"2024-{m:02d}": 100.0 * m for m in range(1, 7)}
    net_income = {f"2024-{m:02d}": 10.0 for m in range(1, 7)}
    if with_prior_year:
        income |= {f"2023-{m:02d}": 50.0 for m in range(1, 13)}
    else:
        # Placeholder zeros, as returned by sources for years without data
        income |= {f"2023-{m:02d}": 0.0 for m in range(1, 13)}
    return [
        FinancialRow("Income", income),
        FinancialRow("NetIncome", net_income),
        FinancialRow("Expenses", {f"2024-{m:02d}": 20.0 for m in range(1, 7)}),
    ]


def test_dashboard_with_prior_year() -> None:
    view = build_dashboard(_rows(), "2024-02", entity_name="Acme")

    assert view.selected_month == "2024-02"
    assert view.entity_name == "Acme"
    assert view.kpis.ytd_revenue == pytest.approx(300.0)
    assert view.kpis.py_to_date_revenue == pytest.approx(100.0)
    assert view.kpis.yoy_revenue_variance_pct == pytest.approx(200.0)
    assert len(view.pnl_by_month.months) == 13
    assert view.py_groups is not None


def test_all_zero_prior_year_is_treated_as_missing() -> None:
    view = build_dashboard(_rows(with_prior_year=False), "2024-03")

    assert view.py_groups is None
    assert view.kpis.py_to_date_revenue is None
    assert view.kpis.net_income_yoy_variance is None
    assert all(m.revenue == 0.0 for m in view.pnl_by_month.months[:10])


def test_dashboard_to_dict_is_plain_data() -> None:
    data = build_dashboard(_rows(), "2024-02").to_dict()

    assert data["selected_month"] == "2024-02"
    assert data["kpis"]["ytd_revenue"] == pytest.approx(300.0)
    assert len(data["pnl_by_month"]["months"]) == 13


@pytest.mark.parametrize("month", [None, "2024-13", "2024-2", "garbage"])
def test_dashboard_rejects_invalid_month(month) -> None:
    with pytest.raises(InvalidPeriodError):
        build_dashboard(_rows(), month)


def test_trend_validates_range() -> None:
    view = build_trend(_rows(), "2024-01", "2024-06")
    assert len(view.data) == 6
    assert view.to_dict()["data"][0]["month"] == "2024-01"

    with pytest.raises(InvalidPeriodError):
        build_trend(_rows(), "2024-06", "2024-01")
    with pytest.raises(InvalidPeriodError):
        build_trend(_rows(), None, "2024-01")


def test_preview_kpi_widget_uses_latest_month() -> None:
    preview = build_widget_preview(_rows(), "kpi-revenue-current-mo")

    assert preview.available is True
    assert preview.selected_month == "2024-06"
    assert preview.component == "KpiCard"
    assert preview.kpis.revenue_current_mo == pytest.approx(600.0)
    assert preview.pnl is None and preview.trend is None


def test_preview_table_and_chart() -> None:
    table = build_widget_preview(_rows(), "pnl-table-13mo")
    assert table.pnl is not None
    assert table.pnl.months[-1].label == "Jun 24"

    chart = build_widget_preview(_rows(), "trend-chart-expenses")
    assert [p.month for p in chart.trend][0] == "2023-07"
    assert [p.month for p in chart.trend][-1] == "2024-06"


def test_preview_without_data_and_unknown_widget() -> None:
    assert build_widget_preview([], "kpi-ytd-revenue").available is False

    with pytest.raises(KeyError):
        build_widget_preview(_rows(), "not-a-widget")
