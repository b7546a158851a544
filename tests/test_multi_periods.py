import pytest

from finboard.engine import build_group_values
from finboard.models import FinancialRow
from finboard.multi_periods import build_13_month_pnl, build_expenses_trend


def _rows():
    return [
        FinancialRow(
            "Income",
            {f"2023-{m:02d}": 100.0 for m in range(1, 13)}
            | {f"2024-{m:02d}": 200.0 for m in range(1, 13)},
        ),
        FinancialRow(
            "Expenses",
            {f"2023-{m:02d}": 10.0 * m for m in range(1, 13)}
            | {f"2024-{m:02d}": 5.0 for m in range(1, 13)},
        ),
    ]


def test_13_month_pnl_covers_trailing_window() -> None:
    rows = _rows()
    pnl = build_13_month_pnl(
        build_group_values(rows, 2024), build_group_values(rows, 2023), "2024-03"
    )

    labels = [m.label for m in pnl.months]
    assert len(labels) == 13
    assert labels[0] == "Mar 23"
    assert labels[9] == "Dec 23"
    assert labels[10] == "Jan 24"
    assert labels[-1] == "Mar 24"

    assert pnl.months[0].revenue == pytest.approx(100.0)
    assert pnl.months[0].expenses == pytest.approx(30.0)
    assert pnl.months[-1].revenue == pytest.approx(200.0)


def test_13_month_pnl_january_has_12_prior_year_months() -> None:
    rows = _rows()
    pnl = build_13_month_pnl(
        build_group_values(rows, 2024), build_group_values(rows, 2023), "2024-01"
    )

    assert [m.label for m in pnl.months][:12] == [
        f"{mon} 23"
        for mon in (
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        )
    ]
    assert pnl.months[12].label == "Jan 24"


def test_13_month_pnl_totals_are_column_sums() -> None:
    rows = _rows()
    pnl = build_13_month_pnl(
        build_group_values(rows, 2024), build_group_values(rows, 2023), "2024-06"
    )

    assert pnl.totals.revenue == pytest.approx(sum(m.revenue for m in pnl.months))
    assert pnl.totals.expenses == pytest.approx(sum(m.expenses for m in pnl.months))
    assert pnl.totals.net_income == 0.0


def test_13_month_pnl_without_prior_year_zeroes_phase_one() -> None:
    rows = _rows()
    pnl = build_13_month_pnl(build_group_values(rows, 2024), None, "2024-03")

    assert all(m.revenue == 0.0 for m in pnl.months[:10])
    assert pnl.totals.revenue == pytest.approx(600.0)


def test_13_month_pnl_to_dict_puts_label_first() -> None:
    rows = _rows()
    pnl = build_13_month_pnl(build_group_values(rows, 2024), None, "2024-03")
    entry = pnl.to_dict()["months"][-1]

    assert list(entry)[0] == "label"
    assert entry["label"] == "Mar 24"
    assert "label" not in pnl.to_dict()["totals"]


def test_expenses_trend_one_point_per_month() -> None:
    points = build_expenses_trend(_rows(), "2024-01", "2024-06")

    assert [p.month for p in points] == [f"2024-{m:02d}" for m in range(1, 7)]
    assert all(p.expenses == pytest.approx(5.0) for p in points)


def test_expenses_trend_constant_series_has_constant_average() -> None:
    rows = [
        FinancialRow(
            "Expenses",
            {f"{y}-{m:02d}": 100.0 for y in (2023, 2024) for m in range(1, 13)},
        )
    ]

    points = build_expenses_trend(rows, "2024-01", "2024-12")

    assert all(p.avg13 == pytest.approx(100.0) for p in points)


def test_expenses_trend_rolling_average_values() -> None:
    """Jan 24 averages Jan 23..Jan 24 (13 months)."""
    points = build_expenses_trend(_rows(), "2024-01", "2024-01")
    expected = (sum(10.0 * m for m in range(1, 13)) + 5.0) / 13

    assert points[0].avg13 == pytest.approx(expected)


def test_expenses_trend_without_expenses_row_is_zero() -> None:
    points = build_expenses_trend(
        [FinancialRow("Income", {"2024-01": 1.0})], "2024-01", "2024-03"
    )

    assert [p.expenses for p in points] == [0.0, 0.0, 0.0]
    assert all(p.avg13 == 0.0 for p in points)


def test_13_month_pnl_december_has_one_prior_year_month() -> None:
    """December: only Dec of the prior year, then the full current year."""
    cur = {"Income": [1.0] * 12 + [12.0]}
    py = {"Income": [0.0] * 11 + [2.0, 2.0]}

    pnl = build_13_month_pnl(cur, py, "2024-12")

    labels = [m.label for m in pnl.months]
    assert labels[0] == "Dec 23"
    assert labels[1:] == [
        f"{mon} 24"
        for mon in (
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        )
    ]
    assert pnl.months[0].revenue == pytest.approx(2.0)
    assert pnl.totals.revenue == pytest.approx(14.0)


@pytest.mark.parametrize("month", ["2024-13", "abc"])
def test_13_month_pnl_requires_a_validated_month(month) -> None:
    """Callers validate first; a malformed key is an error, not a table."""
    with pytest.raises((ValueError, IndexError)):
        build_13_month_pnl({}, None, month)
