import pytest

from finboard.merge import merge_rows
from finboard.models import FinancialRow


def test_merge_sums_matching_categories_and_periods() -> None:
    a = [
        FinancialRow("Income", {"2024-01": 100.0, "2024-02": 50.0}),
        FinancialRow("Expenses", {"2024-01": 40.0}),
    ]
    b = [
        FinancialRow("Income", {"2024-02": 25.0, "2024-03": 10.0}),
        FinancialRow("COGS", {"2024-01": 5.0}),
    ]

    merged = merge_rows(a, b)

    assert [r.category for r in merged] == ["Income", "Expenses", "COGS"]
    income = merged[0]
    assert income.periods == {
        "2024-01": pytest.approx(100.0),
        "2024-02": pytest.approx(75.0),
        "2024-03": pytest.approx(10.0),
    }


def test_merge_never_mutates_inputs() -> None:
    """The first row of a category is copied, not aliased."""
    original = FinancialRow("Income", {"2024-01": 1.0})
    merged = merge_rows([original], [FinancialRow("Income", {"2024-01": 2.0})])

    assert merged[0].periods["2024-01"] == pytest.approx(3.0)
    assert original.periods == {"2024-01": 1.0}
    assert merged[0] is not original


def test_merge_of_nothing_is_empty() -> None:
    assert merge_rows() == []
    assert merge_rows([], []) == []


def test_merge_of_single_set_is_an_equal_copy() -> None:
    rows = [
        FinancialRow("Income", {"2024-01": 100.0, "2024-02": 50.0}),
        FinancialRow("Expenses", {"2024-01": 40.0}),
    ]

    merged = merge_rows(rows)

    assert merged == rows
    for copy, original in zip(merged, rows):
        assert copy is not original
        assert copy.periods is not original.periods
