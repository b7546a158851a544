import pytest

from finboard.io import dataframe_to_rows, read_financial_rows, rows_to_dataframe
from finboard.models import FinancialRow


def test_read_financial_rows_groups_by_category(tmp_path) -> None:
    csv_path = tmp_path / "pl.csv"
    csv_path.write_text(
        "Category,Period,Amount\n"
        "Income,2024-01,100.5\n"
        "Expenses,2024-01,-40\n"
        "Income,2024-02,200\n"
        "Income,2024-02,250\n",
        encoding="utf-8",
    )

    rows = read_financial_rows(csv_path)

    assert [r.category for r in rows] == ["Income", "Expenses"]
    assert rows[0].periods["2024-01"] == pytest.approx(100.5)
    # Last value wins for a repeated (category, period)
    assert rows[0].periods["2024-02"] == pytest.approx(250.0)
    assert rows[1].periods["2024-01"] == pytest.approx(-40.0)


def test_read_financial_rows_missing_columns(tmp_path) -> None:
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("category,value\nIncome,1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="missing: period"):
        read_financial_rows(csv_path)


@pytest.mark.parametrize(
    "line", ["Income,2024-13,1", "Income,2024/01,1", "Income,2024-01,abc"]
)
def test_read_financial_rows_invalid_cells(tmp_path, line) -> None:
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text(f"category,period,value\n{line}\n", encoding="utf-8")

    with pytest.raises(ValueError):
        read_financial_rows(csv_path)


def test_dataframe_conversion_keeps_rows() -> None:
    rows = [
        FinancialRow("Income", {"2024-01": 1.0, "2024-02": 2.0}),
        FinancialRow("COGS", {"2024-01": 0.5}),
    ]

    df = rows_to_dataframe(rows)
    assert list(df.columns) == ["category", "period", "value"]
    assert len(df) == 3
    assert dataframe_to_rows(df) == rows

    assert rows_to_dataframe([]).empty


def test_read_financial_rows_rounds_to_cents(tmp_path) -> None:
    csv_path = tmp_path / "pl.csv"
    csv_path.write_text(
        "category,period,value\nIncome,2024-01,1.234\nIncome,2024-02,9.999\n",
        encoding="utf-8",
    )

    rows = read_financial_rows(csv_path)

    assert rows[0].periods["2024-01"] == pytest.approx(1.23)
    assert rows[0].periods["2024-02"] == pytest.approx(10.0)
