# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for FinBoard.

This module converts between ``FinancialRow`` objects and a flat,
long-format table, and reads that table from CSV files.

Expected input format
---------------------

Column names are case-insensitive:

    category, period, value

- ``category``: P&L category label (Income, COGS, GrossProfit, ...)
- ``period``:   calendar month "YYYY-MM"
- ``value``:    numeric amount for that category and month

The column ``amount`` is accepted as an alias for ``value``.

Output schema
-------------
``read_financial_rows`` returns one ``FinancialRow`` per category, in order
of first appearance. If the same (category, period) pair appears several
times, the last value wins. Values are rounded to cents.

If the CSV structure does not match, or a period / value cannot be parsed,
a clear ValueError is raised.
"""

import logging
import os
from typing import Union

import pandas as pd

from .models import CENT_DECIMALS, FinancialRow

logger = logging.getLogger(__name__)

COLUMNS = ["category", "period", "value"]


def rows_to_dataframe(rows: list[FinancialRow]) -> pd.DataFrame:
    """Explode rows into a long DataFrame with columns category, period, value."""
    records = [
        {"category": row.category, "period": period, "value": float(value)}
        for row in rows
        for period, value in row.periods.items()
    ]
    if not records:
        return pd.DataFrame(columns=COLUMNS)
    return pd.DataFrame(records, columns=COLUMNS)


def dataframe_to_rows(df: pd.DataFrame) -> list[FinancialRow]:
    """Group a long DataFrame (category, period, value) back into rows."""
    grouped: dict[str, FinancialRow] = {}
    for record in df.itertuples(index=False):
        category = str(record.category)
        row = grouped.get(category)
        if row is None:
            row = FinancialRow(category=category)
            grouped[category] = row
        row.periods[str(record.period)] = float(record.value)
    return list(grouped.values())


def read_financial_rows(path: Union[str, "os.PathLike[str]"]) -> list[FinancialRow]:
    """
    Read financial rows from a long-format CSV file.

    Parameters
    ----------
    path:
        Path to the CSV file (category, period, value).

    Returns
    -------
    list[FinancialRow]
        One row per category.

    Raises
    ------
    ValueError
        If required columns are missing, a period is not "YYYY-MM" or a
        value is not numeric.
    """
    df = pd.read_csv(path, dtype={"period": str})

    df.columns = [c.lower().strip() for c in df.columns]
    cols = set(df.columns)

    if "amount" in cols and "value" not in cols:
        df = df.rename(columns={"amount": "value"})
        cols = set(df.columns)

    missing = set(COLUMNS).difference(cols)
    if missing:
        raise ValueError(
            "Invalid financial data structure. Expected columns: "
            "category, period, value (missing: "
            f"{', '.join(sorted(missing))})."
        )

    d = df[COLUMNS].copy()
    d["category"] = d["category"].astype(str).str.strip()
    d["period"] = d["period"].astype(str).str.strip()

    bad_periods = ~d["period"].str.fullmatch(r"\d{4}-(0[1-9]|1[0-2])")
    if bad_periods.any():
        first = d.loc[bad_periods, "period"].iloc[0]
        raise ValueError(f"Invalid value in 'period' column: {first!r} (YYYY-MM).")

    d["value"] = pd.to_numeric(d["value"], errors="coerce")
    if d["value"].isna().any():
        raise ValueError("Invalid numeric values in 'value' column.")
    d["value"] = d["value"].round(CENT_DECIMALS)

    rows = dataframe_to_rows(d)
    logger.debug("Read %d categories (%d cells) from %s", len(rows), len(d), path)
    return rows
