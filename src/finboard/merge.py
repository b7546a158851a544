# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Combination of financial rows coming from several entities."""

from collections.abc import Iterable

from .models import FinancialRow


def merge_rows(*row_sets: Iterable[FinancialRow]) -> list[FinancialRow]:
    """Merge several entities' rows into one combined list.

    Rows are grouped by category. The first row seen for a category is
    copied (its periods mapping is never aliased); every later row of the
    same category is added period by period, an absent period counting as 0.

    Args:
        *row_sets: One iterable of FinancialRow per entity.

    Returns:
        One FinancialRow per category, in order of first appearance.
        No row sets (or only empty ones) yield an empty list.
    """
    grouped: dict[str, FinancialRow] = {}

    for rows in row_sets:
        for row in rows:
            existing = grouped.get(row.category)
            if existing is None:
                grouped[row.category] = row.copy()
                continue

            for period, value in row.periods.items():
                existing.periods[period] = existing.periods.get(period, 0.0) + value

    return list(grouped.values())
