# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Number formatting used by KPI cards, P&L tables and console output."""


def format_abbrev(value: float) -> str:
    """Abbreviate an amount: 1.2M, 45.30K, 512.00; negatives as (1.2M)."""
    abs_value = abs(value)

    if abs_value >= 1_000_000:
        formatted = f"{abs_value / 1_000_000:.1f}M"
    elif abs_value >= 1_000:
        formatted = f"{abs_value / 1_000:.2f}K"
    else:
        formatted = f"{abs_value:.2f}"

    if value < 0:
        return f"({formatted})"
    return formatted


def format_pct(value: float) -> str:
    return f"{value:.2f}%"


def format_variance(value: float) -> str:
    """Signed abbreviated amount: '+' for zero and gains, parentheses for losses."""
    prefix = "+" if value >= 0 else ""
    return prefix + format_abbrev(value)
