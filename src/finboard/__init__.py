# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
FinBoard
--------

A Python-based financial dashboard engine for small businesses running
several legal entities. Each entity's profit-and-loss data is synced from
its accounting source into a local warehouse, then combined and turned
into dashboard views.

Main capabilities:
- normalized P&L rows (category x month) from QuickBooks reports or CSV,
- a SQLite warehouse with a time-to-live per entity,
- merging of several entities into one combined view,
- KPI computation (current month, 3-month average, YTD, year-over-year),
- a 13-month P&L and a 13-month rolling expense trend,
- a widget catalog with formatted KPI cards and previews.

FinBoard separates computation (engine), configuration (TOML), and
presentation (CLI), making it suitable for scripting and automation.


Version: 0.1.0

Usage:
    finboard --help
"""

__all__ = ["engine", "multi_periods", "dashboard", "widgets", "views"]

__version__ = "0.1.0"
