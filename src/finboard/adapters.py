# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data-source adapters for FinBoard.

An adapter turns a source-specific payload into the canonical
``list[FinancialRow]`` consumed by the engine. Adapters are responsible
for parsing source formats (for example QuickBooks' ``Jan_2024`` column
names) and for dropping values that are not numeric.

Available providers
-------------------
- ``quickbooks``: QuickBooks Online P&L summary rows. The transport (the
  SQL-over-HTTP query) is injected as ``fetch_summaries`` so that the
  adapter only deals with normalization.
- ``csv``: long-format CSV file (see ``io.read_financial_rows``).
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Optional

from .io import read_financial_rows
from .models import CENT_DECIMALS, MONTH_ABBREVS, FinancialRow

logger = logging.getLogger(__name__)

PL_MONTH_COLUMN = re.compile(
    r"^(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)_(\d{4})$"
)

SummaryFetcher = Callable[[str, str, str], list[dict[str, Any]]]
"""(user, personal access token, catalog id) -> raw P&L summary rows."""


class DataAdapter(ABC):
    """Source of normalized financial rows for one entity."""

    @abstractmethod
    def fetch_financial_data(
        self,
        source_config: Mapping[str, str],
        credentials: Mapping[str, str],
    ) -> list[FinancialRow]:
        """Fetch and normalize the entity's P&L rows."""


def _to_number(raw: Any) -> Optional[float]:
    """Parse a cell as a finite float, or None."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def normalize_pl_row(raw: Mapping[str, Any]) -> FinancialRow:
    """Convert one QuickBooks P&L summary row into a FinancialRow.

    The category comes from ``RowGroup``. Every ``Mon_YYYY`` column becomes
    a "YYYY-MM" period; other columns and non-numeric cells are ignored.
    Values are rounded to cents, the precision kept by the warehouse.
    """
    periods: dict[str, float] = {}

    for key, cell in raw.items():
        match = PL_MONTH_COLUMN.match(str(key))
        if not match:
            continue

        month_name, year = match.groups()
        month = MONTH_ABBREVS.index(month_name) + 1

        value = _to_number(cell)
        if value is not None:
            periods[f"{year}-{month:02d}"] = round(value, CENT_DECIMALS)

    return FinancialRow(category=str(raw.get("RowGroup", "")), periods=periods)


class QuickBooksAdapter(DataAdapter):
    """QuickBooks Online P&L summaries, queried through ``fetch_summaries``."""

    def __init__(self, fetch_summaries: SummaryFetcher) -> None:
        self._fetch_summaries = fetch_summaries

    def fetch_financial_data(
        self,
        source_config: Mapping[str, str],
        credentials: Mapping[str, str],
    ) -> list[FinancialRow]:
        user = credentials.get("user", "")
        pat = credentials.get("pat", "")
        catalog_id = source_config.get("catalogId", "")

        if not user or not pat or not catalog_id:
            raise ValueError(
                "Missing QuickBooks credentials. Provide user, pat and catalogId."
            )

        raw_rows = self._fetch_summaries(user, pat, catalog_id)
        logger.info("Fetched %d P&L summary rows from %s", len(raw_rows), catalog_id)
        return [normalize_pl_row(r) for r in raw_rows]


class CsvAdapter(DataAdapter):
    """Financial rows read from a long-format CSV file (``source_config['path']``)."""

    def fetch_financial_data(
        self,
        source_config: Mapping[str, str],
        credentials: Mapping[str, str],
    ) -> list[FinancialRow]:
        path_raw = source_config.get("path")
        if not path_raw:
            raise ValueError("CSV data source requires a 'path' in source_config.")

        path = Path(path_raw)
        if not path.is_file():
            raise FileNotFoundError(f"CSV data source not found: {path}")

        return read_financial_rows(path)


def get_adapter(provider: str, **kwargs: Any) -> DataAdapter:
    """Return the adapter for ``provider``.

    Keyword arguments are forwarded to the adapter constructor
    (``fetch_summaries`` for QuickBooks).

    Raises:
        ValueError: if the provider is unknown.
    """
    if provider == "quickbooks":
        return QuickBooksAdapter(**kwargs)
    if provider == "csv":
        return CsvAdapter()
    raise ValueError(f"Unknown data provider: {provider!r}")
