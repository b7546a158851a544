# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Fetching financial rows for one or several entities.

This module sits between the data-source adapters, the warehouse and the
dashboard assembly:

- ``fetch_single_entity`` reads an entity's rows from the warehouse, or
  fetches them through its adapter when they are missing, stale or a
  refresh is requested. Fresh rows are written back to the warehouse.
- ``fetch_rows_for_entities`` validates the requested entity ids, fetches
  each entity and merges the non-empty results.

Warehouse failures never block a fetch: a failed read falls back to the
adapter and a failed write is logged.
"""

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .adapters import DataAdapter
from .config import EntityConfig
from .db import DatabaseConfig, load_financial_rows, store_financial_rows
from .merge import merge_rows
from .models import FinancialRow

logger = logging.getLogger(__name__)

COMBINED_NAME = "Combined"

AdapterFactory = Callable[[EntityConfig], Optional[DataAdapter]]


class UnknownEntityError(ValueError):
    """Raised when requested entity ids are not configured."""


class NoDataError(LookupError):
    """Raised when no financial rows are available for the requested entities."""


@dataclass(frozen=True)
class FetchResult:
    """Merged rows of the requested entities and the name to display."""

    rows: list[FinancialRow]
    entity_name: str


def fetch_single_entity(
    db_cfg: DatabaseConfig,
    entity: EntityConfig,
    adapter: Optional[DataAdapter],
    *,
    refresh: bool = False,
    ttl: Optional[timedelta] = None,
) -> list[FinancialRow]:
    """
    Return the rows of one entity, from the warehouse or its adapter.

    Parameters
    ----------
    db_cfg:
        Warehouse configuration.
    entity:
        Entity to fetch.
    adapter:
        Adapter used when the warehouse has no usable rows. If None, only
        the warehouse is consulted.
    refresh:
        Skip the warehouse read and always fetch through the adapter.
    ttl:
        Maximum age of warehouse rows; older rows are refetched.

    Returns
    -------
    list[FinancialRow]
        Possibly empty list of rows.
    """
    if not refresh:
        try:
            cached = load_financial_rows(db_cfg, entity.id, max_age=ttl)
            if cached is not None:
                return cached
        except sqlite3.Error:
            logger.exception(
                "Warehouse read failed for %s, falling back to source", entity.id
            )

    if adapter is None:
        logger.warning("No stored data and no adapter available for %s", entity.id)
        return []

    fresh_rows = adapter.fetch_financial_data(
        entity.source_config, entity.resolve_credentials()
    )

    if fresh_rows:
        try:
            store_financial_rows(
                db_cfg,
                entity.id,
                entity.name,
                fresh_rows,
                source_type=entity.provider,
            )
        except sqlite3.Error:
            logger.exception("Warehouse write failed for %s", entity.id)

    return fresh_rows


def fetch_rows_for_entities(
    db_cfg: DatabaseConfig,
    entity_ids: list[str],
    entities: list[EntityConfig],
    *,
    adapter_factory: Optional[AdapterFactory] = None,
    refresh: bool = False,
    ttl: Optional[timedelta] = None,
) -> FetchResult:
    """
    Fetch and merge the rows of several entities.

    Raises
    ------
    UnknownEntityError
        If no ids are given or some ids are not configured.
    """
    if not entity_ids:
        raise UnknownEntityError("No entities specified.")

    by_id = {e.id: e for e in entities}
    invalid = [eid for eid in entity_ids if eid not in by_id]
    if invalid:
        raise UnknownEntityError(f"Invalid entity IDs: {', '.join(invalid)}")

    results: list[list[FinancialRow]] = []
    for eid in entity_ids:
        entity = by_id[eid]
        adapter = adapter_factory(entity) if adapter_factory is not None else None
        results.append(
            fetch_single_entity(db_cfg, entity, adapter, refresh=refresh, ttl=ttl)
        )

    if len(entity_ids) == 1:
        return FetchResult(rows=results[0], entity_name=by_id[entity_ids[0]].name)

    non_empty = [r for r in results if r]
    logger.info(
        "Merging %d of %d entities with data", len(non_empty), len(entity_ids)
    )
    return FetchResult(rows=merge_rows(*non_empty), entity_name=COMBINED_NAME)
