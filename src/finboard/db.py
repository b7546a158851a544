# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Warehouse layer for FinBoard.

This module stores the normalized financial rows of each entity in a
SQLite database. It plays the role of both the data warehouse (the last
synced rows of every entity) and the fetch cache (rows older than a TTL
are reported as missing so that callers refetch them).

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) financial_data
   One row per (entity, category, period).

   Columns:
   - entity_id     TEXT    NOT NULL
   - category      TEXT    NOT NULL  -- "Income", "COGS", ...
   - period        TEXT    NOT NULL  -- "YYYY-MM"
   - amount_cents  INTEGER NOT NULL  -- signed integer amount in cents

   PRIMARY KEY (entity_id, category, period)

2) entity_sync
   One row per entity, describing its last sync.

   Columns:
   - entity_id    TEXT PRIMARY KEY
   - entity_name  TEXT NOT NULL
   - source_type  TEXT NOT NULL     -- "quickbooks" | "csv" | ...
   - synced_at    TEXT NOT NULL     -- ISO datetime, UTC
   - row_count    INTEGER NOT NULL  -- number of categories stored

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- All timestamps are stored as ISO-8601 text (UTC).
- Amounts are stored as integer cents and reconstructed as floats.
  Adapters round to cents as well, so stored and freshly fetched rows
  carry the same values.
- Storing an entity's rows replaces all of its previous rows in a single
  transaction.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

from .models import FinancialRow

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for FinBoard.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class SyncMetadata:
    """Last sync of an entity's financial data."""

    entity_id: str
    entity_name: str
    source_type: str
    synced_at: datetime
    row_count: int


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they do not exist yet (idempotent)."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS financial_data (
            entity_id     TEXT    NOT NULL,
            category      TEXT    NOT NULL,
            period        TEXT    NOT NULL,  -- 'YYYY-MM'
            amount_cents  INTEGER NOT NULL,

            PRIMARY KEY (entity_id, category, period)
        );
        """
    )

    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS entity_sync (
            entity_id    TEXT PRIMARY KEY,
            entity_name  TEXT    NOT NULL,
            source_type  TEXT    NOT NULL,
            synced_at    TEXT    NOT NULL,
            row_count    INTEGER NOT NULL DEFAULT 0
        );
        """
    )

    conn.commit()


def _now_utc() -> datetime:
    """Return the current UTC datetime (isolated for easier testing)."""
    return datetime.now(timezone.utc)


def _to_cents(value: float) -> int:
    return int(round(float(value) * 100))


def _row_to_sync_metadata(row: tuple) -> SyncMetadata:
    entity_id, entity_name, source_type, synced_at, row_count = row
    return SyncMetadata(
        entity_id=str(entity_id),
        entity_name=str(entity_name),
        source_type=str(source_type),
        synced_at=datetime.fromisoformat(synced_at),
        row_count=int(row_count),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if missing.
    - Creates the tables if they are missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def store_financial_rows(
    cfg: DatabaseConfig,
    entity_id: str,
    entity_name: str,
    rows: list[FinancialRow],
    *,
    source_type: str,
    synced_at: datetime | None = None,
) -> SyncMetadata:
    """
    Replace the stored rows of an entity and record the sync.

    Parameters
    ----------
    cfg:
        Database configuration.
    entity_id, entity_name:
        Identifier and display name of the entity.
    rows:
        Normalized financial rows to store.
    source_type:
        Provider the rows come from (e.g. "quickbooks", "csv").
    synced_at:
        Timestamp of the sync. Defaults to the current UTC time.

    Returns
    -------
    SyncMetadata
        The metadata recorded for this sync.
    """
    init_database(cfg)

    if synced_at is None:
        synced_at = _now_utc()
    synced_at_iso = synced_at.isoformat(timespec="seconds")

    cells = [
        (entity_id, row.category, period, _to_cents(value))
        for row in rows
        for period, value in row.periods.items()
    ]

    conn = _connect(cfg)
    try:
        with conn:
            conn.execute("DELETE FROM financial_data WHERE entity_id = ?;", (entity_id,))
            conn.executemany(
                """
                INSERT OR REPLACE INTO financial_data (
                    entity_id, category, period, amount_cents
                )
                VALUES (?, ?, ?, ?);
                """,
                cells,
            )
            conn.execute(
                """
                INSERT OR REPLACE INTO entity_sync (
                    entity_id, entity_name, source_type, synced_at, row_count
                )
                VALUES (?, ?, ?, ?, ?);
                """,
                (entity_id, entity_name, source_type, synced_at_iso, len(rows)),
            )
    finally:
        conn.close()

    return SyncMetadata(
        entity_id=entity_id,
        entity_name=entity_name,
        source_type=source_type,
        synced_at=datetime.fromisoformat(synced_at_iso),
        row_count=len(rows),
    )


def get_sync_metadata(cfg: DatabaseConfig, entity_id: str) -> SyncMetadata | None:
    """Return the last sync metadata of an entity, or None if never synced."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            SELECT entity_id, entity_name, source_type, synced_at, row_count
              FROM entity_sync
             WHERE entity_id = ?;
            """,
            (entity_id,),
        )
        row = cur.fetchone()
    finally:
        conn.close()

    if row is None:
        return None
    return _row_to_sync_metadata(row)


def list_synced_entities(cfg: DatabaseConfig) -> list[SyncMetadata]:
    """Return the sync metadata of every stored entity, ordered by id."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            SELECT entity_id, entity_name, source_type, synced_at, row_count
              FROM entity_sync
             ORDER BY entity_id;
            """
        )
        rows = cur.fetchall()
    finally:
        conn.close()

    return [_row_to_sync_metadata(r) for r in rows]


def load_financial_rows(
    cfg: DatabaseConfig,
    entity_id: str,
    *,
    max_age: timedelta | None = None,
) -> list[FinancialRow] | None:
    """
    Load the stored rows of an entity.

    Parameters
    ----------
    cfg:
        Database configuration.
    entity_id:
        Entity to load.
    max_age:
        Optional time-to-live. If the last sync is older than this, the
        stored rows are considered stale and None is returned.

    Returns
    -------
    list[FinancialRow] | None
        One row per category (ordered by category, periods chronological),
        or None if the entity has no data or its data is stale.
    """
    meta = get_sync_metadata(cfg, entity_id)
    if meta is None:
        return None

    if max_age is not None:
        synced_at = meta.synced_at
        if synced_at.tzinfo is None:
            synced_at = synced_at.replace(tzinfo=timezone.utc)
        if _now_utc() - synced_at > max_age:
            return None

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            SELECT category, period, amount_cents
              FROM financial_data
             WHERE entity_id = ?
             ORDER BY category, period;
            """,
            (entity_id,),
        )
        cells = cur.fetchall()
    finally:
        conn.close()

    if not cells:
        return None

    grouped: dict[str, FinancialRow] = {}
    for category, period, amount_cents in cells:
        row = grouped.setdefault(category, FinancialRow(category=category))
        row.periods[period] = amount_cents / 100.0

    return list(grouped.values())
