from datetime import datetime, timedelta, timezone

import pytest

import finboard.db as db
from finboard.db import (
    DatabaseConfig,
    get_sync_metadata,
    init_database,
    list_synced_entities,
    load_financial_rows,
    store_financial_rows,
)
from finboard.models import FinancialRow


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    return DatabaseConfig(engine="sqlite", path=tmp_path / "db" / "test.sqlite")


def _rows():
    return [
        FinancialRow("Income", {"2024-02": 200.25, "2024-01": 100.1}),
        FinancialRow("COGS", {"2024-01": -30.0}),
    ]


def test_init_database_creates_file_and_is_idempotent(tmp_path) -> None:
    cfg = make_tmp_db_cfg(tmp_path)

    assert not cfg.path.exists()
    init_database(cfg)
    init_database(cfg)
    assert cfg.path.exists()
    assert list_synced_entities(cfg) == []


def test_unsupported_engine(tmp_path) -> None:
    cfg = DatabaseConfig(engine="postgres", path=tmp_path / "x.sqlite")
    with pytest.raises(ValueError, match="Unsupported database engine"):
        init_database(cfg)


def test_store_and_load_rows(tmp_path) -> None:
    cfg = make_tmp_db_cfg(tmp_path)

    meta = store_financial_rows(cfg, "acme", "Acme", _rows(), source_type="csv")
    assert meta.row_count == 2

    rows = load_financial_rows(cfg, "acme")
    assert [r.category for r in rows] == ["COGS", "Income"]
    income = rows[1]
    assert list(income.periods) == ["2024-01", "2024-02"]
    assert income.periods["2024-01"] == pytest.approx(100.1)
    assert income.periods["2024-02"] == pytest.approx(200.25)

    stored = get_sync_metadata(cfg, "acme")
    assert stored.entity_name == "Acme"
    assert stored.source_type == "csv"


def test_store_replaces_previous_rows(tmp_path) -> None:
    cfg = make_tmp_db_cfg(tmp_path)
    store_financial_rows(cfg, "acme", "Acme", _rows(), source_type="csv")
    store_financial_rows(
        cfg,
        "acme",
        "Acme Inc",
        [FinancialRow("Expenses", {"2024-03": 5.0})],
        source_type="quickbooks",
    )

    rows = load_financial_rows(cfg, "acme")
    assert [r.category for r in rows] == ["Expenses"]
    assert get_sync_metadata(cfg, "acme").entity_name == "Acme Inc"


def test_entities_are_isolated(tmp_path) -> None:
    cfg = make_tmp_db_cfg(tmp_path)
    store_financial_rows(cfg, "a", "A", _rows(), source_type="csv")
    store_financial_rows(cfg, "b", "B", [FinancialRow("COGS")], source_type="csv")

    assert len(load_financial_rows(cfg, "a")) == 2
    # An entity synced with no cells has no usable data
    assert load_financial_rows(cfg, "b") is None
    assert load_financial_rows(cfg, "unknown") is None
    assert [m.entity_id for m in list_synced_entities(cfg)] == ["a", "b"]


def test_load_respects_max_age(tmp_path, monkeypatch) -> None:
    cfg = make_tmp_db_cfg(tmp_path)
    synced_at = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    store_financial_rows(
        cfg, "acme", "Acme", _rows(), source_type="csv", synced_at=synced_at
    )

    monkeypatch.setattr(db, "_now_utc", lambda: synced_at + timedelta(hours=23))
    assert load_financial_rows(cfg, "acme", max_age=timedelta(hours=24)) is not None

    monkeypatch.setattr(db, "_now_utc", lambda: synced_at + timedelta(hours=25))
    assert load_financial_rows(cfg, "acme", max_age=timedelta(hours=24)) is None
    # Without a max age, stale rows are still returned
    assert load_financial_rows(cfg, "acme") is not None
