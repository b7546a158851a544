# FinBoard - Multi-entity financial dashboards & KPI engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for FinBoard.

This module wires together the main building blocks of FinBoard:

- application configuration (warehouse, entities, logging, display),
- data-source adapters and the warehouse (sync / import),
- dashboard assembly (KPIs, 13-month P&L, expense trend, previews),
- view helpers (tabular rendering and CSV export).

The CLI is intentionally thin: it does not implement financial logic
itself. It validates command-line parameters, fetches rows and hands them
to ``dashboard``.


Commands
--------

``sync --entity ID``
    Fetch an entity's rows through its configured adapter and store them
    in the warehouse.

``import --entity ID [--name NAME] CSV_PATH``
    Load a long-format CSV (category, period, value) into the warehouse.

``entities``
    List configured entities and their last sync.

``dashboard [--month YYYY-MM] --entities a,b [--refresh] [--verbose]``
    KPIs and 13-month P&L. Without --month, the latest month present in
    the data is used. Several entities are merged into one combined view.

``trend [--start-month YYYY-MM] [--end-month YYYY-MM] --entities a,b``
    Monthly expenses with a 13-month rolling average. Without bounds, the
    trailing 12 months ending at the latest month are used.

``preview --widget ID --entity ID``
    Render one widget on the latest month of an entity's data.


Display
-------

``--display-mode`` overrides the display.mode setting ("table" prints to
stdout, "csv" writes timestamped CSV files to ``--output``, "both" does
both).
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .adapters import DataAdapter, get_adapter
from .config import AppConfig, EntityConfig, load_app_config
from .dashboard import build_dashboard, build_trend, build_widget_preview
from .data_service import (
    NoDataError,
    UnknownEntityError,
    fetch_rows_for_entities,
    fetch_single_entity,
)
from .db import init_database, list_synced_entities, store_financial_rows
from .io import read_financial_rows
from .logging_config import setup_logging
from .periods import (
    InvalidPeriodError,
    determine_month_range_from_args,
    latest_month,
    validate_month,
)
from .views import (
    group_values_to_dataframe,
    kpis_to_dataframe,
    pnl_to_dataframe,
    trend_to_dataframe,
)
from .widgets import KPI_WIDGETS, WIDGET_FORMULAS, WIDGET_TYPES, render_kpi_card

logger = logging.getLogger(__name__)

# Providers whose adapter needs a transport that the CLI cannot provide.
TRANSPORT_PROVIDERS = {"quickbooks"}


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="finboard",
        description=(
            "FinBoard - Multi-entity financial dashboards. Syncs normalized "
            "P&L data per entity, then computes KPIs, a 13-month P&L and an "
            "expense trend for one or several entities."
        ),
    )

    ap.add_argument(
        "--version",
        action="version",
        version=f"finboard {__version__}",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'finboard_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the logging.level setting from the configuration file.",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory where CSV files will be written when display "
            "mode includes 'csv'. If omitted, 'data/output' is used."
        ),
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command", required=True)

    # sync
    sync_parser = subparsers.add_parser(
        "sync", help="Fetch an entity's data from its source into the warehouse."
    )
    sync_parser.add_argument("--entity", required=True, help="Entity id to sync.")

    # import
    import_parser = subparsers.add_parser(
        "import", help="Import a long-format CSV (category, period, value)."
    )
    import_parser.add_argument("csv_path", metavar="CSV_PATH")
    import_parser.add_argument("--entity", required=True, help="Target entity id.")
    import_parser.add_argument(
        "--name", help="Entity display name (defaults to the configured name)."
    )

    # entities
    subparsers.add_parser("entities", help="List entities and their last sync.")

    # dashboard
    dashboard_parser = subparsers.add_parser(
        "dashboard", help="KPIs and 13-month P&L for a selected month."
    )
    dashboard_parser.add_argument(
        "--month", help="Selected month (YYYY-MM). Defaults to the latest month."
    )
    _add_entities_arguments(dashboard_parser)
    dashboard_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Also print current and prior year group values.",
    )

    # trend
    trend_parser = subparsers.add_parser(
        "trend", help="Monthly expenses with a 13-month rolling average."
    )
    trend_parser.add_argument(
        "--start-month",
        dest="start_month",
        help="First month (YYYY-MM). Defaults to 11 months before the end month.",
    )
    trend_parser.add_argument(
        "--end-month",
        dest="end_month",
        help="Last month (YYYY-MM). Defaults to the latest month in the data.",
    )
    _add_entities_arguments(trend_parser)

    # preview
    preview_parser = subparsers.add_parser(
        "preview", help="Render one widget on the latest month of an entity."
    )
    preview_parser.add_argument(
        "--widget",
        required=True,
        choices=[w.id for w in WIDGET_TYPES],
        help="Widget type id.",
    )
    preview_parser.add_argument("--entity", required=True, help="Entity id.")

    return ap


def _add_entities_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--entities",
        required=True,
        help="Comma-separated entity ids; several ids are merged.",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Refetch data from the sources instead of using the warehouse.",
    )


def _build_adapter(entity: EntityConfig) -> Optional[DataAdapter]:
    """Adapter usable from the CLI for ``entity``, or None."""
    if entity.provider in TRANSPORT_PROVIDERS:
        logger.warning(
            "Provider %r needs a source transport; using stored data for %s",
            entity.provider,
            entity.id,
        )
        return None
    return get_adapter(entity.provider)


def _validate_month_args(args: argparse.Namespace) -> None:
    """Reject malformed month arguments before fetching any data."""
    for name in ("month", "start_month", "end_month"):
        value = getattr(args, name, None)
        if value is not None:
            validate_month(value, name.replace("_", " "))


def _split_ids(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _fetch_rows(args: argparse.Namespace, config: AppConfig, entity_ids: list[str]):
    result = fetch_rows_for_entities(
        config.database,
        entity_ids,
        config.entities,
        adapter_factory=_build_adapter,
        refresh=getattr(args, "refresh", False),
        ttl=config.cache_ttl,
    )
    if not result.rows:
        raise NoDataError("No P&L data available for the requested entities.")
    return result


def _emit(
    frames: list[tuple[str, str, pd.DataFrame]],
    display_mode: str,
    output_dir: Path,
) -> None:
    """Print and/or export (title, file stem, DataFrame) triples."""
    if display_mode in {"table", "both"}:
        for title, _, df in frames:
            print()
            print(f"=== {title} ===")
            print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for _, stem, df in frames:
            path = output_dir / f"{stem}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _handle_sync(args: argparse.Namespace, config: AppConfig, parser) -> None:
    entity = config.get_entity(args.entity)
    if entity is None:
        parser.error(f"Unknown entity: {args.entity!r}")

    adapter = _build_adapter(entity)
    if adapter is None:
        parser.error(
            f"Entity {entity.id!r} uses provider {entity.provider!r}, which "
            "cannot be synced from the command line."
        )

    rows = fetch_single_entity(config.database, entity, adapter, refresh=True)
    print(f"Synced {entity.name} ({entity.id}): {len(rows)} categories.")


def _handle_import(args: argparse.Namespace, config: AppConfig, parser) -> None:
    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        parser.error(f"CSV file for import not found: {csv_path}")

    entity = config.get_entity(args.entity)
    name = args.name or (entity.name if entity is not None else args.entity)

    print(f"Importing financial data from {csv_path} for {name}...")
    rows = read_financial_rows(csv_path)
    meta = store_financial_rows(
        config.database, args.entity, name, rows, source_type="csv"
    )
    print(f"Imported {meta.row_count} categories for {meta.entity_id}.")


def _handle_entities(config: AppConfig) -> None:
    synced = {m.entity_id: m for m in list_synced_entities(config.database)}

    records = []
    for entity in config.entities:
        meta = synced.pop(entity.id, None)
        records.append(
            {
                "id": entity.id,
                "name": entity.name,
                "provider": entity.provider,
                "synced_at": meta.synced_at.isoformat() if meta else "",
                "categories": meta.row_count if meta else 0,
            }
        )
    # Entities imported by hand without a configuration entry.
    for meta in synced.values():
        records.append(
            {
                "id": meta.entity_id,
                "name": meta.entity_name,
                "provider": meta.source_type,
                "synced_at": meta.synced_at.isoformat(),
                "categories": meta.row_count,
            }
        )

    if not records:
        print("No entities configured or stored.")
        return
    print(pd.DataFrame(records).to_string(index=False))


def _handle_dashboard(
    args: argparse.Namespace, config: AppConfig, display_mode: str, output_dir: Path
) -> None:
    result = _fetch_rows(args, config, _split_ids(args.entities))
    months = determine_month_range_from_args(args, result.rows)

    view = build_dashboard(result.rows, months.end, entity_name=result.entity_name)
    print(f"{view.entity_name} - selected month {view.selected_month}")

    frames = [
        ("KPIs", "kpis", kpis_to_dataframe(view.kpis)),
        (
            "P&L by month",
            "pnl_13_months",
            pnl_to_dataframe(view.pnl_by_month, decimals=config.decimals),
        ),
    ]

    if args.verbose and view.cur_groups is not None:
        year = int(view.selected_month[:4])
        frames.append(
            (
                f"Current year P&L group summaries ({year})",
                "groups_current_year",
                group_values_to_dataframe(view.cur_groups, year),
            )
        )
        if view.py_groups is not None:
            frames.append(
                (
                    f"Prior year P&L group summaries ({year - 1})",
                    "groups_prior_year",
                    group_values_to_dataframe(view.py_groups, year - 1),
                )
            )
        else:
            print("No prior year P&L data available.")

    _emit(frames, display_mode, output_dir)


def _handle_trend(
    args: argparse.Namespace, config: AppConfig, display_mode: str, output_dir: Path
) -> None:
    result = _fetch_rows(args, config, _split_ids(args.entities))
    if not args.start_month and not args.end_month:
        args.end_month = latest_month(result.rows)
    months = determine_month_range_from_args(args, result.rows)

    view = build_trend(
        result.rows, months.start, months.end, entity_name=result.entity_name
    )
    print(f"{view.entity_name} - expenses {view.start_month} → {view.end_month}")

    _emit(
        [
            (
                "Expenses trend",
                "expenses_trend",
                trend_to_dataframe(view.data, decimals=config.decimals),
            )
        ],
        display_mode,
        output_dir,
    )


def _handle_preview(
    args: argparse.Namespace, config: AppConfig, display_mode: str, output_dir: Path
) -> None:
    result = _fetch_rows(args, config, [args.entity])
    preview = build_widget_preview(result.rows, args.widget)

    if not preview.available:
        print(f"No preview available for {args.widget}.")
        return

    print(f"Preview of {args.widget} - {preview.selected_month}")
    formula = WIDGET_FORMULAS[args.widget]
    print(f"Formula: {formula.formula}")
    if formula.variance:
        print(f"Variance: {formula.variance}")

    if preview.kpis is not None and args.widget in KPI_WIDGETS:
        card = render_kpi_card(args.widget, preview.kpis)
        print(f"{card.header_line1} {card.header_line2}: {card.value}")
        if card.variance:
            label = f" {card.variance_label}" if card.variance_label else ""
            print(f"  {card.variance}{label}")
        return

    if preview.pnl is not None:
        df = pnl_to_dataframe(preview.pnl, decimals=config.decimals)
    else:
        df = trend_to_dataframe(preview.trend or [], decimals=config.decimals)
    _emit([(args.widget, args.widget, df)], display_mode, output_dir)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the FinBoard CLI.

    This function parses command-line arguments, loads the configuration,
    configures logging, initializes the warehouse and dispatches to the
    selected command. Caller errors (invalid months, unknown entities,
    missing data) are reported through the argument parser and exit with
    status 2.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = load_app_config(args.config_path)
    setup_logging(args.log_level or config.log_level, config.log_file)

    init_database(config.database)

    display_mode = args.display_mode or config.display_mode
    output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")

    try:
        _validate_month_args(args)
        if args.command == "sync":
            _handle_sync(args, config, parser)
        elif args.command == "import":
            _handle_import(args, config, parser)
        elif args.command == "entities":
            _handle_entities(config)
        elif args.command == "dashboard":
            _handle_dashboard(args, config, display_mode, output_dir)
        elif args.command == "trend":
            _handle_trend(args, config, display_mode, output_dir)
        elif args.command == "preview":
            _handle_preview(args, config, display_mode, output_dir)
    except (InvalidPeriodError, UnknownEntityError, NoDataError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main(sys.argv[1:])
