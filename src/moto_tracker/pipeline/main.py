"""CLI entry point for the motorcycle price pipeline.

Usage:
    # Scrape every enabled source, export motorcycles-YYYY-MM-DD.json:
    python -m src.moto_tracker.pipeline.main

    # Re-run a single source (including disabled ones such as bmw-api):
    python -m src.moto_tracker.pipeline.main --source honda

    # Scrape concurrently and reconcile into the configured store:
    python -m src.moto_tracker.pipeline.main --parallel --upload

    # Upload a previous export without scraping:
    python -m src.moto_tracker.pipeline.main \
        --input data/exports/motorcycles-2024-06-01.json --upload --store supabase
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from src.common.logging import setup_logging
from src.common.models import CanonicalRecord

from ..common.config import Config
from ..database import create_store
from ..errors import ParseError
from ..extractors import all_sources, build_extractor, get_source
from ..reconciler import Reconciler, ReconcileSummary
from .exporter import export_records, export_stats, load_records
from .models import PipelineRun
from .orchestrator import ExtractionOrchestrator

logger = logging.getLogger(__name__)

_RULE = "=" * 60


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Motorcycle price scraper and reconciler")
    parser.add_argument("--source", help="Run a single named source")
    parser.add_argument(
        "--parallel",
        action="store_true",
        help="Run sources concurrently (default: scraper.parallel in settings.yaml)",
    )
    parser.add_argument("--output-dir", help="Export directory (default: EXPORT_DIR)")
    parser.add_argument(
        "--no-export", action="store_true", help="Skip writing the JSON export"
    )
    parser.add_argument(
        "--input", help="Load records from an export file instead of scraping"
    )
    parser.add_argument(
        "--upload", action="store_true", help="Reconcile records into the store"
    )
    parser.add_argument(
        "--store", choices=["sqlite", "supabase"], help="Override STORE_BACKEND"
    )
    parser.add_argument(
        "--list-sources", action="store_true", help="List known sources and exit"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _list_sources() -> None:
    for source in all_sources():
        state = "enabled" if source.enabled else "disabled"
        print(f"{source.name:<10} {source.brand:<10} {source.kind:<14} {state:<9} {source.url}")


def _scrape(args: argparse.Namespace, config: Config) -> PipelineRun:
    """Run the orchestrator for all enabled sources or one named source."""
    if args.source:
        source = get_source(args.source)
        orchestrator = ExtractionOrchestrator(
            [build_extractor(source, config=config)],
            delay_seconds=config.source_delay_seconds,
        )
        return asyncio.run(orchestrator.run_one(source.name))

    orchestrator = ExtractionOrchestrator.from_config(config)
    return asyncio.run(orchestrator.run_all(parallel=args.parallel or config.parallel))


def _print_run_summary(run: PipelineRun) -> None:
    print(_RULE)
    print("EXTRACTION SUMMARY")
    print(_RULE)
    for line in ExtractionOrchestrator.summary_lines(run):
        print(f"  {line}")
    live = sum(1 for s in run.stats.sources if not s.is_fallback and not s.error)
    print(f"Total records: {run.stats.total_records}")
    print(f"Duration: {run.stats.duration_seconds:.2f}s")
    print(f"Live sources: {live}/{len(run.stats.sources)}")
    for error in run.stats.errors:
        print(f"  ! {error}")
    print(_RULE)


def _print_upload_summary(summary: ReconcileSummary) -> None:
    print(_RULE)
    print("UPLOAD SUMMARY")
    print(_RULE)
    print(f"New motorcycles: {summary.inserted}")
    print(f"Updated motorcycles: {summary.updated}")
    print(f"Unchanged: {summary.unchanged}")
    for record in summary.changed_records:
        print(f"  ~ {record.brand} {record.name}")
    print(f"Price changes: {len(summary.price_changes)}")
    for entry in summary.price_changes:
        print(
            f"  {entry.brand} {entry.name}: {entry.old_price:,} -> {entry.new_price:,} "
            f"({entry.percentage_change:+.2f}%)"
        )
    if summary.skipped_sources:
        print(f"Skipped fallback sources: {', '.join(summary.skipped_sources)}")
    if summary.failures:
        print(f"Failed: {len(summary.failures)}")
        for failure in summary.failures:
            print(f"  ! {failure}")
    print(_RULE)


def _upload(
    config: Config,
    records: list[CanonicalRecord] | None = None,
    run: PipelineRun | None = None,
) -> int:
    """Reconcile into the configured store.

    A scraped run goes through its outcomes so fallback data stays out of
    the store; records loaded from an export are applied as given.
    """
    try:
        store = create_store(config)
    except ValueError as e:
        logger.error("Store not available: %s", e)
        return 1

    try:
        reconciler = Reconciler(store)
        if run is not None:
            summary = reconciler.reconcile_outcomes(run.outcomes)
        else:
            summary = reconciler.reconcile(records or [])
    except ValueError as e:
        # Raised lazily by the Supabase client when credentials are missing.
        logger.error("Store not available: %s", e)
        return 1
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()

    _print_upload_summary(summary)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.list_sources:
        _list_sources()
        return 0

    config = Config()
    if args.store:
        config.store_backend = args.store

    run: PipelineRun | None = None
    if args.input:
        try:
            records = load_records(args.input, min_price=config.min_plausible_price)
        except (OSError, ParseError) as e:
            logger.error("Cannot load %s: %s", args.input, e)
            return 1
    else:
        try:
            run = _scrape(args, config)
        except KeyError as e:
            logger.error("%s. Available sources: %s", e.args[0], ", ".join(s.name for s in all_sources()))
            return 1
        _print_run_summary(run)
        records = run.records

        if not args.no_export and records:
            output_dir = args.output_dir or config.export_abs_dir
            path = export_records(records, output_dir)
            export_stats(run.stats, output_dir)
            print(f"Saved {len(records)} motorcycles to {path}")

    if not records:
        logger.error("No motorcycles scraped from any source, aborting")
        return 1

    if args.upload:
        return _upload(config, records=records, run=run)
    return 0


if __name__ == "__main__":
    sys.exit(main())
