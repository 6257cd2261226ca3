"""
reconcile.py
------------
One reconciliation pass of upcoming launches against the community manifest.

Dates and payload names are read from the manifest, each upcoming launch
that allows auto updates is fuzzy matched against the payloads, and the
matched launch gets a new date, date precision, launchpad and flight number
(flight numbers follow manifest order). Launches and rows are walked
strictly in order; the first failure aborts the rest of the pass and
updates already sent stay applied.

    python -m manifest_sync.reconcile [--dry-run] [--strict]
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table

from manifest_sync.catalog import CatalogStore, partition_launches, ping_healthcheck
from manifest_sync.config import Settings
from manifest_sync.errors import ReconcileError
from manifest_sync.flight_numbers import FlightNumberLedger, assign, base_flight_number
from manifest_sync.launchpads import LaunchpadResolver
from manifest_sync.manifest_table import ManifestSource
from manifest_sync.matching import first_match, series_pattern
from manifest_sync.models import CatalogLaunch, ManifestRow, PassResult, ReconciledUpdate
from manifest_sync.precision import normalize_manifest_date, render_times

console = Console()
logger = logging.getLogger(__name__)

LOG_FILE = "upcoming.log"

LoadRows = Callable[[], List[ManifestRow]]


def setup_logging(log_dir: Path) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_dir / LOG_FILE),
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def build_update(
    row: ManifestRow,
    flight_number: int,
    resolver: LaunchpadResolver,
) -> ReconciledUpdate:
    date = normalize_manifest_date(row.raw_date)
    site = resolver.resolve(row.launchpad)
    date_unix, date_utc, date_local = render_times(date.instant, site.timezone)
    return ReconciledUpdate(
        flight_number=flight_number,
        date_unix=date_unix,
        date_utc=date_utc,
        date_local=date_local,
        date_precision=date.kind,
        launchpad=site.id,
        tbd=date.tbd,
        net=date.net,
    )


def reconcile(
    store,
    load_rows: LoadRows,
    settings: Settings,
    dispatched: Optional[List[Tuple[CatalogLaunch, ReconciledUpdate]]] = None,
) -> List[Tuple[CatalogLaunch, ReconciledUpdate]]:
    """Run the pass and return what was dispatched; raises the first ReconcileError.

    Updates are appended to `dispatched` as they are sent, so a caller that
    passes its own list still sees them after an abort.
    """
    dispatched = [] if dispatched is None else dispatched
    completed, upcoming = partition_launches(store.list_launches())

    rows = list(load_rows())[: settings.manifest_window]
    if not rows:
        logger.warning("Manifest has no rows; nothing to reconcile")
        return dispatched

    base = base_flight_number(completed[-1] if completed else None, rows[0].payload)
    logger.info("Base flight number %d (%d manifest rows, %d upcoming)", base, len(rows), len(upcoming))

    pattern = series_pattern(settings.strict_series)
    resolver = LaunchpadResolver(store)
    ledger = FlightNumberLedger(strict=settings.fail_on_duplicate_flight)

    for launch in upcoming:
        # paused launches keep their manual dates
        if not launch.auto_update:
            continue
        row = first_match(launch.name, rows, pattern)
        if row is None:
            logger.debug("No manifest row for %s", launch.name)
            continue

        flight_number = assign(base, row.index)
        ledger.claim(flight_number, launch)
        update = build_update(row, flight_number, resolver)

        logger.info("%s %s", launch.name, update.model_dump())
        if not settings.dry_run:
            store.patch_launch(launch.id, update.model_dump())
        dispatched.append((launch, update))

    return dispatched


def run_pass(
    store,
    load_rows: LoadRows,
    settings: Settings,
    ping: Callable[[Optional[str]], bool] = ping_healthcheck,
) -> PassResult:
    """reconcile() with the abort logged instead of raised.

    The caller (cron, the API) always sees a completed call; the returned
    PassResult tells whether the pass finished and what it sent before
    stopping.
    """
    updates: List[Tuple[CatalogLaunch, ReconciledUpdate]] = []
    try:
        reconcile(store, load_rows, settings, updates)
    except ReconcileError as e:
        logger.error("Upcoming launch pass aborted: %s (raw=%r)", e, e.raw)
        return PassResult(status="failed", updates=updates, error=e, raw=e.raw)
    except Exception as e:
        logger.exception("Upcoming launch pass crashed: %s", e)
        return PassResult(status="failed", updates=updates, error=e)

    if not settings.dry_run:
        ping(settings.healthcheck_url)
    return PassResult(status="success", updates=updates)


def print_summary(result: PassResult) -> None:
    table = Table(title="Upcoming launch updates")
    for col in ("flight", "launch", "date_utc", "precision", "launchpad", "tbd", "net"):
        table.add_column(col)
    for launch, update in result.updates:
        table.add_row(
            str(update.flight_number),
            launch.name,
            update.date_utc,
            update.date_precision,
            update.launchpad,
            str(update.tbd),
            str(update.net),
        )
    console.print(table)
    if result.ok:
        console.print(f"[green]Pass complete:[/green] {len(result.updates)} launches updated")
    else:
        console.print(f"[red]Pass aborted:[/red] {result.error} (raw={result.raw!r})")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reconcile upcoming launches with the community manifest.")
    parser.add_argument("--dry-run", action="store_true", help="log updates without sending them")
    parser.add_argument("--strict", action="store_true", help="exit 1 when the pass aborts")
    args = parser.parse_args(argv)

    settings = Settings.from_env(dry_run=args.dry_run)
    setup_logging(settings.log_dir)

    store = CatalogStore.from_settings(settings)
    manifest = ManifestSource(
        settings.manifest_url,
        window=settings.manifest_window,
        timeout=settings.http_timeout,
        snapshot_dir=settings.snapshot_dir,
    )
    result = run_pass(store, manifest.rows, settings)
    print_summary(result)
    return 1 if (args.strict and not result.ok) else 0


if __name__ == "__main__":
    raise SystemExit(main())
