"""
One harvest cycle: listing -> metadata ingest -> pending selection -> backfill.

A failed listing phase does not stop the backfill phase; records from earlier
cycles may still need content.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .backfill import BackfillSummary, backfill_contents, select_pending
from .config import ScrapeConfig
from .errors import DecodeError, RemoteHTTPError, StorageError
from .ingest import IngestSummary, ingest_listing
from .logger import get_logger
from .scrapers.listing import fetch_listing
from .storage import PasteStore


@dataclass
class CycleReport:
    ingest: Optional[IngestSummary] = None
    listing_error: Optional[str] = None
    pending: int = 0
    backfill: Optional[BackfillSummary] = None
    backfill_error: Optional[str] = None
    elapsed: float = 0.0


def run_listing_phase(store: PasteStore, session: requests.Session, config: ScrapeConfig, report: CycleReport) -> None:
    logger = get_logger()
    logger.info("Getting listing...", limit=config.paste_limit)
    try:
        entries = fetch_listing(session, config.paste_limit, config.base_url, timeout=config.request_timeout)
    except (RemoteHTTPError, DecodeError) as e:
        logger.record("listings_failed")
        logger.error("Listing phase aborted", error=str(e))
        report.listing_error = str(e)
        return

    logger.record("listings_fetched")
    logger.record("entries_seen", len(entries))
    report.ingest = ingest_listing(store, entries)


def run_backfill_phase(
    store: PasteStore,
    session: requests.Session,
    config: ScrapeConfig,
    report: CycleReport,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    logger = get_logger()
    logger.info("Getting contents and storing...")
    try:
        pending = select_pending(store)
    except StorageError as e:
        logger.record_error(type(e).__name__)
        logger.error("Query error while selecting pending pastes", error=str(e))
        report.backfill_error = str(e)
        return

    report.pending = len(pending)
    report.backfill = backfill_contents(
        store,
        session,
        sorted(pending),
        config.base_url,
        delay=config.request_delay,
        timeout=config.request_timeout,
        sleep=sleep,
    )


def run_cycle(
    store: PasteStore,
    session: requests.Session,
    config: ScrapeConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> CycleReport:
    """Run one full cycle and return what happened."""
    start = time.monotonic()
    report = CycleReport()
    run_listing_phase(store, session, config, report)
    run_backfill_phase(store, session, config, report, sleep=sleep)
    report.elapsed = time.monotonic() - start
    return report
