"""
Content backfill.

select_pending recomputes the work set from storage every cycle; there is no
separate queue. backfill_contents fetches each pending key, stores the raw
body with its SHA-256 digest, and stops the whole batch at the first failed
HTTP request. Keys left unprocessed stay pending for the next cycle.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Set

import requests

from .errors import RemoteHTTPError, StorageWriteError
from .logger import get_logger
from .normalize import compute_digest
from .scrapers.content import fetch_paste_content
from .storage import PasteStore


@dataclass
class BackfillSummary:
    stored: int = 0
    write_failures: int = 0
    aborted: bool = False
    failed_key: Optional[str] = None


def select_pending(store: PasteStore, now: Optional[datetime] = None) -> Set[str]:
    """Keys indexed but not yet fetched, excluding expired pastes."""
    keys = store.list_pending_keys(now=now)
    get_logger().info(f"{len(keys)} pastes pending content")
    return keys


def backfill_contents(
    store: PasteStore,
    session: requests.Session,
    keys: Iterable[str],
    base_url: str,
    delay: float = 1.0,
    timeout: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BackfillSummary:
    """
    Fetch and store content for each key, in the order given.

    Args:
        store: Persistence capability
        session: HTTP session
        keys: Pending keys
        base_url: Remote service root
        delay: Seconds to pause between item requests
        timeout: HTTP timeout (None blocks)
        sleep: Pause function, replaceable in tests

    Returns:
        BackfillSummary; aborted is True when an HTTP failure ended the batch
    """
    logger = get_logger()
    summary = BackfillSummary()

    for index, key in enumerate(keys):
        if index > 0 and delay > 0:
            sleep(delay)

        try:
            content = fetch_paste_content(session, key, base_url, timeout=timeout)
        except RemoteHTTPError as e:
            summary.aborted = True
            summary.failed_key = key
            logger.record("batches_aborted")
            logger.error("Aborting content backfill for this cycle", key=key, status=e.status_code, error=str(e))
            break

        digest = compute_digest(content)
        try:
            store.insert_content(key, content, digest)
        except StorageWriteError as e:
            summary.write_failures += 1
            logger.record("content_write_failures")
            logger.record_error("StorageWriteError")
            logger.error("Error inserting content", key=key, error=str(e))
            continue

        summary.stored += 1
        logger.record("contents_stored")
        logger.debug("Stored content", key=key, size=len(content), digest=digest)

    logger.info(
        f"Backfill finished: {summary.stored} stored, {summary.write_failures} write failures"
        + (f", aborted at {summary.failed_key}" if summary.aborted else "")
    )
    return summary
