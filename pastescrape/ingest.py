"""
Metadata ingestion: write every listing entry as a PasteRecord.

Best-effort over the whole batch. A failed row is logged and the next entry
is processed; an existing key is a no-op, not an error.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

from .logger import get_logger
from .schema import ListingEntry
from .storage import InsertStatus, PasteStore


@dataclass
class IngestSummary:
    inserted: int = 0
    duplicates: int = 0
    failed: List[str] = field(default_factory=list)


def ingest_listing(store: PasteStore, entries: Iterable[ListingEntry]) -> IngestSummary:
    """
    Insert each entry if its key is not yet known.

    Args:
        store: Persistence capability
        entries: Decoded listing entries

    Returns:
        IngestSummary with counts and the keys that failed
    """
    logger = get_logger()
    summary = IngestSummary()

    for entry in entries:
        result = store.insert_record_if_absent(entry)
        if result.status is InsertStatus.INSERTED:
            summary.inserted += 1
            logger.record("records_inserted")
        elif result.status is InsertStatus.ALREADY_EXISTS:
            summary.duplicates += 1
            logger.record("records_duplicate")
        else:
            summary.failed.append(entry.key)
            logger.record("records_failed")
            logger.record_error("StorageWriteError")
            logger.error("Error inserting paste record", key=entry.key, reason=result.reason)

    logger.info(
        f"Ingested listing: {summary.inserted} new, {summary.duplicates} duplicate, {len(summary.failed)} failed"
    )
    return summary
