"""
Persistence for paste metadata and content.

PasteStore is the single storage capability handed to every pipeline stage.
Records and contents are insert-only: nothing here updates or deletes rows.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional, Set, Tuple

from sqlalchemy import or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from .database import PasteRecord, PasteContent, create_db_engine, init_database, get_session_factory, utcnow
from .errors import StorageError, StorageConnectionError, StorageWriteError
from .schema import ListingEntry


class InsertStatus(enum.Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


@dataclass(frozen=True)
class InsertResult:
    """Outcome of insert_record_if_absent. reason is set only for FAILED."""

    status: InsertStatus
    reason: Optional[str] = None


class PasteStore:
    """
    Insert-if-absent metadata, insert-once content and the pending-key query.

    Each operation runs in its own short-lived session; connection reuse is
    left to the engine's pool.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = get_session_factory(engine)

    @classmethod
    def from_dsn(cls, dsn: str) -> "PasteStore":
        """
        Raises:
            StorageConnectionError: the DSN is invalid or its driver is missing
        """
        try:
            return cls(create_db_engine(dsn))
        except (SQLAlchemyError, ImportError, OSError) as e:
            raise StorageConnectionError(f"Cannot open data store: {e}") from e

    def ensure_schema(self) -> None:
        """
        Create paste_record and paste_content if missing.

        Raises:
            StorageConnectionError: the data store cannot be reached
        """
        try:
            init_database(self.engine)
        except SQLAlchemyError as e:
            raise StorageConnectionError(f"Cannot provision schema: {e}") from e

    def _exists(self, session, model, key: str) -> bool:
        return session.get(model, key) is not None

    def insert_record_if_absent(self, entry: ListingEntry) -> InsertResult:
        """
        Insert a PasteRecord unless one with the same key exists.

        Never raises for per-row failures; the result says what happened.
        """
        with self._session_factory() as session:
            try:
                if self._exists(session, PasteRecord, entry.key):
                    return InsertResult(InsertStatus.ALREADY_EXISTS)
                session.add(PasteRecord(
                    key=entry.key,
                    scrape_url=entry.scrape_url,
                    full_url=entry.full_url,
                    publish_time=entry.publish_time,
                    size=entry.size,
                    expire_time=entry.expire_time,
                    title=entry.title,
                    syntax=entry.syntax,
                    author=entry.author,
                ))
                session.commit()
                return InsertResult(InsertStatus.INSERTED)
            except IntegrityError as e:
                session.rollback()
                reason = str(e.orig or e)
                # Another writer may have inserted the key between check and commit
                try:
                    exists = self._exists(session, PasteRecord, entry.key)
                except SQLAlchemyError as check_error:
                    return InsertResult(InsertStatus.FAILED, f"{reason}; existence check failed: {check_error}")
                if exists:
                    return InsertResult(InsertStatus.ALREADY_EXISTS)
                return InsertResult(InsertStatus.FAILED, reason)
            except (SQLAlchemyError, OverflowError) as e:
                # OverflowError: the driver cannot bind an integer that wide
                session.rollback()
                return InsertResult(InsertStatus.FAILED, str(e))

    def insert_content(self, key: str, content: bytes, digest: str) -> None:
        """
        Insert the PasteContent row for key.

        Raises:
            StorageWriteError: the row could not be written (including an
                existing content row for the key)
        """
        with self._session_factory() as session:
            try:
                session.add(PasteContent(key=key, content=content, digest=digest))
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageWriteError(f"Cannot store content for {key}: {e}") from e

    def list_pending_keys(self, now: Optional[datetime] = None) -> Set[str]:
        """
        Keys with a PasteRecord, no PasteContent, and no expiry or an expiry
        not yet passed.

        Raises:
            StorageError: the query failed
        """
        if now is None:
            now = utcnow()
        with self._session_factory() as session:
            try:
                rows = (
                    session.query(PasteRecord.key)
                    .outerjoin(PasteContent, PasteContent.key == PasteRecord.key)
                    .filter(PasteContent.key.is_(None))
                    .filter(or_(PasteRecord.expire_time.is_(None), PasteRecord.expire_time >= now))
                    .all()
                )
            except OperationalError as e:
                raise StorageConnectionError(f"Pending-key query failed: {e}") from e
            except SQLAlchemyError as e:
                raise StorageError(f"Pending-key query failed: {e}") from e
        return {key for (key,) in rows}

    # Read helpers for status reporting and digest verification

    def count_records(self) -> int:
        with self._session_factory() as session:
            return session.query(PasteRecord).count()

    def count_contents(self) -> int:
        with self._session_factory() as session:
            return session.query(PasteContent).count()

    def get_content(self, key: str) -> Optional[PasteContent]:
        with self._session_factory() as session:
            return session.get(PasteContent, key)

    def iter_contents(self) -> Iterator[Tuple[str, bytes, str]]:
        """Yield (key, content, digest) for every stored content row."""
        with self._session_factory() as session:
            query = session.query(PasteContent.key, PasteContent.content, PasteContent.digest)
            for key, content, digest in query.yield_per(100):
                yield key, content or b"", digest
