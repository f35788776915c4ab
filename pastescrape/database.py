"""
Database schema and connection management.

Uses SQLAlchemy so the same models run against SQLite (default) or any
server database reachable through a DSN.
"""

from datetime import datetime, timezone
from pathlib import Path
from sqlalchemy import create_engine, Column, String, DateTime, BigInteger, LargeBinary, func
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the tables."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PasteRecord(Base):
    """Metadata for one paste seen in a listing."""

    __tablename__ = "paste_record"

    key = Column(String(50), primary_key=True)
    scrape_url = Column(String(255))
    full_url = Column(String(255))
    publish_time = Column(DateTime)
    size = Column(BigInteger)
    expire_time = Column(DateTime, nullable=True)  # NULL = never expires
    title = Column(String(255))
    syntax = Column(String(255))
    author = Column(String(255))
    ingestion_time = Column(DateTime, nullable=False, server_default=func.now())


class PasteContent(Base):
    """Raw content of a paste plus its SHA-256 digest."""

    __tablename__ = "paste_content"

    key = Column(String(50), primary_key=True)  # paste_record.key
    content = Column(LargeBinary)
    digest = Column(String(64), nullable=False)
    ingestion_time = Column(DateTime, nullable=False, server_default=func.now())


def create_db_engine(dsn: str) -> Engine:
    """
    Create an engine for the given DSN.

    For file-backed SQLite the parent directory is created first.

    Args:
        dsn: SQLAlchemy database URL, e.g. sqlite:///data/pastes.db

    Returns:
        SQLAlchemy engine
    """
    url = make_url(dsn)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url)


def init_database(engine: Engine) -> None:
    """Create both tables if they do not already exist."""
    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the engine; objects stay readable after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)
