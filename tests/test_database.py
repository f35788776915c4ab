"""
Tests for database.py - engine creation and schema.
"""

from sqlalchemy import inspect

from pastescrape.database import (
    PasteRecord,
    PasteContent,
    create_db_engine,
    init_database,
    get_session_factory,
)


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """Test that init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(create_db_engine(f"sqlite:///{db_path}"))

        assert db_path.exists()

    def test_init_creates_both_tables(self, tmp_path):
        """Test that init_database creates paste_record and paste_content."""
        engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
        init_database(engine)

        tables = set(inspect(engine).get_table_names())
        assert {"paste_record", "paste_content"} <= tables

    def test_init_is_idempotent(self, tmp_path):
        """Running init twice should not fail or drop data."""
        engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
        init_database(engine)
        with get_session_factory(engine)() as session:
            session.add(PasteRecord(key="k1"))
            session.commit()

        init_database(engine)

        with get_session_factory(engine)() as session:
            assert session.query(PasteRecord).count() == 1

    def test_init_creates_parent_directories(self, tmp_path):
        """Test that create_db_engine creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"
        assert not db_path.parent.exists()

        init_database(create_db_engine(f"sqlite:///{db_path}"))

        assert db_path.exists()

    def test_in_memory_database(self):
        """In-memory SQLite needs no directory."""
        engine = create_db_engine("sqlite://")
        init_database(engine)
        assert "paste_record" in inspect(engine).get_table_names()


class TestTimestamps:
    """Test server-assigned ingestion times."""

    def test_ingestion_time_set_on_insert(self, tmp_path):
        """ingestion_time is filled by the database when not given."""
        engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
        init_database(engine)
        Session = get_session_factory(engine)

        with Session() as session:
            session.add(PasteRecord(key="k1"))
            session.add(PasteContent(key="k1", content=b"x", digest="d"))
            session.commit()

        with Session() as session:
            assert session.get(PasteRecord, "k1").ingestion_time is not None
            assert session.get(PasteContent, "k1").ingestion_time is not None

    def test_expire_time_nullable(self, tmp_path):
        """A record without expiry stores NULL."""
        engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
        init_database(engine)
        Session = get_session_factory(engine)

        with Session() as session:
            session.add(PasteRecord(key="k1", expire_time=None))
            session.commit()

        with Session() as session:
            assert session.get(PasteRecord, "k1").expire_time is None
