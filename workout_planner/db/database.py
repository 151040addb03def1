"""Database engine and session handling for workout storage."""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import config
from .models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves foreign keys off per connection unless asked
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_workout_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite gets a shared connection and foreign keys."""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo)

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # keeps "sqlite://" in-memory data alive across sessions
        echo=echo,
    )
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    """Workout database connection manager.

    Args:
        database_url: SQLAlchemy URL, defaults to ``DATABASE_URL``;
            ``sqlite://`` gives a private in-memory database
        echo: Log emitted SQL
    """

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        self.database_url = database_url or config.DATABASE_URL
        self.engine = create_workout_engine(self.database_url, echo)

        # Records stay readable after commit so repositories can convert them
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    def create_tables(self):
        """Create missing tables."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        Base.metadata.drop_all(bind=self.engine)

    def reset(self):
        """Drop and recreate every table, deleting all workouts and reference data."""
        logger.warning(f"Resetting workout database at {self.engine.url.render_as_string(hide_password=True)}")
        self.drop_tables()
        self.create_tables()

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Unit of work: commits on success, rolls back and re-raises on error."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        self.engine.dispose()


_db: Optional[Database] = None


def get_db() -> Database:
    """Get the shared database, creating its tables on first use."""
    global _db
    if _db is None:
        _db = Database()
        _db.create_tables()
        logger.debug(f"Opened workout database {_db.engine.url.render_as_string(hide_password=True)}")
    return _db


def close_db():
    global _db
    if _db is not None:
        _db.close()
        _db = None
