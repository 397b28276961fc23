"""
SQL-backed cache store using SQLAlchemy.

Keeps rendered listings in a `cache_entries` table with an expiry time,
so several server workers (or a CLI and a server) can share one cache.
Supports both SQLite and PostgreSQL backends.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator, Optional

from sqlalchemy import (
    create_engine,
    Column,
    String,
    Text,
    DateTime,
)
from sqlalchemy.orm import (
    declarative_base,
    sessionmaker,
    Session,
)

from .logging_conf import get_logger

logger = get_logger(__name__)
Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CacheEntry(Base):
    """
    A rendered listing fragment with its expiry time.
    """
    __tablename__ = "cache_entries"

    key = Column(String(191), primary_key=True)
    value = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def is_expired(self, now: datetime) -> bool:
        return _as_utc(self.expires_at) <= now


class SQLStore:
    """Cache store persisted in a SQL database."""

    blocking = True

    def __init__(
        self,
        url: str,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize database connection and create the table if needed.

        Args:
            url: SQLAlchemy database URL
            clock: Returns the current UTC time (overridable for tests)
        """
        self.url = url
        self._clock = clock

        connect_args = {}
        if "sqlite" in self.url:
            connect_args["check_same_thread"] = False

        self.engine = create_engine(
            self.url,
            connect_args=connect_args,
            echo=False,
        )

        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
        )

        Base.metadata.create_all(self.engine)
        logger.info("cache_database_initialized", url=self.url.split("@")[-1][:50])

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Context manager for database sessions."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get(self, key: str) -> Optional[str]:
        """Get a cached value, or None if missing or expired."""
        with self.session() as session:
            entry = session.get(CacheEntry, key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                session.delete(entry)
                return None
            return entry.value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value, replacing any existing entry for the key."""
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        with self.session() as session:
            session.merge(CacheEntry(key=key, value=value, expires_at=expires_at))

    def delete(self, key: str) -> None:
        with self.session() as session:
            session.query(CacheEntry).filter(CacheEntry.key == key).delete()

    def clear(self) -> int:
        """Delete every entry. Returns the number removed."""
        with self.session() as session:
            removed = session.query(CacheEntry).delete()
        logger.info("cache_cleared", removed=removed)
        return removed

    def purge_expired(self) -> int:
        """Delete entries whose expiry has passed. Returns the number removed."""
        with self.session() as session:
            removed = session.query(CacheEntry).filter(
                CacheEntry.expires_at <= self._clock()
            ).delete()
        if removed:
            logger.debug("cache_purged", removed=removed)
        return removed
