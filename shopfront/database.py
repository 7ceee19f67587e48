"""Persistence handle: engine, scoped sessions and the per-key lock registry.

One ``Database`` is built per application (see ``shopfront.main.create_app``)
and handed to whatever needs it; nothing here is a module-level singleton.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import Settings
from .logging_config import get_logger
from .models import Base

log = get_logger(__name__)


class Database:
    """Owns the SQLAlchemy engine, the session factory and stock locks."""

    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, connect_args=connect_args)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self._sessionmaker = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.echo_sql)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yields a session that is always closed, rolling back on error."""
        db = self._sessionmaker()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()

    def _get_lock(self, key: str) -> threading.Lock:
        with self._locks_guard:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    @contextmanager
    def locked(self, keys: Iterable[str]) -> Iterator[None]:
        """Holds the locks for ``keys``, always taken in sorted order."""
        locks: List[threading.Lock] = [self._get_lock(k) for k in sorted(set(keys))]
        acquired: List[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
