"""
core/db.py -- Engine construction shared by UserStore and TourStore.

Both stores point at the same DATABASE_URL and own separate engines. For
SQLite the engine allows cross-thread use (FastAPI runs sync handlers in a
thread pool) and switches every new connection to WAL journaling.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine

from core.config import get_settings


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def open_engine(metadata: MetaData, db_url: Optional[str] = None) -> Engine:
    """Create an engine for db_url (default: Settings.database_url) and its tables."""
    db_url = db_url or get_settings().database_url
    is_sqlite = db_url.startswith("sqlite")
    engine = create_engine(db_url, connect_args={"check_same_thread": False} if is_sqlite else {})
    if is_sqlite:
        event.listen(engine, "connect", _set_wal_mode)
    metadata.create_all(engine)
    return engine


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string, the format of every created_at column."""
    return datetime.now(timezone.utc).isoformat()
