"""Local SQLite storage for host records."""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DB_FILENAME = "somana.db"

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS hosts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        hostname TEXT,
        ip_address TEXT,
        os_name TEXT,
        os_version TEXT,
        status TEXT,
        created_at DATETIME,
        updated_at DATETIME,
        deleted_at DATETIME
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_hosts_deleted_at ON hosts(deleted_at)",
)

_db: sqlite3.Connection | None = None


def init_database(data_dir: str | os.PathLike[str] = "data") -> sqlite3.Connection:
    """Open the database under ``data_dir``, create the schema and make it current."""
    global _db
    directory = Path(data_dir)
    directory.mkdir(parents=True, exist_ok=True)
    db_path = directory / DB_FILENAME

    connection = sqlite3.connect(db_path, check_same_thread=False)
    try:
        with connection:
            for statement in _SCHEMA:
                connection.execute(statement)
    except sqlite3.Error:
        connection.close()
        raise

    _db = connection
    logger.info("Database initialized successfully at %s", db_path)
    return connection


def get_db() -> sqlite3.Connection | None:
    """Return the connection opened by the last successful ``init_database``."""
    return _db