# SPDX-License-Identifier: MIT
"""SQLite connection helper for the snapshot cache.

`get_configured_connection()` should be used instead of direct
`sqlite3.connect()` calls so every connection is configured the same way
and closed when the block exits.
"""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..logging_config import get_detail_logger


detail_logger = get_detail_logger()


def configure_sqlite_connection(conn: sqlite3.Connection, enable_wal: bool = True) -> None:
    """Apply the standard PRAGMA settings to a connection.

    Args:
        conn: SQLite database connection to configure
        enable_wal: Whether to enable WAL mode (default: True)
    """
    if enable_wal:
        conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")


@contextmanager
def get_configured_connection(
    db_path: str | Path,
    timeout: float = 30.0,
    enable_wal: bool = True,
) -> Iterator[sqlite3.Connection]:
    """Open a configured connection for one transaction.

    The transaction is committed when the block exits normally and rolled
    back when it raises. The connection is always closed.

    Args:
        db_path: Path to the SQLite database file
        timeout: Lock timeout in seconds (default: 30.0)
        enable_wal: Whether to enable WAL mode (default: True)

    Yields:
        Configured SQLite connection
    """
    detail_logger.debug(f"Opening SQLite connection to {db_path}")
    conn = sqlite3.connect(str(db_path), timeout=timeout)

    try:
        configure_sqlite_connection(conn, enable_wal=enable_wal)
        with conn:
            yield conn
    finally:
        conn.close()
        detail_logger.debug(f"Closed SQLite connection to {db_path}")
