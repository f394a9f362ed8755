# SPDX-License-Identifier: MIT
"""Base utilities for cache components."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..logging_config import get_detail_logger
from .connection_utils import get_configured_connection
from .schema import init_database


detail_logger = get_detail_logger()


class CacheBase:
    """Base class for SQLite-backed cache components.

    The database file and schema are created lazily on first use so that an
    unavailable storage location surfaces at read/write time, where callers
    decide how to degrade.
    """

    def __init__(self, db_path: Path | None = None):
        """Initialize cache base with database path.

        Args:
            db_path: Path to the SQLite database file. If None, gets from config.
        """
        if db_path is None:
            # Local import to avoid circular dependency (config -> cache)
            from ..config import get_config_manager

            db_path = get_config_manager().load_config().cache.resolved_db_path()
            detail_logger.debug(f"Using database path from config: {db_path}")

        self.db_path = db_path
        self._schema_ready = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection for one transaction, creating the schema if needed.

        Raises:
            OSError: If the parent directory cannot be created
            sqlite3.Error: If the database cannot be opened or initialized
        """
        if not self._schema_ready:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            init_database(self.db_path)
            self._schema_ready = True
            detail_logger.debug(f"Database schema initialized: {self.db_path}")

        with get_configured_connection(self.db_path) as conn:
            yield conn
