# SPDX-License-Identifier: MIT
"""Database schema initialization for the snapshot cache."""

from pathlib import Path

from .connection_utils import get_configured_connection


def init_database(db_path: Path) -> None:
    """Create the snapshot table if it does not exist.

    Args:
        db_path: Path to the SQLite database file
    """
    with get_configured_connection(db_path) as conn:
        conn.executescript(
            """
            -- One row per snapshot key; value is a JSON document
            CREATE TABLE IF NOT EXISTS snapshot_cache (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
