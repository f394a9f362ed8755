# SPDX-License-Identifier: MIT
"""Best-effort snapshot of the last-known app and bucket lists."""

import json
import sqlite3
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..constants import LEGACY_ENVELOPE_FIELD, SNAPSHOT_KEY_APPS, SNAPSHOT_KEY_BUCKETS
from ..logging_config import get_detail_logger, get_status_logger
from ..models import InstalledApp, RepositorySource, Snapshot
from .base import CacheBase


detail_logger = get_detail_logger()
status_logger = get_status_logger()

_APPS_ADAPTER: TypeAdapter[list[InstalledApp]] = TypeAdapter(list[InstalledApp])
_BUCKETS_ADAPTER: TypeAdapter[list[RepositorySource]] = TypeAdapter(
    list[RepositorySource]
)


class SnapshotStore(CacheBase):
    """Durable cache of the app and bucket lists, used for instant paint.

    Reads never raise: a missing, corrupted or unreadable value is treated as
    "no cached data". Writes replace both keys in one transaction and failures
    are logged, never propagated.
    """

    def load(self) -> Snapshot:
        """Load the last written snapshot.

        Returns:
            The cached snapshot, with empty lists for any key that is absent or
            unreadable
        """
        try:
            rows = self._read_rows()
        except (sqlite3.Error, OSError) as e:
            detail_logger.warning(f"Snapshot store unavailable at {self.db_path}: {e}")
            return Snapshot()

        apps = self._decode_list(
            SNAPSHOT_KEY_APPS, rows.get(SNAPSHOT_KEY_APPS), _APPS_ADAPTER, legacy=True
        )
        buckets = self._decode_list(
            SNAPSHOT_KEY_BUCKETS, rows.get(SNAPSHOT_KEY_BUCKETS), _BUCKETS_ADAPTER
        )
        saved_at = self._latest_write_time(rows)

        detail_logger.debug(
            f"Loaded snapshot: {len(apps)} apps, {len(buckets)} buckets "
            f"(saved_at={saved_at})"
        )
        return Snapshot(apps=apps, buckets=buckets, saved_at=saved_at)

    def save(self, apps: list[InstalledApp], buckets: list[RepositorySource]) -> bool:
        """Overwrite both snapshot keys.

        Apps are always written as a bare list, never the legacy envelope.

        Args:
            apps: Installed apps to persist
            buckets: Buckets to persist

        Returns:
            True if the snapshot was written, False if persisting failed
        """
        saved_at = datetime.now().isoformat()
        rows = [
            (
                SNAPSHOT_KEY_APPS,
                _APPS_ADAPTER.dump_json(apps, by_alias=True).decode("utf-8"),
                saved_at,
            ),
            (
                SNAPSHOT_KEY_BUCKETS,
                _BUCKETS_ADAPTER.dump_json(buckets, by_alias=True).decode("utf-8"),
                saved_at,
            ),
        ]

        try:
            with self._connect() as conn:
                conn.executemany(
                    """
                    INSERT OR REPLACE INTO snapshot_cache (key, value, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    rows,
                )
        except (sqlite3.Error, OSError) as e:
            detail_logger.warning(f"Failed to save snapshot to {self.db_path}: {e}")
            status_logger.warning("Could not update the local cache")
            return False

        detail_logger.debug(
            f"Saved snapshot: {len(apps)} apps, {len(buckets)} buckets"
        )
        return True

    def clear(self) -> bool:
        """Remove both snapshot keys.

        Returns:
            True if the keys were removed, False if the store was unavailable
        """
        try:
            with self._connect() as conn:
                conn.execute(
                    "DELETE FROM snapshot_cache WHERE key IN (?, ?)",
                    (SNAPSHOT_KEY_APPS, SNAPSHOT_KEY_BUCKETS),
                )
        except (sqlite3.Error, OSError) as e:
            detail_logger.warning(f"Failed to clear snapshot at {self.db_path}: {e}")
            return False

        detail_logger.debug("Cleared snapshot")
        return True

    def _read_rows(self) -> dict[str, tuple[str, str | None]]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT key, value, updated_at FROM snapshot_cache WHERE key IN (?, ?)",
                (SNAPSHOT_KEY_APPS, SNAPSHOT_KEY_BUCKETS),
            )
            return {key: (value, updated_at) for key, value, updated_at in cursor}

    def _decode_list(
        self,
        key: str,
        row: tuple[str, str | None] | None,
        adapter: TypeAdapter[Any],
        legacy: bool = False,
    ) -> list[Any]:
        """Decode one stored list, degrading to [] on any problem."""
        if row is None:
            detail_logger.debug(f"Snapshot miss for key '{key}'")
            return []

        try:
            payload = json.loads(row[0])
        except json.JSONDecodeError as e:
            detail_logger.warning(f"Corrupted snapshot value for key '{key}': {e}")
            return []

        # Legacy shape: {"data": [...], "timestamp": ...}
        if legacy and isinstance(payload, dict):
            payload = payload.get(LEGACY_ENVELOPE_FIELD) or []

        try:
            result: list[Any] = adapter.validate_python(payload)
        except ValidationError as e:
            detail_logger.warning(
                f"Snapshot value for key '{key}' has unexpected shape: "
                f"{e.error_count()} validation error(s)"
            )
            return []

        return result

    def _latest_write_time(
        self, rows: dict[str, tuple[str, str | None]]
    ) -> datetime | None:
        times = []
        for _, updated_at in rows.values():
            if not updated_at:
                continue
            try:
                times.append(datetime.fromisoformat(updated_at))
            except ValueError:
                detail_logger.debug(f"Unparseable snapshot timestamp: {updated_at}")
        return max(times) if times else None
