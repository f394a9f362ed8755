# SPDX-License-Identifier: MIT
"""Local snapshot cache for instant paint.

- SnapshotStore: last-known installed apps and buckets
- CacheBase: shared SQLite path and schema handling
"""

from .base import CacheBase
from .snapshot_store import SnapshotStore


__all__ = [
    "CacheBase",
    "SnapshotStore",
]
