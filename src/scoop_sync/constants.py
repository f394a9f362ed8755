# SPDX-License-Identifier: MIT
"""Constants used throughout the scoop-sync layer.

- **Snapshot keys**: fixed identifiers of the two persisted blobs
- **Backend defaults**: endpoint and transport timeout
- **Cache defaults**: database location and staleness threshold
"""

# Snapshot store keys, identical to the front-end's local storage keys
SNAPSHOT_KEY_APPS: str = "scoop_installed_apps"
SNAPSHOT_KEY_BUCKETS: str = "scoop_buckets_cache"

# Legacy app snapshot envelope: {"data": [...], "timestamp": ...}
LEGACY_ENVELOPE_FIELD: str = "data"

# Backend transport
DEFAULT_BACKEND_URL: str = "http://127.0.0.1:17860"
DEFAULT_BACKEND_TIMEOUT: int = 30  # seconds
INVOKE_PATH: str = "/invoke"

# Snapshot cache
DEFAULT_CACHE_DB_PATH: str = "~/.scoop-sync/snapshot.db"
DEFAULT_CACHE_MAX_AGE_HOURS: int = 24

# Discover page
DEFAULT_DISCOVER_COUNT: int = 12

# Environment variable prefix for configuration overrides
ENV_PREFIX: str = "SCOOP_SYNC_"
