#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Basic synchronization example using the scoop-sync Python API.

This script demonstrates:
1. Subscribing to the observable sync state
2. Running one stale-while-revalidate cycle
3. Applying an update scan result
"""

import asyncio

from scoop_sync import SyncOrchestrator
from scoop_sync.enums import SyncPhase
from scoop_sync.models import UpdatesChecked


async def main():
    """Run one synchronization cycle against the configured backend."""
    print("=== Synchronizing ===")

    orchestrator = SyncOrchestrator.from_config()
    state = orchestrator.state

    # Print every change to the loading flag and the app list
    state.loading.subscribe(lambda loading: print(f"Loading: {loading}"))
    state.apps.subscribe(lambda apps: print(f"Apps shown: {len(apps)}"))

    try:
        result = await orchestrator.initialize()

        if result.phase is SyncPhase.ERRORED:
            print(f"Refresh failed, showing cached data: {result.error}")
        else:
            print(f"Loaded {result.app_count} apps and {result.bucket_count} buckets")

        # In an application this payload arrives later, from the backend's
        # updates-checked event once its scan finishes. A fixed result
        # stands in for it here.
        scan_result = UpdatesChecked(updatable_apps=["git"])
        apps = orchestrator.apply_updates_checked(scan_result)
        print(f"Updatable: {[app.name for app in apps if app.update_available]}")
    finally:
        await orchestrator.shutdown()
        await orchestrator.gateway.transport.close()


if __name__ == "__main__":
    asyncio.run(main())
