# SPDX-License-Identifier: MIT
"""Synchronization package: stale-while-revalidate orchestration."""

from .orchestrator import SyncOrchestrator


__all__ = [
    "SyncOrchestrator",
]
