# SPDX-License-Identifier: MIT
"""scoop-sync - client-side data synchronization for a Scoop front-end."""

from importlib.metadata import PackageNotFoundError, version

from .gateway import BackendGateway
from .state import SyncState
from .sync import SyncOrchestrator


__all__: list[str] = ["BackendGateway", "SyncOrchestrator", "SyncState", "__version__"]

# Get version from installed package metadata
__version__: str
try:
    __version__ = version("scoop-sync")
except PackageNotFoundError:
    # Package is not installed, use development fallback
    __version__ = "development"
