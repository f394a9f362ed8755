# SPDX-License-Identifier: MIT
"""Core data models for the scoop-sync layer.

Field names are Pythonic; aliases match the backend's JSON so the same
models decode backend responses and the on-disk snapshot.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import SyncPhase


class _BackendRecord(BaseModel):
    """Immutable record received from the backend."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class InstalledApp(_BackendRecord):
    """An application installed through the package manager."""

    name: str = Field(..., description="Application name, unique in the list")
    version: str = Field("", description="Installed version")
    origin_repository: str = Field(
        "", alias="bucket", description="Bucket the app was installed from"
    )
    description: str = Field("", description="Manifest description")
    last_updated_at_ms: int = Field(
        0, alias="updated", description="Last update time (Unix ms)"
    )
    update_available: bool = Field(
        False, alias="has_update", description="Whether a newer version exists"
    )
    install_size_bytes: int = Field(
        0, ge=0, alias="install_size", description="Size on disk in bytes"
    )


class SearchHit(_BackendRecord):
    """A search result. Never cached."""

    name: str
    version: str = ""
    origin_repository: str = Field("", alias="bucket")
    description: str = ""


class RepositorySource(_BackendRecord):
    """A configured bucket."""

    name: str = Field(..., description="Bucket name, unique in the list")
    source_url: str = Field("", alias="source", description="Git remote or 'Local'")
    last_updated_at_ms: int = Field(0, alias="updated")


class DiscoverApp(_BackendRecord):
    """A randomly sampled manifest for the discover page."""

    name: str
    description: str = ""
    version: str = ""
    homepage: str = ""
    origin_repository: str = Field("", alias="bucket")
    icon: str = ""


class AppDetail(_BackendRecord):
    """Manifest details for a single app."""

    name: str
    version: str = ""
    description: str = ""
    homepage: str = ""
    license: str = ""
    origin_repository: str = Field("", alias="bucket")
    notes: list[str] = Field(default_factory=list)
    bin: list[str] = Field(default_factory=list)
    depends: list[str] | None = None
    suggest: Any | None = None


class UpdatesChecked(_BackendRecord):
    """Payload emitted by the backend when its update scan finishes."""

    updatable_apps: list[str] = Field(default_factory=list)


class Snapshot(BaseModel):
    """Last-known app and bucket lists read from the snapshot store."""

    apps: list[InstalledApp] = Field(default_factory=list)
    buckets: list[RepositorySource] = Field(default_factory=list)
    saved_at: datetime | None = Field(
        None, description="When the snapshot was last written"
    )

    @property
    def is_empty(self) -> bool:
        return not self.apps and not self.buckets

    def age_seconds(self, now: datetime | None = None) -> float | None:
        """Seconds since the snapshot was written, or None if unknown."""
        if self.saved_at is None:
            return None
        now = now or datetime.now()
        return max((now - self.saved_at).total_seconds(), 0.0)

    def is_stale(self, max_age_hours: int, now: datetime | None = None) -> bool:
        """Whether the snapshot is older than max_age_hours.

        A snapshot without a write time is considered stale.
        """
        age = self.age_seconds(now)
        return age is None or age > max_age_hours * 3600


class SyncResult(BaseModel):
    """Outcome of one synchronization cycle."""

    phase: SyncPhase
    app_count: int = 0
    bucket_count: int = 0
    error: str | None = None
    painted_from_cache: bool = False
