# SPDX-License-Identifier: MIT
"""Stale-while-revalidate synchronization of installed apps and buckets."""

import asyncio
from collections.abc import Iterable

from ..backend_exceptions import BackendError
from ..cache import SnapshotStore
from ..config import AppConfig, get_config_manager
from ..enums import SyncPhase
from ..gateway import BackendGateway
from ..logging_config import get_detail_logger, get_status_logger
from ..models import InstalledApp, RepositorySource, SyncResult, UpdatesChecked
from ..state import SyncState
from ..transport import BackendTransport, HttpTransport


class SyncOrchestrator:
    """Drives one synchronization cycle at a time over an owned SyncState.

    A cycle paints the cached snapshot, fetches apps and buckets concurrently,
    and on success republishes and persists them. A background update check is
    fired after every cycle and never awaited.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        store: SnapshotStore,
        state: SyncState | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.state = state or SyncState()
        self._config = config
        self._inflight: asyncio.Task[SyncResult] | None = None
        self._background_tasks: set[asyncio.Task[None]] = set()
        self._scan_awaiting_result = False
        self.detail_logger = get_detail_logger()
        self.status_logger = get_status_logger()

    @classmethod
    def from_config(
        cls,
        config: AppConfig | None = None,
        transport: BackendTransport | None = None,
    ) -> "SyncOrchestrator":
        """Build an orchestrator wired to the configured backend and cache."""
        config = config or get_config_manager().load_config()
        if transport is None:
            transport = HttpTransport(
                config.backend.url, config.backend.timeout_seconds
            )
        return cls(
            BackendGateway(transport),
            SnapshotStore(config.cache.resolved_db_path()),
            config=config,
        )

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = get_config_manager().load_config()
        return self._config

    @property
    def sync_in_progress(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def background_tasks(self) -> frozenset[asyncio.Task[None]]:
        """Background update checks that have not finished yet."""
        return frozenset(self._background_tasks)

    async def initialize(self) -> SyncResult:
        """Run a synchronization cycle.

        Single-flight: a call made while a cycle is in flight joins that cycle
        and receives its result instead of starting another fetch.

        Returns:
            Outcome of the cycle
        """
        inflight = self._inflight
        if inflight is None or inflight.done():
            inflight = asyncio.create_task(self._run_cycle())
            self._inflight = inflight
        else:
            self.detail_logger.info("Sync already in progress, joining it")

        # Shielded so a cancelled caller does not abort the cycle for the others
        return await asyncio.shield(inflight)

    async def _run_cycle(self) -> SyncResult:
        config = self.config
        self.detail_logger.info("Starting synchronization cycle")

        self.state.loading.set(True)
        self.state.last_error.set(None)
        self.state.phase.set(SyncPhase.LOADING)

        try:
            painted = self._paint_from_cache() if config.cache.enabled else False

            try:
                apps, buckets = await self._fetch_authoritative(
                    config.sync.strict_fetch
                )
            except Exception as e:
                if not isinstance(e, BackendError):
                    self.detail_logger.exception(f"Unexpected sync failure: {e}")
                error = str(e) or type(e).__name__
                self.detail_logger.error(f"Authoritative fetch failed: {error}")
                self.status_logger.error(f"Failed to refresh data: {error}")
                self.state.last_error.set(error)
                self.state.phase.set(SyncPhase.ERRORED)
                return SyncResult(
                    phase=SyncPhase.ERRORED,
                    app_count=len(self.state.apps.value),
                    bucket_count=len(self.state.buckets.value),
                    error=error,
                    painted_from_cache=painted,
                )

            self.state.publish_lists(apps, buckets)
            self.store.save(apps, buckets)
            self.state.phase.set(SyncPhase.READY)
            self.status_logger.info(
                f"Loaded {len(apps)} apps and {len(buckets)} buckets"
            )
            return SyncResult(
                phase=SyncPhase.READY,
                app_count=len(apps),
                bucket_count=len(buckets),
                painted_from_cache=painted,
            )
        finally:
            self.state.loading.set(False)
            if config.sync.background_update_check:
                self._spawn_background_check()

    def _paint_from_cache(self) -> bool:
        """Publish the cached snapshot before any backend round trip."""
        snapshot = self.store.load()
        if snapshot.is_empty:
            self.detail_logger.debug("No cached snapshot to paint")
            return False

        self.state.publish_lists(snapshot.apps, snapshot.buckets)

        max_age = self.config.cache.max_age_hours
        if snapshot.is_stale(max_age):
            self.detail_logger.info(
                f"Painted stale snapshot (age={snapshot.age_seconds()}s, "
                f"max_age_hours={max_age})"
            )
        else:
            self.detail_logger.debug(
                f"Painted snapshot: {len(snapshot.apps)} apps, "
                f"{len(snapshot.buckets)} buckets"
            )
        return True

    async def _fetch_authoritative(
        self, strict: bool
    ) -> tuple[list[InstalledApp], list[RepositorySource]]:
        """Fetch apps and buckets concurrently; both settle before returning.

        Raises:
            BackendError: If either fetch failed. The other result is discarded.
        """
        apps_result, buckets_result = await asyncio.gather(
            self.gateway.list_installed_apps(strict=strict),
            self.gateway.list_repositories(strict=strict),
            return_exceptions=True,
        )

        if isinstance(apps_result, BaseException):
            raise apps_result
        if isinstance(buckets_result, BaseException):
            raise buckets_result

        return apps_result, buckets_result

    def _spawn_background_check(self) -> None:
        """Fire the update check without awaiting it.

        The task outlives the cycle that spawned it and is only cancelled by
        shutdown().
        """
        task = asyncio.create_task(self._run_background_check())
        self._background_tasks.add(task)
        self.state.background_check_pending.set(True)
        task.add_done_callback(self._on_background_check_done)

    async def _run_background_check(self) -> None:
        try:
            message = await self.gateway.check_updates_async()
        except BackendError as e:
            self.detail_logger.warning(f"Background update check failed: {e}")
            return

        # The backend has started its scan; the result arrives separately
        self._scan_awaiting_result = True
        self.detail_logger.info(f"Background update check started: {message}")

    def _on_background_check_done(self, task: asyncio.Task[None]) -> None:
        self._background_tasks.discard(task)

        if task.cancelled():
            self.detail_logger.debug("Background update check cancelled")
        elif task.exception() is not None:
            self.detail_logger.warning(
                f"Background update check failed: {task.exception()}"
            )

        self._refresh_background_pending()

    def _refresh_background_pending(self) -> None:
        """Pending while any check is in flight or a started scan is unanswered."""
        self.state.background_check_pending.set(
            bool(self._background_tasks) or self._scan_awaiting_result
        )

    def apply_updates_checked(
        self, updatable_apps: UpdatesChecked | Iterable[str]
    ) -> list[InstalledApp]:
        """Apply the backend's update scan result to the current app list.

        Apps named in the result are flagged as updatable, all others are
        cleared. The updated list is republished and persisted.

        Returns:
            The republished app list
        """
        if isinstance(updatable_apps, UpdatesChecked):
            names = set(updatable_apps.updatable_apps)
        else:
            names = set(updatable_apps)

        apps = [
            app.model_copy(update={"update_available": app.name in names})
            for app in self.state.apps.value
        ]
        self.state.apps.set(apps)
        self._scan_awaiting_result = False
        self._refresh_background_pending()
        self.store.save(apps, self.state.buckets.value)

        flagged = sum(1 for app in apps if app.update_available)
        self.detail_logger.info(f"Update scan applied: {flagged} app(s) updatable")
        return apps

    async def shutdown(self) -> None:
        """Cancel background checks still pending at application shutdown."""
        pending = list(self._background_tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            self.detail_logger.debug(f"Cancelled {len(pending)} background task(s)")
