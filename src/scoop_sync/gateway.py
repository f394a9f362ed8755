# SPDX-License-Identifier: MIT
"""Typed call surface over the package-manager backend.

Every operation has a failure contract. Read/query operations swallow
failures and return a safe default; mutating operations log and re-raise.
Arguments pass through unvalidated, responses are checked against the
declared type before being handed back.
"""

import functools
from collections.abc import Callable
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .backend_exceptions import BackendError, BackendResponseError
from .constants import DEFAULT_DISCOVER_COUNT
from .enums import BackendOperation, FailureContract
from .logging_config import get_detail_logger
from .models import AppDetail, DiscoverApp, InstalledApp, RepositorySource, SearchHit
from .transport import BackendTransport


detail_logger = get_detail_logger()


OPERATION_CONTRACTS: dict[BackendOperation, FailureContract] = {
    BackendOperation.LIST_INSTALLED_APPS: FailureContract.SWALLOW,
    BackendOperation.SEARCH_REMOTE: FailureContract.SWALLOW,
    BackendOperation.SEARCH_LOCAL: FailureContract.SWALLOW,
    BackendOperation.GET_INSTALL_SIZES: FailureContract.SWALLOW,
    BackendOperation.LIST_REPOSITORIES: FailureContract.SWALLOW,
    BackendOperation.LIST_DEPENDENCIES: FailureContract.SWALLOW,
    BackendOperation.IS_APP_INSTALLED: FailureContract.SWALLOW,
    BackendOperation.DISCOVER_APPS: FailureContract.SWALLOW,
    BackendOperation.GET_APP_DETAIL: FailureContract.SWALLOW,
    BackendOperation.UPDATE_APP: FailureContract.PROPAGATE,
    BackendOperation.UPDATE_ALL_APPS: FailureContract.PROPAGATE,
    BackendOperation.UPDATE_MANAGER: FailureContract.PROPAGATE,
    BackendOperation.ADD_REPOSITORY: FailureContract.PROPAGATE,
    BackendOperation.REMOVE_REPOSITORY: FailureContract.PROPAGATE,
    BackendOperation.INSTALL_APP: FailureContract.PROPAGATE,
    BackendOperation.UNINSTALL_APP: FailureContract.PROPAGATE,
    BackendOperation.CHECK_UPDATES_ASYNC: FailureContract.PROPAGATE,
}


@functools.lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


class BackendGateway:
    """Typed proxy for the backend's named operations."""

    def __init__(self, transport: BackendTransport):
        self.transport = transport

    async def _call(
        self,
        operation: BackendOperation,
        response_type: Any,
        args: dict[str, Any] | None = None,
        default_factory: Callable[[], Any] | None = None,
        strict: bool = False,
    ) -> Any:
        """Invoke an operation and apply its failure contract.

        Args:
            operation: Backend operation to invoke
            response_type: Declared response type, checked structurally
            args: Backend arguments, passed through unvalidated
            default_factory: Produces the safe default for swallowing operations
            strict: Re-raise failures even for swallowing operations

        Returns:
            The validated response, or the safe default after a swallowed failure

        Raises:
            BackendError: For propagating operations, or when strict is set
        """
        contract = OPERATION_CONTRACTS[operation]
        command = operation.value

        try:
            raw = await self.transport.invoke(command, args)
            try:
                result = _adapter(response_type).validate_python(raw)
            except ValidationError as e:
                raise BackendResponseError(
                    f"Unexpected response shape from '{command}': "
                    f"{e.error_count()} validation error(s)",
                    operation=command,
                ) from e
        except BackendError as e:
            if e.operation is None:
                e.operation = command

            if contract is FailureContract.PROPAGATE or strict:
                detail_logger.error(f"Backend operation '{command}' failed: {e}")
                raise

            detail_logger.warning(
                f"Backend operation '{command}' failed, returning default: {e}"
            )
            return default_factory() if default_factory is not None else None

        detail_logger.debug(f"Backend operation '{command}' succeeded")
        return result

    # ----- Swallowing (read/query) operations -----

    async def list_installed_apps(self, *, strict: bool = False) -> list[InstalledApp]:
        """List installed apps. Returns [] on failure unless strict."""
        result: list[InstalledApp] = await self._call(
            BackendOperation.LIST_INSTALLED_APPS,
            list[InstalledApp],
            default_factory=list,
            strict=strict,
        )
        return result

    async def search_remote(self, query: str) -> list[SearchHit]:
        result: list[SearchHit] = await self._call(
            BackendOperation.SEARCH_REMOTE,
            list[SearchHit],
            {"query": query},
            default_factory=list,
        )
        return result

    async def search_local(self, query: str) -> list[SearchHit]:
        """Search manifests of locally added buckets."""
        result: list[SearchHit] = await self._call(
            BackendOperation.SEARCH_LOCAL,
            list[SearchHit],
            {"query": query},
            default_factory=list,
        )
        return result

    async def get_install_sizes(self, app_names: list[str]) -> dict[str, int]:
        result: dict[str, int] = await self._call(
            BackendOperation.GET_INSTALL_SIZES,
            dict[str, int],
            {"appNames": app_names},
            default_factory=dict,
        )
        return result

    async def list_repositories(
        self, *, strict: bool = False
    ) -> list[RepositorySource]:
        """List configured buckets. Returns [] on failure unless strict."""
        result: list[RepositorySource] = await self._call(
            BackendOperation.LIST_REPOSITORIES,
            list[RepositorySource],
            default_factory=list,
            strict=strict,
        )
        return result

    async def list_dependencies(
        self, app_name: str, bucket: str | None = None
    ) -> list[str]:
        result: list[str] = await self._call(
            BackendOperation.LIST_DEPENDENCIES,
            list[str],
            {"appName": app_name, "bucket": bucket},
            default_factory=list,
        )
        return result

    async def is_app_installed(self, app_name: str) -> bool:
        result: bool = await self._call(
            BackendOperation.IS_APP_INSTALLED,
            bool,
            {"appName": app_name},
            default_factory=lambda: False,
        )
        return result

    async def discover_apps(
        self, count: int = DEFAULT_DISCOVER_COUNT
    ) -> list[DiscoverApp]:
        result: list[DiscoverApp] = await self._call(
            BackendOperation.DISCOVER_APPS,
            list[DiscoverApp],
            {"count": count},
            default_factory=list,
        )
        return result

    async def get_app_detail(self, app_name: str, bucket: str) -> AppDetail | None:
        result: AppDetail | None = await self._call(
            BackendOperation.GET_APP_DETAIL,
            AppDetail,
            {"appName": app_name, "bucket": bucket},
        )
        return result

    # ----- Propagating (mutating) operations -----

    async def update_app(self, app_name: str) -> str:
        result: str = await self._call(
            BackendOperation.UPDATE_APP, str, {"appName": app_name}
        )
        return result

    async def update_all_apps(self) -> str:
        result: str = await self._call(BackendOperation.UPDATE_ALL_APPS, str)
        return result

    async def update_manager(self) -> str:
        """Update the package manager itself."""
        result: str = await self._call(BackendOperation.UPDATE_MANAGER, str)
        return result

    async def add_repository(self, name: str, url: str | None = None) -> str:
        result: str = await self._call(
            BackendOperation.ADD_REPOSITORY, str, {"name": name, "url": url}
        )
        return result

    async def remove_repository(self, name: str) -> str:
        result: str = await self._call(
            BackendOperation.REMOVE_REPOSITORY, str, {"name": name}
        )
        return result

    async def install_app(self, app_name: str) -> str:
        result: str = await self._call(
            BackendOperation.INSTALL_APP, str, {"appName": app_name}
        )
        return result

    async def uninstall_app(self, app_name: str) -> str:
        result: str = await self._call(
            BackendOperation.UNINSTALL_APP, str, {"appName": app_name}
        )
        return result

    async def check_updates_async(self) -> str:
        """Ask the backend to start its update scan.

        The backend answers immediately; the scan result arrives later as an
        UpdatesChecked payload.
        """
        result: str = await self._call(BackendOperation.CHECK_UPDATES_ASYNC, str)
        return result
