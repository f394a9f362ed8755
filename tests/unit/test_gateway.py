# SPDX-License-Identifier: MIT
"""Tests for the backend call gateway."""

import pytest

from scoop_sync.backend_exceptions import (
    BackendCallError,
    BackendConnectionError,
    BackendResponseError,
)
from scoop_sync.enums import BackendOperation, FailureContract
from scoop_sync.gateway import OPERATION_CONTRACTS, BackendGateway
from scoop_sync.models import AppDetail, InstalledApp, RepositorySource, SearchHit


# (method, call args, backend command, safe default)
READ_OPERATIONS = [
    ("list_installed_apps", (), "get_installed_apps", []),
    ("search_remote", ("git",), "search_apps", []),
    ("search_local", ("git",), "search_local_packets", []),
    ("get_install_sizes", (["git"],), "get_app_sizes", {}),
    ("list_repositories", (), "get_buckets", []),
    ("list_dependencies", ("git", None), "check_dependencies", []),
    ("is_app_installed", ("git",), "is_app_installed", False),
    ("discover_apps", (5,), "get_random_apps", []),
    ("get_app_detail", ("git", "main"), "get_app_detail", None),
]

# (method, call args, backend command)
MUTATING_OPERATIONS = [
    ("update_app", ("git",), "update_app"),
    ("update_all_apps", (), "update_all_apps"),
    ("update_manager", (), "update_scoop"),
    ("add_repository", ("extras", None), "add_bucket"),
    ("remove_repository", ("extras",), "remove_bucket"),
    ("install_app", ("git",), "install_app"),
    ("uninstall_app", ("git",), "uninstall_app"),
    ("check_updates_async", (), "check_updates_async"),
]


class TestOperationContracts:
    """Tests for the operation table."""

    def test_every_operation_has_a_contract(self):
        assert set(OPERATION_CONTRACTS) == set(BackendOperation)

    @pytest.mark.parametrize("method,args,command,default", READ_OPERATIONS)
    def test_read_operations_swallow(self, method, args, command, default):
        assert OPERATION_CONTRACTS[BackendOperation(command)] is FailureContract.SWALLOW

    @pytest.mark.parametrize("method,args,command", MUTATING_OPERATIONS)
    def test_mutating_operations_propagate(self, method, args, command):
        assert (
            OPERATION_CONTRACTS[BackendOperation(command)]
            is FailureContract.PROPAGATE
        )


class TestSwallowingContract:
    """Read operations never raise on backend failure."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args,command,default", READ_OPERATIONS)
    async def test_failure_returns_default(
        self, transport_factory, method, args, command, default
    ):
        transport = transport_factory({command: BackendConnectionError("down")})
        gateway = BackendGateway(transport)

        result = await getattr(gateway, method)(*args)

        assert result == default
        assert transport.commands() == [command]

    @pytest.mark.asyncio
    async def test_malformed_response_returns_default(self, transport_factory):
        transport = transport_factory({"get_installed_apps": {"not": "a list"}})

        assert await BackendGateway(transport).list_installed_apps() == []

    @pytest.mark.asyncio
    async def test_defaults_are_fresh_objects(self, transport_factory):
        transport = transport_factory({"get_buckets": BackendCallError("boom")})
        gateway = BackendGateway(transport)

        first = await gateway.list_repositories()
        first.append("mutated")

        assert await gateway.list_repositories() == []

    @pytest.mark.asyncio
    async def test_strict_read_raises(self, transport_factory):
        """Test strict=True applies the propagating contract to a read."""
        transport = transport_factory(
            {"get_installed_apps": BackendCallError("scoop not found")}
        )

        with pytest.raises(BackendCallError, match="scoop not found"):
            await BackendGateway(transport).list_installed_apps(strict=True)

    @pytest.mark.asyncio
    async def test_strict_bucket_read_raises(self, transport_factory):
        transport = transport_factory({"get_buckets": BackendCallError("denied")})

        with pytest.raises(BackendCallError):
            await BackendGateway(transport).list_repositories(strict=True)


class TestPropagatingContract:
    """Mutating operations re-raise backend failures."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args,command", MUTATING_OPERATIONS)
    async def test_failure_is_reraised_unchanged(
        self, transport_factory, method, args, command
    ):
        message = f"{command} failed: access denied"
        transport = transport_factory({command: BackendCallError(message)})
        gateway = BackendGateway(transport)

        with pytest.raises(BackendCallError) as exc_info:
            await getattr(gateway, method)(*args)

        assert str(exc_info.value) == message
        assert exc_info.value.operation == command

    @pytest.mark.asyncio
    async def test_non_string_response_is_response_error(self, transport_factory):
        transport = transport_factory({"install_app": {"unexpected": True}})

        with pytest.raises(BackendResponseError):
            await BackendGateway(transport).install_app("git")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args,command", MUTATING_OPERATIONS)
    async def test_success_returns_message(
        self, transport_factory, method, args, command
    ):
        transport = transport_factory({command: "done"})

        assert await getattr(BackendGateway(transport), method)(*args) == "done"


class TestResponses:
    """Successful calls return typed results and pass arguments through."""

    @pytest.mark.asyncio
    async def test_list_installed_apps(self, transport_factory, sample_app_payload):
        transport = transport_factory({"get_installed_apps": [sample_app_payload]})

        apps = await BackendGateway(transport).list_installed_apps()

        assert apps == [InstalledApp.model_validate(sample_app_payload)]

    @pytest.mark.asyncio
    async def test_list_repositories(self, transport_factory, sample_bucket_payload):
        transport = transport_factory({"get_buckets": [sample_bucket_payload]})

        buckets = await BackendGateway(transport).list_repositories()

        assert buckets == [RepositorySource.model_validate(sample_bucket_payload)]

    @pytest.mark.asyncio
    async def test_search_passes_query(self, transport_factory):
        transport = transport_factory(
            {"search_apps": [{"name": "vim", "version": "9.0", "bucket": "main"}]}
        )

        hits = await BackendGateway(transport).search_remote("vim")

        assert hits == [SearchHit(name="vim", version="9.0", origin_repository="main")]
        assert transport.calls == [("search_apps", {"query": "vim"})]

    @pytest.mark.asyncio
    async def test_argument_names(self, transport_factory):
        transport = transport_factory(
            {
                "add_bucket": "added",
                "check_dependencies": ["7zip"],
                "get_app_sizes": {"git": 10},
            }
        )
        gateway = BackendGateway(transport)

        await gateway.add_repository("extras", "https://example.com/extras.git")
        await gateway.list_dependencies("git", "main")
        await gateway.get_install_sizes(["git"])

        assert transport.calls == [
            ("add_bucket", {"name": "extras", "url": "https://example.com/extras.git"}),
            ("check_dependencies", {"appName": "git", "bucket": "main"}),
            ("get_app_sizes", {"appNames": ["git"]}),
        ]

    @pytest.mark.asyncio
    async def test_get_app_detail(self, transport_factory):
        transport = transport_factory(
            {"get_app_detail": {"name": "git", "bucket": "main", "license": "GPL-2.0"}}
        )

        detail = await BackendGateway(transport).get_app_detail("git", "main")

        assert isinstance(detail, AppDetail)
        assert detail.license == "GPL-2.0"

    @pytest.mark.asyncio
    async def test_is_app_installed_true(self, transport_factory):
        transport = transport_factory({"is_app_installed": True})

        assert await BackendGateway(transport).is_app_installed("git") is True

    @pytest.mark.asyncio
    async def test_install_size_mapping(self, transport_factory):
        transport = transport_factory({"get_app_sizes": {"git": 1024, "vim": 0}})

        sizes = await BackendGateway(transport).get_install_sizes(["git", "vim"])

        assert sizes == {"git": 1024, "vim": 0}
