# SPDX-License-Identifier: MIT
"""Pytest configuration and shared fixtures."""

import inspect
from typing import Any

import pytest
import yaml

from scoop_sync.backend_exceptions import BackendCallError
from scoop_sync.cache import SnapshotStore
from scoop_sync.config import ConfigManager, reset_config_manager, set_config_manager


class FakeTransport:
    """In-memory backend transport.

    ``responses`` maps a command name to a value, an exception instance to
    raise, or a callable taking the call arguments (sync or async).
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.closed = False

    async def __aenter__(self) -> "FakeTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.closed = True

    async def invoke(self, command: str, args: dict[str, Any] | None = None) -> Any:
        args = args or {}
        self.calls.append((command, args))

        if command not in self.responses:
            raise BackendCallError(
                f"No response configured for {command}", operation=command
            )

        response = self.responses[command]
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = response(args)
            if inspect.isawaitable(response):
                response = await response
        return response

    def commands(self) -> list[str]:
        return [command for command, _ in self.calls]


@pytest.fixture(scope="function", autouse=True)
def isolated_config(tmp_path):
    """
    Point the global config at a per-test snapshot database.

    This prevents tests from reading or writing the user's real snapshot.
    """
    db_path = tmp_path / "snapshot.db"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.dump({"cache": {"db_path": str(db_path)}}), encoding="utf-8"
    )

    set_config_manager(ConfigManager(config_path))
    yield db_path
    reset_config_manager()


@pytest.fixture
def snapshot_db_path(isolated_config):
    """Path of the isolated snapshot database."""
    return isolated_config


@pytest.fixture
def snapshot_store(snapshot_db_path):
    """SnapshotStore backed by the isolated database."""
    return SnapshotStore(snapshot_db_path)


@pytest.fixture
def sample_app_payload():
    """Installed app as the backend sends it."""
    return {
        "name": "git",
        "version": "2.40",
        "bucket": "main",
        "description": "Distributed version control system",
        "updated": 1700000000000,
        "has_update": False,
        "install_size": 52428800,
    }


@pytest.fixture
def sample_bucket_payload():
    """Bucket as the backend sends it."""
    return {
        "name": "extras",
        "source": "https://github.com/ScoopInstaller/Extras",
        "updated": 1700000000,
    }


@pytest.fixture
def fake_transport():
    """Empty fake transport; tests configure responses as needed."""
    return FakeTransport()


@pytest.fixture
def transport_factory():
    """Build FakeTransport instances with preset responses."""
    return FakeTransport
