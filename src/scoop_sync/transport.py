# SPDX-License-Identifier: MIT
"""Transports that carry named operations to the package-manager backend."""

import asyncio
import json
from typing import Any, Protocol, runtime_checkable

import aiohttp

from .backend_exceptions import (
    BackendCallError,
    BackendConnectionError,
    BackendResponseError,
    BackendTimeoutError,
)
from .constants import DEFAULT_BACKEND_TIMEOUT, DEFAULT_BACKEND_URL, INVOKE_PATH
from .logging_config import get_detail_logger


detail_logger = get_detail_logger()


@runtime_checkable
class BackendTransport(Protocol):
    """Opaque asynchronous call interface to the backend.

    Implementations raise a BackendError subclass on any failure and return
    the decoded JSON result otherwise. Timeouts are the transport's concern.
    """

    async def invoke(self, command: str, args: dict[str, Any] | None = None) -> Any:
        """Invoke a backend command with keyword arguments."""
        ...


class HttpTransport:
    """Transport that POSTs JSON arguments to ``{base_url}/invoke/{command}``.

    A 2xx response body is the JSON-encoded result. Any other status is a
    backend-reported failure whose body text is the error message.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        timeout_seconds: int = DEFAULT_BACKEND_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpTransport":
        """Async context manager entry."""
        self._ensure_session()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        """Async context manager exit."""
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self.session

    async def close(self) -> None:
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def invoke(self, command: str, args: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{INVOKE_PATH}/{command}"
        session = self._ensure_session()
        detail_logger.debug(f"POST {url} args={args or {}}")

        try:
            async with session.post(url, json=args or {}) as response:
                if response.status >= 400:
                    message = (await response.text(errors="replace")).strip()
                    raise BackendCallError(
                        message or f"Backend returned HTTP {response.status}",
                        operation=command,
                        status=response.status,
                    )
                body = await response.text()
        except UnicodeDecodeError as e:
            raise BackendResponseError(
                f"Backend call '{command}' returned an undecodable body: {e}",
                operation=command,
            ) from e
        except asyncio.TimeoutError as e:
            raise BackendTimeoutError(
                f"Backend call '{command}' timed out", operation=command
            ) from e
        except aiohttp.ClientError as e:
            raise BackendConnectionError(
                f"Backend call '{command}' failed: {e}", operation=command
            ) from e

        try:
            return json.loads(body) if body else None
        except json.JSONDecodeError as e:
            raise BackendResponseError(
                f"Backend call '{command}' returned invalid JSON: {e}",
                operation=command,
            ) from e
