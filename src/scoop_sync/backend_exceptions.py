# SPDX-License-Identifier: MIT
"""Standard exceptions for calls into the package-manager backend."""


class BackendError(Exception):
    """Base class for all backend call failures."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message)


class BackendCallError(BackendError):
    """Raised when the backend itself reports that an operation failed."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        status: int | None = None,
    ) -> None:
        self.status = status
        super().__init__(message, operation)


class BackendTimeoutError(BackendError):
    """Raised when a backend call times out in the transport."""

    pass


class BackendConnectionError(BackendError):
    """Raised when the backend cannot be reached."""

    pass


class BackendResponseError(BackendError):
    """Raised when a backend response does not have the declared shape."""

    pass
