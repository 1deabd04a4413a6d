"""Application error taxonomy.

Services raise these; the exception handler registered in `learnhub.main`
turns them into `{message, error}` envelopes with the mapped status code.
"""

from typing import Any

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        code: str = "app_error",
        error: Any = None,
    ) -> None:
        self.message = message
        self.code = code
        self.error = error
        super().__init__(message)


class ValidationError(AppError):
    """Missing or malformed input."""

    def __init__(self, message: str, error: Any = None) -> None:
        super().__init__(message, "validation_error", error)


class NotFoundError(AppError):
    """No record for the given key."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, "not_found")


class ForbiddenError(AppError):
    """Caller does not own the resource."""

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(message, "forbidden")


class ConfigurationError(AppError):
    """A required configuration value is absent."""

    def __init__(self, message: str, error: Any = None) -> None:
        super().__init__(message, "configuration_error", error)


class UpstreamError(AppError):
    """A collaborator (store, storage, identity, payments) call failed."""

    def __init__(self, message: str, error: Any = None) -> None:
        super().__init__(message, "upstream_error", error)


STATUS_MAP = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "configuration_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "upstream_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(error: AppError) -> int:
    """HTTP status code for an application error."""
    return STATUS_MAP.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def envelope(message: str, data: Any = None) -> dict[str, Any]:
    """Build the `{message, data}` success envelope."""
    body: dict[str, Any] = {"message": message}
    if data is not None:
        body["data"] = data
    return body
