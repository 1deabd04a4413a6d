"""Call outcomes returned by `LearnHubClient`."""

from dataclasses import dataclass
from typing import Any


# Status used when no HTTP response was received
FETCH_ERROR = "FETCH_ERROR"


@dataclass
class ApiError:
    """A failed call.

    Attributes:
        status: HTTP status code, or `FETCH_ERROR` for transport failures
        message: Server-supplied message, or the transport error text
        data: Error body as returned by the server, if any
    """

    status: int | str
    message: str
    data: Any = None


@dataclass
class ApiResult:
    """Either unwrapped `data` or an `error`, never raised."""

    data: Any = None
    error: ApiError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
