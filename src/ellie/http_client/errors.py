"""Error types raised by the Ellie HTTP client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .response import Response


class HttpClientError(Exception):
    """Base class for all client errors."""


class InvalidArgumentError(HttpClientError, ValueError):
    """Raised locally for malformed caller input. Never retried."""


class RequestError(HttpClientError):
    """A request could not be completed, or a response was rejected.

    Transport faults raise this after the retry policy is exhausted, with the
    original ``requests`` exception chained as ``__cause__``. Failed HTTP
    statuses only raise it when the caller opts in via ``Response.throw``.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        response: Response | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.response = response


class RequestTimeoutError(RequestError):
    """The transport gave up waiting for the server."""


class RequestConnectionError(RequestError):
    """DNS, connection or TLS failure before a response was received."""
