"""Read-only convenience view over a completed ``requests`` response."""

from __future__ import annotations

import enum
import logging
import re
from types import MappingProxyType, SimpleNamespace
from typing import Any, Callable, Mapping

import requests

from .errors import RequestError

logger = logging.getLogger(__name__)

ERROR_MESSAGE_FIELDS = ("message", "error", "error_description")

_COOKIE_PAIR = re.compile(r"^([^=]+)=([^;]*)")


class _Decode(enum.Enum):
    NOT_COMPUTED = enum.auto()
    FAILED = enum.auto()


def _dig(value: Any, key: str, default: Any) -> Any:
    """Walk ``value`` along a dot-separated ``key``.

    Segments select mapping keys, or list positions when they are digits.
    """
    for segment in key.split("."):
        if isinstance(value, Mapping) and segment in value:
            value = value[segment]
        elif (
            isinstance(value, list)
            and segment.isdecimal()
            and int(segment) < len(value)
        ):
            value = value[int(segment)]
        else:
            return default
    return value


def _to_namespace(value: Any) -> Any:
    if isinstance(value, Mapping):
        return SimpleNamespace(
            **{str(k): _to_namespace(v) for k, v in value.items()}
        )
    if isinstance(value, list):
        return [_to_namespace(item) for item in value]
    return value


class Response:
    """Wrapper around ``requests.Response`` with convenience accessors.

    The body text and the decoded JSON document are computed at most once.
    A body that is not valid JSON is remembered as such, and every JSON
    accessor then returns its default instead of raising.
    """

    def __init__(
        self,
        response: requests.Response,
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        self._response = response
        self._meta = MappingProxyType(dict(meta or {}))
        self._text: str | None = None
        self._json: Any = _Decode.NOT_COMPUTED

    def __repr__(self) -> str:
        return f"<Response [{self.status()}]>"

    def __str__(self) -> str:
        return self.body()

    # Body

    def body(self) -> str:
        """Return the response body decoded as text."""
        if self._text is None:
            self._text = self._response.text
        return self._text

    def content(self) -> bytes:
        return self._response.content

    def body_or(self, default: str) -> str:
        body = self.body()
        return body if body else default

    def is_empty(self) -> bool:
        return not self.content()

    # Status

    def status(self) -> int:
        return self._response.status_code

    def reason(self) -> str | None:
        return self._response.reason

    def successful(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status() < 300

    def success(self) -> bool:
        return self.successful()

    def failed(self) -> bool:
        """True for 4xx and 5xx statuses."""
        return 400 <= self.status() < 600

    def is_error(self) -> bool:
        return self.failed()

    def is_client_error(self) -> bool:
        return 400 <= self.status() < 500

    def is_server_error(self) -> bool:
        return 500 <= self.status() < 600

    def is_redirect(self) -> bool:
        return 300 <= self.status() < 400

    def is_ok(self) -> bool:
        return self.status() == 200

    def is_created(self) -> bool:
        return self.status() == 201

    def is_accepted(self) -> bool:
        return self.status() == 202

    def is_no_content(self) -> bool:
        return self.status() == 204

    def is_bad_request(self) -> bool:
        return self.status() == 400

    def is_unauthorized(self) -> bool:
        return self.status() == 401

    def is_forbidden(self) -> bool:
        return self.status() == 403

    def is_not_found(self) -> bool:
        return self.status() == 404

    def is_unprocessable_entity(self) -> bool:
        return self.status() == 422

    def is_too_many_requests(self) -> bool:
        return self.status() == 429

    def is_internal_server_error(self) -> bool:
        return self.status() == 500

    def is_service_unavailable(self) -> bool:
        return self.status() == 503

    # Headers

    def headers(self) -> dict[str, list[str]]:
        """Return every response header with all of its values.

        Repeated headers keep their individual values when the raw urllib3
        headers are available; otherwise each header has a single value.
        """
        raw_headers = getattr(self._response.raw, "headers", None)
        if raw_headers is not None and hasattr(raw_headers, "getlist"):
            return {
                name: list(raw_headers.getlist(name))
                for name in raw_headers.keys()
            }
        return {name: [value] for name, value in self._response.headers.items()}

    def header_values(self, name: str) -> list[str]:
        lowered = name.lower()
        for key, values in self.headers().items():
            if key.lower() == lowered:
                return values
        return []

    def header(self, name: str) -> str | None:
        """Return the first value of header ``name`` (case-insensitive)."""
        values = self.header_values(name)
        return values[0] if values else None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    def cookies(self) -> dict[str, str]:
        cookies: dict[str, str] = {}
        for header in self.header_values("Set-Cookie"):
            match = _COOKIE_PAIR.match(header)
            if match:
                cookies[match.group(1).strip()] = match.group(2)
        return cookies

    def cookie(self, name: str) -> str | None:
        return self.cookies().get(name)

    # JSON

    def _decoded(self) -> Any:
        if self._json is _Decode.NOT_COMPUTED:
            try:
                self._json = self._response.json()
            except requests.exceptions.JSONDecodeError:
                logger.debug(
                    "Response body from %s is not valid JSON",
                    self.effective_url(),
                )
                self._json = _Decode.FAILED
        return self._json

    def json(self, key: str | None = None, default: Any = None) -> Any:
        """Decode the body as JSON.

        Args:
            key: Optional dot-separated path, e.g. ``"user.name"``.
            default: Returned when the body is not JSON, the document is
                ``null`` or the key path is missing.
        """
        document = self._decoded()
        if document is _Decode.FAILED:
            return default
        if key is None:
            return default if document is None else document
        return _dig(document, key, default)

    def object(self, key: str | None = None, default: Any = None) -> Any:
        """Like ``json`` but mappings become ``SimpleNamespace`` objects."""
        return _to_namespace(self.json(key, default))

    def json_or_fail(self, key: str | None = None, default: Any = None) -> Any:
        self.throw()
        return self.json(key, default)

    def to_dict(self) -> dict[str, Any]:
        document = self.json()
        return document if isinstance(document, dict) else {}

    # Failure handling

    def _error_message(self) -> str:
        document = self.json()
        if isinstance(document, Mapping):
            for name in ERROR_MESSAGE_FIELDS:
                value = document.get(name)
                if value is not None:
                    return str(value)
        return f"HTTP request returned status code {self.status()}"

    def throw(
        self,
        callback: Callable[[RequestError, Response], Any] | None = None,
    ) -> Response:
        """Raise RequestError if the status is 4xx or 5xx.

        Args:
            callback: Invoked with the error and this response before raising.

        Returns:
            This response, when it did not fail.
        """
        if not self.failed():
            return self

        error = RequestError(
            self._error_message(),
            status_code=self.status(),
            body=self.body(),
            response=self,
        )
        if callback is not None:
            callback(error, self)
        raise error

    def throw_if(
        self,
        condition: bool | Callable[[Response], bool],
        message: str | None = None,
    ) -> Response:
        should_raise = condition(self) if callable(condition) else condition
        if should_raise:
            raise RequestError(
                message or "HTTP request condition failed",
                status_code=self.status(),
                body=self.body(),
                response=self,
            )
        return self

    def throw_unless(
        self,
        condition: bool | Callable[[Response], bool],
        message: str | None = None,
    ) -> Response:
        holds = condition(self) if callable(condition) else condition
        return self.throw_if(not holds, message)

    def on_success(self, callback: Callable[[Response], Any]) -> Response:
        if self.successful():
            callback(self)
        return self

    def on_error(self, callback: Callable[[Response], Any]) -> Response:
        if self.failed():
            callback(self)
        return self

    # Metadata

    def info(self, key: str | None = None) -> Any:
        """Return request metadata, or one entry of it."""
        if key is None:
            return dict(self._meta)
        return self._meta.get(key)

    def effective_url(self) -> str | None:
        """URL of the final response, after redirects."""
        return self._response.url or self._meta.get("url")

    def total_time(self) -> float | None:
        return self._meta.get("elapsed_s")

    def attempts(self) -> int:
        return int(self._meta.get("attempts", 1))

    def to_requests_response(self) -> requests.Response:
        return self._response
