"""Fluent synchronous HTTP client built on ``requests``.

Configuration calls return a new client over a new, immutable
``RequestConfig``; terminal calls compile that config into a
``requests.Session.request`` call and wrap the result in a ``Response``.
Transport, redirects and TLS stay inside ``requests``.
"""

from __future__ import annotations

import logging
from time import sleep
from typing import Any, Mapping
from urllib.parse import urlsplit

import requests
from requests.auth import AuthBase, HTTPBasicAuth, HTTPDigestAuth
from requests.compat import json as complexjson
from requests.models import DEFAULT_REDIRECT_LIMIT
from requests.structures import CaseInsensitiveDict

from .attachments import open_parts, resolve_attachment
from .config import RequestConfig
from .errors import (
    InvalidArgumentError,
    RequestConnectionError,
    RequestError,
    RequestTimeoutError,
)
from .response import Response
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

Query = Mapping[str, Any] | None

# Raised by requests for caller mistakes rather than network faults.
INVALID_INPUT_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.InvalidJSONError,
)


class HttpClient:
    """Request builder and executor.

    Example:
        >>> api = HttpClient().with_base_url("https://api.example.com")
        >>> response = api.with_token("secret").get("/users")
        >>> response.json("data.0.name")

    Clients derived from one another share a ``requests.Session`` and are not
    meant to be used from several threads at once.
    """

    def __init__(
        self,
        config: RequestConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._session = session or requests.Session()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    @property
    def config(self) -> RequestConfig:
        return self._config

    def _derive(self, **changes: Any) -> HttpClient:
        return HttpClient(
            self._config.with_changes(**changes), session=self._session
        )

    # Configuration

    def with_base_url(self, base_url: str) -> HttpClient:
        return self._derive(base_url=base_url)

    def with_header(self, name: str, value: str) -> HttpClient:
        return self.with_headers({name: value})

    def with_headers(self, headers: Mapping[str, str]) -> HttpClient:
        """Add headers, replacing existing ones with the same name."""
        return self._derive(headers=self._config.merged_headers(headers))

    def with_user_agent(self, user_agent: str) -> HttpClient:
        return self._derive(user_agent=user_agent)

    def with_token(self, token: str, token_type: str = "Bearer") -> HttpClient:
        return self._derive(
            auth_scheme="bearer", auth_credentials=(token_type, token)
        )

    def with_basic_auth(self, username: str, password: str) -> HttpClient:
        return self._derive(
            auth_scheme="basic", auth_credentials=(username, password)
        )

    def with_digest_auth(self, username: str, password: str) -> HttpClient:
        return self._derive(
            auth_scheme="digest", auth_credentials=(username, password)
        )

    def with_timeout(self, seconds: float) -> HttpClient:
        return self._derive(timeout_seconds=seconds)

    def with_connect_timeout(self, seconds: float) -> HttpClient:
        return self._derive(connect_timeout_seconds=seconds)

    def with_max_redirects(self, max_redirects: int) -> HttpClient:
        return self._derive(max_redirects=max_redirects)

    def with_verify(self, verify: bool | str = True) -> HttpClient:
        """Toggle TLS verification, or pass a CA bundle path."""
        return self._derive(verify_tls=verify)

    def with_proxy(self, proxy: str | None) -> HttpClient:
        return self._derive(proxy=proxy)

    def with_retry(
        self, policy: RetryPolicy | None = None, **fields: Any
    ) -> HttpClient:
        """Set the retry policy.

        Either pass a ready ``RetryPolicy`` or its fields as keyword
        arguments, e.g. ``with_retry(max_retries=3, base_delay_ms=200)``.
        """
        if policy is not None and fields:
            raise InvalidArgumentError(
                "pass either a RetryPolicy or policy fields, not both"
            )
        return self._derive(retry=policy or RetryPolicy(**fields))

    def attach(
        self,
        field: str,
        source: Any,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> HttpClient:
        """Attach a file part; the request will be sent as multipart.

        Raises:
            InvalidArgumentError: ``source`` is a missing or unreadable path,
                or is neither a path nor a readable stream.
        """
        attachment = resolve_attachment(field, source, filename, content_type)
        return self._derive(
            attachments=self._config.attachments + (attachment,)
        )

    def accept_json(self) -> HttpClient:
        return self.with_header("Accept", "application/json")

    def as_json(self) -> HttpClient:
        client = self.with_header("Content-Type", "application/json")
        return client._derive(body_format="json")

    def as_form(self) -> HttpClient:
        client = self._derive(
            headers=self._config.without_header("Content-Type")
        )
        return client._derive(body_format="form")

    # Terminal calls

    def get(self, url: str, query: Query = None) -> Response:
        return self.send("GET", url, query=query)

    def head(self, url: str, query: Query = None) -> Response:
        return self.send("HEAD", url, query=query)

    def post(self, url: str, data: Any = None, query: Query = None) -> Response:
        return self.send("POST", url, data=data, query=query)

    def put(self, url: str, data: Any = None, query: Query = None) -> Response:
        return self.send("PUT", url, data=data, query=query)

    def patch(
        self, url: str, data: Any = None, query: Query = None
    ) -> Response:
        return self.send("PATCH", url, data=data, query=query)

    def delete(
        self, url: str, data: Any = None, query: Query = None
    ) -> Response:
        return self.send("DELETE", url, data=data, query=query)

    def send(
        self,
        method: str,
        url: str,
        *,
        query: Query = None,
        data: Any = None,
    ) -> Response:
        """Issue a request using the accumulated configuration.

        HTTP error statuses are returned as responses; call
        ``Response.throw`` to turn them into exceptions.

        Raises:
            RequestError: The transport failed and retries are exhausted.
            InvalidArgumentError: The payload cannot be encoded, or
                requests rejected the URL or headers.
        """
        config = self._config
        method = method.upper()
        request_url = self._resolve_url(url)
        options = self._compile_options(config, query, data)
        policy = config.retry

        attempt = 0
        while True:
            try:
                raw = self._perform(method, request_url, options, config)
            except INVALID_INPUT_ERRORS as exc:
                raise InvalidArgumentError(str(exc)) from exc
            except requests.exceptions.RequestException as exc:
                if not policy.should_retry(attempt, exc):
                    raise self._map_request_exception(
                        method, request_url, exc, attempt + 1
                    ) from exc
                self._wait(method, request_url, attempt, type(exc).__name__)
                attempt += 1
                continue

            if not policy.should_retry(attempt, raw.status_code):
                return Response(
                    raw,
                    meta=self._build_meta(
                        method, request_url, raw, options, attempt + 1
                    ),
                )
            if raw.raw is not None:
                raw.close()
            self._wait(
                method, request_url, attempt, f"status {raw.status_code}"
            )
            attempt += 1

    # Internals

    def _resolve_url(self, url: str) -> str:
        base_url = self._config.base_url
        parts = urlsplit(url)
        if not base_url or (parts.scheme and parts.netloc):
            return url
        if not url:
            return base_url
        return f"{base_url.rstrip('/')}/{url.lstrip('/')}"

    def _auth(self, config: RequestConfig) -> AuthBase | None:
        if config.auth_scheme == "basic":
            return HTTPBasicAuth(*config.auth_credentials)
        if config.auth_scheme == "digest":
            return HTTPDigestAuth(*config.auth_credentials)
        return None

    def _compile_headers(
        self, config: RequestConfig
    ) -> CaseInsensitiveDict[str]:
        headers = CaseInsensitiveDict(config.headers)
        if config.user_agent:
            headers["User-Agent"] = config.user_agent
        if config.auth_scheme == "bearer":
            token_type, token = config.auth_credentials
            headers["Authorization"] = f"{token_type} {token}"
        return headers

    def _compile_options(
        self, config: RequestConfig, query: Query, data: Any
    ) -> dict[str, Any]:
        """Translate the config into keyword arguments for ``requests``."""
        options: dict[str, Any] = {
            "params": dict(query) if query else None,
            "headers": self._compile_headers(config),
            "auth": self._auth(config),
            "timeout": config.resolve_timeout(),
            "verify": config.verify_tls,
            "allow_redirects": config.max_redirects != 0,
        }
        if config.proxy:
            options["proxies"] = {"http": config.proxy, "https": config.proxy}

        if config.is_multipart:
            if data is not None and not isinstance(data, Mapping):
                raise InvalidArgumentError(
                    "multipart requests need a mapping of form fields"
                )
            # requests generates the multipart boundary itself
            options["headers"].pop("Content-Type", None)
            options["data"] = dict(data) if data else None
        elif data is None:
            pass
        elif isinstance(data, (str, bytes)) or config.body_format == "form":
            options["data"] = data
        else:
            try:
                complexjson.dumps(data, allow_nan=False)
            except (TypeError, ValueError) as exc:
                raise InvalidArgumentError(
                    f"payload is not JSON serializable: {exc}"
                ) from exc
            options["json"] = data
        return options

    def _perform(
        self,
        method: str,
        url: str,
        options: Mapping[str, Any],
        config: RequestConfig,
    ) -> requests.Response:
        self._session.max_redirects = (
            config.max_redirects or DEFAULT_REDIRECT_LIMIT
        )
        logger.debug("%s %s", method, url)
        if not config.attachments:
            return self._session.request(method, url, **options)
        with open_parts(config.attachments) as files:
            return self._session.request(method, url, files=files, **options)

    def _wait(self, method: str, url: str, attempt: int, reason: str) -> None:
        delay = self._config.retry.delay_seconds(attempt)
        logger.warning(
            "Retrying %s %s after attempt %d (%s) in %.3fs",
            method,
            url,
            attempt + 1,
            reason,
            delay,
        )
        if delay > 0:
            sleep(delay)

    def _build_meta(
        self,
        method: str,
        request_url: str,
        response: requests.Response | None,
        options: Mapping[str, Any],
        attempts: int,
    ) -> dict[str, Any]:
        """Construct metadata dictionary from response and options."""
        meta: dict[str, Any] = {}
        meta["method"] = method
        meta["url"] = request_url
        meta["attempts"] = attempts
        meta["timeout_s"] = options.get("timeout")

        if response is not None:
            meta["status_code"] = response.status_code
            meta["url"] = response.url or request_url
            meta["reason"] = response.reason
            meta["redirects"] = len(response.history)
            try:
                meta["elapsed_s"] = response.elapsed.total_seconds()
            except AttributeError:
                pass  # elapsed is only set by a real transport
        return meta

    def _map_request_exception(
        self,
        method: str,
        request_url: str,
        e: requests.exceptions.RequestException,
        attempts: int,
    ) -> RequestError:
        """Map requests exceptions to client errors."""
        response = e.response
        status_code = response.status_code if response is not None else None
        message = (
            f"{method} {request_url} failed after {attempts} attempt(s): {e}"
        )
        logger.warning(message)

        if isinstance(e, requests.exceptions.Timeout):
            return RequestTimeoutError(message, status_code=status_code)

        if isinstance(e, requests.exceptions.ConnectionError):
            return RequestConnectionError(message, status_code=status_code)

        return RequestError(message, status_code=status_code)
