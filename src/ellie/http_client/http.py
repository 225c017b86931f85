"""Module-level shortcuts that start from a fresh HttpClient.

    >>> from ellie.http_client import http
    >>> http.get("https://api.example.com/users").json()
    >>> http.with_base_url("https://api.example.com").with_token("t").get("/me")

One-shot requests close their session once the response is read; builder
shortcuts return a client the caller keeps using.
"""

from __future__ import annotations

from typing import Any, Mapping

from .client import HttpClient, Query
from .response import Response
from .retry import RetryPolicy


def client() -> HttpClient:
    return HttpClient()


def with_base_url(base_url: str) -> HttpClient:
    return HttpClient().with_base_url(base_url)


def with_header(name: str, value: str) -> HttpClient:
    return HttpClient().with_header(name, value)


def with_headers(headers: Mapping[str, str]) -> HttpClient:
    return HttpClient().with_headers(headers)


def with_user_agent(user_agent: str) -> HttpClient:
    return HttpClient().with_user_agent(user_agent)


def with_token(token: str, token_type: str = "Bearer") -> HttpClient:
    return HttpClient().with_token(token, token_type)


def with_basic_auth(username: str, password: str) -> HttpClient:
    return HttpClient().with_basic_auth(username, password)


def with_digest_auth(username: str, password: str) -> HttpClient:
    return HttpClient().with_digest_auth(username, password)


def with_timeout(seconds: float) -> HttpClient:
    return HttpClient().with_timeout(seconds)


def with_connect_timeout(seconds: float) -> HttpClient:
    return HttpClient().with_connect_timeout(seconds)


def with_max_redirects(max_redirects: int) -> HttpClient:
    return HttpClient().with_max_redirects(max_redirects)


def with_verify(verify: bool | str = True) -> HttpClient:
    return HttpClient().with_verify(verify)


def with_proxy(proxy: str | None) -> HttpClient:
    return HttpClient().with_proxy(proxy)


def with_retry(policy: RetryPolicy | None = None, **fields: Any) -> HttpClient:
    return HttpClient().with_retry(policy, **fields)


def attach(
    field: str,
    source: Any,
    filename: str | None = None,
    content_type: str | None = None,
) -> HttpClient:
    return HttpClient().attach(field, source, filename, content_type)


def accept_json() -> HttpClient:
    return HttpClient().accept_json()


def as_json() -> HttpClient:
    return HttpClient().as_json()


def as_form() -> HttpClient:
    return HttpClient().as_form()


def send(
    method: str, url: str, *, query: Query = None, data: Any = None
) -> Response:
    with HttpClient() as one_shot:
        return one_shot.send(method, url, query=query, data=data)


def get(url: str, query: Query = None) -> Response:
    return send("GET", url, query=query)


def head(url: str, query: Query = None) -> Response:
    return send("HEAD", url, query=query)


def post(url: str, data: Any = None, query: Query = None) -> Response:
    return send("POST", url, query=query, data=data)


def put(url: str, data: Any = None, query: Query = None) -> Response:
    return send("PUT", url, query=query, data=data)


def patch(url: str, data: Any = None, query: Query = None) -> Response:
    return send("PATCH", url, query=query, data=data)


def delete(url: str, data: Any = None, query: Query = None) -> Response:
    return send("DELETE", url, query=query, data=data)
