# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
from unittest.mock import patch

import requests

from ellie.http_client import http
from ellie.http_client.client import HttpClient
from ellie.http_client.response import Response


def _raw(status: int = 200, content: bytes = b"{}") -> requests.Response:
    response = requests.Response()
    response._content = content
    response.status_code = status
    response.encoding = "utf-8"
    response.url = "http://example.com"
    return response


@patch("requests.Session.request")
def test_module_get_sends_with_fresh_defaults(mock_request):
    mock_request.return_value = _raw(content=b'{"id": 7}')

    response = http.get("http://example.com/items", {"q": "x"})

    assert isinstance(response, Response)
    assert response.json("id") == 7
    mock_request.assert_called_once_with(
        "GET",
        "http://example.com/items",
        params={"q": "x"},
        headers={},
        auth=None,
        timeout=None,
        verify=True,
        allow_redirects=True,
    )


@patch("requests.Session.request")
def test_module_write_methods_forward_payload(mock_request):
    mock_request.return_value = _raw(201)

    for send, method in [
        (http.post, "POST"),
        (http.put, "PUT"),
        (http.patch, "PATCH"),
        (http.delete, "DELETE"),
    ]:
        send("http://example.com/items", {"a": 1})
        assert mock_request.call_args.args[0] == method
        assert mock_request.call_args.kwargs["json"] == {"a": 1}

    http.head("http://example.com/items")
    assert mock_request.call_args.args[0] == "HEAD"


def test_builder_shortcuts_return_independent_clients():
    first = http.with_base_url("https://a.example.com")
    second = http.with_token("secret")

    assert isinstance(first, HttpClient)
    assert second.config.base_url is None
    assert first.config.auth_scheme is None
    assert second.config.auth_scheme == "bearer"
    assert http.client() is not http.client()


def test_builder_shortcuts_cover_configuration_calls():
    assert http.with_header("X-A", "1").config.headers["x-a"] == "1"
    assert http.with_headers({"X-B": "2"}).config.headers["X-B"] == "2"
    assert http.with_user_agent("ua").config.user_agent == "ua"
    assert http.with_basic_auth("u", "p").config.auth_scheme == "basic"
    assert http.with_digest_auth("u", "p").config.auth_scheme == "digest"
    assert http.with_timeout(2).config.timeout_seconds == 2
    assert http.with_connect_timeout(1).config.connect_timeout_seconds == 1
    assert http.with_max_redirects(2).config.max_redirects == 2
    assert http.with_verify(False).config.verify_tls is False
    assert http.with_proxy("http://p:1").config.proxy == "http://p:1"
    assert http.with_retry(max_retries=2).config.retry.max_retries == 2
    assert http.accept_json().config.headers["Accept"] == "application/json"
    assert http.as_json().config.body_format == "json"
    assert http.as_form().config.body_format == "form"


def test_attach_shortcut(tmp_path):
    path = tmp_path / "a.txt"
    path.write_text("a")

    client = http.attach("file", path)

    assert client.config.is_multipart
    assert client.config.attachments[0].filename == "a.txt"
