# pyright: reportUnknownMemberType=false
import pytest

from ellie.http_client.config import RequestConfig
from ellie.http_client.errors import InvalidArgumentError
from ellie.http_client.retry import RetryPolicy


def test_config_defaults_are_stable():
    config = RequestConfig()

    assert config.base_url is None
    assert dict(config.headers) == {}
    assert config.auth_scheme is None
    assert config.timeout_seconds is None
    assert config.connect_timeout_seconds is None
    assert config.max_redirects is None
    assert config.verify_tls is True
    assert config.proxy is None
    assert config.retry == RetryPolicy()
    assert config.attachments == ()
    assert config.body_format == "json"
    assert config.is_multipart is False


def test_config_headers_are_independent():
    first = RequestConfig()
    second = RequestConfig()

    assert first.headers is not second.headers


def test_config_headers_are_immutable():
    config = RequestConfig(headers={"X-Test": "1"})

    with pytest.raises(TypeError):
        config.headers["X-Test"] = "2"  # type: ignore[index]


def test_config_copies_external_headers_input():
    headers = {"X-Test": "1"}
    config = RequestConfig(headers=headers)
    headers["X-Test"] = "2"

    assert config.headers["X-Test"] == "1"


def test_config_header_lookup_is_case_insensitive():
    config = RequestConfig(headers={"Content-Type": "text/plain"})

    assert config.headers["content-type"] == "text/plain"
    assert "CONTENT-TYPE" in config.headers


def test_with_changes_returns_new_config():
    config = RequestConfig()
    changed = config.with_changes(base_url="http://example.com")

    assert changed is not config
    assert changed.base_url == "http://example.com"
    assert config.base_url is None


def test_merged_and_removed_headers_leave_source_untouched():
    config = RequestConfig(headers={"Accept": "text/html"})

    merged = config.merged_headers({"accept": "application/json", "X-A": "1"})
    removed = config.without_header("ACCEPT")

    assert dict(merged) == {"accept": "application/json", "X-A": "1"}
    assert dict(removed) == {}
    assert dict(config.headers) == {"Accept": "text/html"}


def test_resolve_timeout_variants():
    assert RequestConfig().resolve_timeout() is None
    assert RequestConfig(timeout_seconds=2.0).resolve_timeout() == 2.0
    assert RequestConfig(
        timeout_seconds=4.0, connect_timeout_seconds=1.0
    ).resolve_timeout() == (1.0, 4.0)
    assert RequestConfig(connect_timeout_seconds=1.0).resolve_timeout() == (
        1.0,
        None,
    )


def test_config_rejects_non_positive_timeouts():
    with pytest.raises(InvalidArgumentError):
        RequestConfig(timeout_seconds=0)
    with pytest.raises(InvalidArgumentError):
        RequestConfig(timeout_seconds=-1)
    with pytest.raises(ValueError):
        RequestConfig(connect_timeout_seconds=0)


def test_config_rejects_negative_redirects():
    with pytest.raises(InvalidArgumentError):
        RequestConfig(max_redirects=-1)


def test_config_rejects_unknown_auth_and_body_format():
    with pytest.raises(InvalidArgumentError):
        RequestConfig(auth_scheme="ntlm")
    with pytest.raises(InvalidArgumentError):
        RequestConfig(body_format="xml")
