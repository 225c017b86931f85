"""Configuration model accumulated by the HttpClient builder."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from requests.structures import CaseInsensitiveDict

from .attachments import Attachment
from .errors import InvalidArgumentError
from .retry import RetryPolicy

AUTH_SCHEMES = frozenset({"bearer", "basic", "digest"})
BODY_FORMATS = frozenset({"json", "form"})


def _freeze_headers(headers: Mapping[str, str]) -> Mapping[str, str]:
    """Return a read-only, case-insensitive copy of ``headers``."""

    return MappingProxyType(CaseInsensitiveDict(headers))


def _default_headers() -> Mapping[str, str]:
    return _freeze_headers({})


@dataclass(frozen=True)
class RequestConfig:
    """Immutable request settings.

    Every builder call produces a new config through ``with_changes``, so a
    builder that is kept around and reused never observes later changes.
    """

    base_url: str | None = None
    headers: Mapping[str, str] = field(default_factory=_default_headers)
    auth_scheme: str | None = None
    auth_credentials: tuple[str, ...] = ()
    user_agent: str | None = None
    timeout_seconds: float | None = None
    connect_timeout_seconds: float | None = None
    max_redirects: int | None = None
    verify_tls: bool | str = True
    proxy: str | None = None
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    attachments: tuple[Attachment, ...] = ()
    body_format: str = "json"

    def __post_init__(self) -> None:
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise InvalidArgumentError(
                "timeout_seconds must be > 0 when provided"
            )
        if (
            self.connect_timeout_seconds is not None
            and self.connect_timeout_seconds <= 0
        ):
            raise InvalidArgumentError(
                "connect_timeout_seconds must be > 0 when provided"
            )
        if self.max_redirects is not None and self.max_redirects < 0:
            raise InvalidArgumentError("max_redirects must be >= 0")
        if self.auth_scheme is not None and self.auth_scheme not in AUTH_SCHEMES:
            raise InvalidArgumentError(
                f"unsupported auth scheme: {self.auth_scheme}"
            )
        if self.body_format not in BODY_FORMATS:
            raise InvalidArgumentError(
                f"unsupported body format: {self.body_format}"
            )

        # Freeze copied headers to avoid post-init mutation side effects.
        object.__setattr__(self, "headers", _freeze_headers(self.headers))
        object.__setattr__(self, "attachments", tuple(self.attachments))

    def with_changes(self, **changes: Any) -> RequestConfig:
        return replace(self, **changes)

    def merged_headers(self, extra: Mapping[str, str]) -> Mapping[str, str]:
        """Return this config's headers overlaid with ``extra``."""
        merged = CaseInsensitiveDict(self.headers)
        merged.update(extra)
        return _freeze_headers(merged)

    def without_header(self, name: str) -> Mapping[str, str]:
        remaining = CaseInsensitiveDict(self.headers)
        remaining.pop(name, None)
        return _freeze_headers(remaining)

    @property
    def is_multipart(self) -> bool:
        return bool(self.attachments)

    def resolve_timeout(self) -> float | tuple[float, float | None] | None:
        """Resolve the value passed as ``timeout=`` to requests."""
        if self.connect_timeout_seconds is not None:
            return (self.connect_timeout_seconds, self.timeout_seconds)
        return self.timeout_seconds
