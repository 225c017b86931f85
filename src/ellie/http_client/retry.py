"""Retry decision policy.

The policy answers two questions for the request loop: should attempt ``n``
be retried, and how long to wait before the next one. It never sleeps and
never re-issues a request itself.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable

import requests

from .errors import InvalidArgumentError

RetryOutcome = int | BaseException

# Network faults worth another attempt; other errors are the caller's.
TRANSPORT_FAULTS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
)


def _no_status_codes() -> frozenset[int]:
    return frozenset()


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff settings for one request attempt sequence.

    Delays are expressed in milliseconds. The delay before the retry that
    follows attempt ``n`` (0-indexed) is
    ``min(base_delay_ms * multiplier ** n, max_delay_ms)``, then scaled by a
    random factor in ``[1 - jitter_fraction, 1 + jitter_fraction]``.
    """

    max_retries: int = 0
    base_delay_ms: int = 0
    multiplier: float = 1.0
    max_delay_ms: int = 60_000
    jitter_fraction: float = 0.0
    retryable_status_codes: Iterable[int] = field(
        default_factory=_no_status_codes
    )

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise InvalidArgumentError("max_retries must be >= 0")
        if self.base_delay_ms < 0:
            raise InvalidArgumentError("base_delay_ms must be >= 0")
        if self.multiplier <= 0:
            raise InvalidArgumentError("multiplier must be > 0")
        if self.max_delay_ms < 0:
            raise InvalidArgumentError("max_delay_ms must be >= 0")
        if not 0.0 <= self.jitter_fraction <= 1.0:
            raise InvalidArgumentError("jitter_fraction must be within [0, 1]")

        object.__setattr__(
            self,
            "retryable_status_codes",
            frozenset(int(code) for code in self.retryable_status_codes),
        )

    def should_retry(self, attempt: int, outcome: RetryOutcome) -> bool:
        """Return True when attempt ``attempt`` should be followed by another.

        Args:
            attempt: Zero-based index of the attempt that just finished.
            outcome: The HTTP status code received, or the exception raised
                instead of a response. Only timeouts and connection errors
                count as transport failures.
        """
        if attempt >= self.max_retries:
            return False
        if isinstance(outcome, BaseException):
            return isinstance(outcome, TRANSPORT_FAULTS)
        return outcome in self.retryable_status_codes

    def compute_delay(
        self,
        attempt: int,
        uniform: Callable[[float, float], float] = random.uniform,
    ) -> float:
        """Return the wait in milliseconds after attempt ``attempt``."""
        if not self.base_delay_ms:
            return 0.0
        try:
            growth = float(self.multiplier) ** max(0, attempt)
        except OverflowError:
            growth = math.inf
        delay = min(self.base_delay_ms * growth, self.max_delay_ms)
        if self.jitter_fraction:
            delay *= 1 + uniform(-self.jitter_fraction, self.jitter_fraction)
        return max(0.0, delay)

    def delay_seconds(self, attempt: int) -> float:
        return self.compute_delay(attempt) / 1000.0
