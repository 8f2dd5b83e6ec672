"""Retry decorators using tenacity."""

from __future__ import annotations

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

TRANSIENT_ERRORS = (TimeoutError, ConnectionError, OSError)


def retry_transient(max_attempts: int = 2, *, max_wait: float = 2.0):
    """Retry a provider call on transient I/O errors with short exponential backoff.

    The last error is re-raised once attempts are exhausted.
    """
    return retry(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=0.2, min=0, max=max_wait),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        reraise=True,
    )
