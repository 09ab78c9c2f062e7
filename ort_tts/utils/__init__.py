"""Utilities module."""

from ort_tts.utils.async_timeout import AsyncTimeoutError, with_timeout

__all__ = [
    "AsyncTimeoutError",
    "with_timeout",
]
