"""Async Timeout Utilities.

Provides the bounded-time wrapper used around network model loads and
the timeout exception callers use to tell "try again later" apart from
"asset unavailable".
"""

import asyncio
from typing import Awaitable, TypeVar

from ort_tts.exceptions import OrtTTSError

T = TypeVar("T")


class AsyncTimeoutError(OrtTTSError):
    """Raised when an async operation times out."""

    def __init__(
        self,
        operation: str,
        timeout_s: float,
        details: dict | None = None,
    ) -> None:
        super().__init__(
            message=f"{operation} timed out after {timeout_s}s",
            details={
                "operation": operation,
                "timeout_s": timeout_s,
                **(details or {}),
            },
            recoverable=True,  # Caller can retry
        )
        self.operation = operation
        self.timeout_s = timeout_s


async def with_timeout(
    coro: Awaitable[T],
    timeout_s: float,
    operation: str = "operation",
) -> T:
    """Execute a coroutine with a timeout.

    On expiry the wrapped coroutine is cancelled where it stands; any
    file it was writing is left as-is.

    Args:
        coro: Coroutine to execute
        timeout_s: Maximum time in seconds
        operation: Name of operation for error messages

    Returns:
        Result of the coroutine

    Raises:
        AsyncTimeoutError: If operation times out

    Example:
        model = await with_timeout(
            loader.load_from_network(model_id),
            timeout_s=60.0,
            operation="network model load",
        )
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout_s)
    except asyncio.TimeoutError:
        raise AsyncTimeoutError(operation, timeout_s)
