"""Progress signal - Milestones emitted while a model is fetched.

Each event is delivered as the tuple
``(is_final, label, percent, total, percent_int)`` to a caller-supplied
callback, sync or async. Milestones: 0 at start, one per fetched asset,
100 when the model is ready.
"""

from __future__ import annotations

import inspect
from dataclasses import astuple, dataclass
from typing import Any, Awaitable, Callable, Union

from ort_tts.config.constants import PROGRESS_DONE
from ort_tts.observability.logging import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[bool, str, float, int, int], Union[None, Awaitable[None]]]

PROGRESS_TOTAL = 100


@dataclass(frozen=True)
class ProgressEvent:
    is_final: bool
    label: str
    percent: float
    total: int
    percent_int: int

    def as_tuple(self) -> tuple[Any, ...]:
        return astuple(self)


class ProgressReporter:
    """Delivers progress events for one load.

    Callback failures are logged and never interrupt the load.

    Usage:
        reporter = ProgressReporter(on_progress, label="model.onnx")
        await reporter.emit(40.0)
        await reporter.finish("hexgrad/Kokoro-82M")
    """

    def __init__(self, callback: ProgressCallback | None, label: str = "") -> None:
        self._callback = callback
        self._label = label
        self.events: list[ProgressEvent] = []

    async def emit(self, percent: float, label: str | None = None, final: bool = False) -> None:
        event = ProgressEvent(
            is_final=final,
            label=self._label if label is None else label,
            percent=float(percent),
            total=PROGRESS_TOTAL,
            percent_int=int(percent),
        )
        self.events.append(event)

        if self._callback is None:
            return

        try:
            result = self._callback(*event.as_tuple())
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(
                "progress_callback_error",
                callback=getattr(self._callback, "__name__", str(self._callback)),
                percent=event.percent,
                error=str(e),
            )

    async def finish(self, label: str) -> None:
        """Emit the terminal event."""
        await self.emit(PROGRESS_DONE, label=label, final=True)
