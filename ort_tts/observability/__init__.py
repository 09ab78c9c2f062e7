"""Observability module (structured logging)."""

from ort_tts.observability.logging import (
    ModelLoadLogger,
    bind_model,
    configure_logging,
    get_logger,
    init_logging,
    unbind_model,
)

__all__ = [
    "ModelLoadLogger",
    "bind_model",
    "configure_logging",
    "get_logger",
    "init_logging",
    "unbind_model",
]
