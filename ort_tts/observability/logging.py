"""Structured Logging - JSON logs with correlation.

Provides structured logging for:
- Model load lifecycle (cache hit, network fetch, fallback, timeout)
- Cache maintenance
- Tokenizer repair
- Synthesis requests

Logs emitted while a model is loading carry model_id for correlation.
"""

import logging
import sys

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON; else human-readable
    """
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def bind_model(model_id: str) -> None:
    """Bind model_id to all logs in current context."""
    structlog.contextvars.bind_contextvars(model_id=model_id)


def unbind_model() -> None:
    """Remove model_id from log context."""
    structlog.contextvars.unbind_contextvars("model_id")


class ModelLoadLogger:
    """Logger for model load lifecycle events."""

    def __init__(self, model_id: str) -> None:
        self._model_id = model_id
        self._log = get_logger("model_load").bind(model_id=model_id)

    def load_started(self, installed: bool) -> None:
        """Log load start."""
        self._log.info(
            "model_load_started",
            event_type="model.load_started",
            installed=installed,
        )

    def already_loaded(self) -> None:
        self._log.info("model_already_loaded", event_type="model.already_loaded")

    def cache_load_failed(self, error: str) -> None:
        """Log a failed cache-only load before the network retry."""
        self._log.warning(
            "model_cache_load_failed",
            event_type="model.cache_load_failed",
            error=error,
        )

    def network_load_failed(self, error: str) -> None:
        self._log.warning(
            "model_network_load_failed",
            event_type="model.network_load_failed",
            error=error,
        )

    def network_load_timeout(self, timeout_s: float) -> None:
        """Log an abandoned network load."""
        self._log.warning(
            "model_network_load_timeout",
            event_type="model.network_load_timeout",
            timeout_s=timeout_s,
        )

    def load_completed(self, source: str, elapsed_ms: float) -> None:
        """Log successful load."""
        self._log.info(
            "model_load_completed",
            event_type="model.load_completed",
            source=source,
            elapsed_ms=elapsed_ms,
        )

    def evicted(self) -> None:
        self._log.info("model_evicted", event_type="model.evicted")


def init_logging(json_format: bool = True, level: str = "INFO") -> None:
    """Initialize logging with defaults.

    Call this once at application startup.
    """
    configure_logging(level=level, json_format=json_format)
