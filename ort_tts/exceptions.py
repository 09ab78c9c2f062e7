"""ort-tts Exception Hierarchy.

Provides structured exception classes for the asset, tokenizer,
inference and model-lifecycle layers.

Hierarchy:
    OrtTTSError (base)
    ├── ValidationError
    ├── AssetError
    │   ├── AssetNotFoundError
    │   ├── DownloadError
    │   └── AssetWriteError
    ├── TokenizerLoadError
    ├── InferenceError
    └── ModelError
        ├── UnsupportedModelError
        ├── ModelNotLoadedError
        ├── NoSuitableModelError
        └── ModelLoadError
            └── ModelLoadTimeoutError

Timeouts on the network path are raised as
``ort_tts.utils.async_timeout.AsyncTimeoutError`` and are never folded
into ``DownloadError``.
"""

from typing import Any


class OrtTTSError(Exception):
    """Base exception for all ort-tts errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(OrtTTSError):
    """Raised for malformed synthesis input. Never retried."""

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, details, recoverable=False)
        self.field = field

    def __str__(self) -> str:
        # Surfaced verbatim to callers
        return self.message


# =============================================================================
# Asset Errors
# =============================================================================


class AssetError(OrtTTSError):
    """Base exception for cached/downloaded asset failures."""

    pass


class AssetNotFoundError(AssetError):
    """Raised when required cache files are missing."""

    def __init__(self, model_id: str, missing: list[str]) -> None:
        super().__init__(
            message=f"Cached model files not found for {model_id}: missing {', '.join(missing)}",
            details={"model_id": model_id, "missing": missing},
            recoverable=True,  # Network load can repopulate the cache
        )
        self.model_id = model_id
        self.missing = missing


class DownloadError(AssetError):
    """Raised when an HTTP download fails."""

    def __init__(
        self,
        filename: str,
        reason: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        details: dict[str, Any] = {"filename": filename, "reason": reason}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(
            message=f"Failed to download {filename}: {reason}",
            details=details,
            recoverable=True,
        )
        self.filename = filename
        self.status_code = status_code


class AssetWriteError(AssetError):
    """Raised when an asset cannot be persisted to the cache."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            message=f"Failed to write {path}: {reason}",
            details={"path": path, "reason": reason},
            recoverable=False,
        )


# =============================================================================
# Tokenizer Errors
# =============================================================================


class TokenizerLoadError(OrtTTSError):
    """Raised once every stage of the tokenizer repair chain has failed."""

    def __init__(self, path: str, attempts: list[str], reason: str) -> None:
        super().__init__(
            message=f"Could not load tokenizer {path}: {reason}",
            details={"path": path, "attempts": attempts},
            recoverable=False,
        )
        self.attempts = attempts


# =============================================================================
# Inference Errors
# =============================================================================


class InferenceError(OrtTTSError):
    """Raised when the inference engine fails or returns unusable output."""

    def __init__(self, reason: str, available_outputs: list[str] | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if available_outputs is not None:
            details["available_outputs"] = available_outputs
        super().__init__(
            message=f"Inference failed: {reason}",
            details=details,
            recoverable=False,
        )


# =============================================================================
# Model Errors
# =============================================================================


class ModelError(OrtTTSError):
    """Base exception for model lifecycle errors."""

    pass


class UnsupportedModelError(ModelError):
    """Raised for model identifiers with no known remote source."""

    def __init__(self, model_id: str) -> None:
        super().__init__(
            message=f"Only Kokoro-82M is supported. Model ID: {model_id}",
            details={"model_id": model_id},
            recoverable=False,
        )


class ModelNotLoadedError(ModelError):
    """Raised when a voice belongs to a known family whose model is not loaded."""

    def __init__(self, voice_id: str) -> None:
        super().__init__(
            message=(
                "Kokoro model is not loaded. Please ensure the model is "
                "installed and loaded properly."
            ),
            details={"voice_id": voice_id},
            recoverable=True,
        )


class NoSuitableModelError(ModelError):
    """Raised when no loaded model can serve a voice."""

    def __init__(self, voice_id: str) -> None:
        super().__init__(
            message="No suitable model loaded for voice",
            details={"voice_id": voice_id},
            recoverable=False,
        )


class ModelLoadError(ModelError):
    """Raised when both cache and network loads failed.

    ``voices_available`` tells callers whether the model's voices can
    still be listed even though synthesis is unavailable.
    """

    def __init__(
        self,
        model_id: str,
        reason: str,
        voices_available: bool = False,
    ) -> None:
        if voices_available:
            message = f"Model {model_id} could not be loaded but voices are available: {reason}"
        else:
            message = f"Failed to load model {model_id}: {reason}"
        super().__init__(
            message=message,
            details={"model_id": model_id, "voices_available": voices_available},
            recoverable=True,
        )
        self.model_id = model_id
        self.voices_available = voices_available


class ModelLoadTimeoutError(ModelLoadError):
    """Raised when the bounded network load expired.

    The message only promises listable voices when ``voices_available``
    is true, i.e. the model was installed before the load failed.
    """

    def __init__(
        self,
        model_id: str,
        timeout_s: float,
        voices_available: bool = False,
    ) -> None:
        super().__init__(
            model_id, f"timed out after {timeout_s}s", voices_available=voices_available
        )
        if voices_available:
            self.message = f"Model {model_id} download timed out but voices are available"
        else:
            self.message = (
                f"Model {model_id} download timed out; synthesis is currently unavailable"
            )
        self.details["timeout_s"] = timeout_s
        self.timeout_s = timeout_s
