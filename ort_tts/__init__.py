"""ort-tts - Neural text-to-speech over ONNX Runtime with self-repairing assets."""

__version__ = "0.1.0"

# Export exception hierarchy for easy importing
from ort_tts.exceptions import (
    OrtTTSError,
    ValidationError,
    AssetError,
    AssetNotFoundError,
    DownloadError,
    AssetWriteError,
    TokenizerLoadError,
    InferenceError,
    ModelError,
    UnsupportedModelError,
    ModelNotLoadedError,
    NoSuitableModelError,
    ModelLoadError,
    ModelLoadTimeoutError,
)

__all__ = [
    "__version__",
    # Base
    "OrtTTSError",
    # Validation
    "ValidationError",
    # Assets
    "AssetError",
    "AssetNotFoundError",
    "DownloadError",
    "AssetWriteError",
    # Tokenizer
    "TokenizerLoadError",
    # Inference
    "InferenceError",
    # Models
    "ModelError",
    "UnsupportedModelError",
    "ModelNotLoadedError",
    "NoSuitableModelError",
    "ModelLoadError",
    "ModelLoadTimeoutError",
]
