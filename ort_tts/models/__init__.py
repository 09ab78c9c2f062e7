"""Model catalog, loaded-model variants, loading and registry."""

from ort_tts.models.catalog import (
    FALLBACK_MODEL_ID,
    KOKORO_VOICE_PREFIXES,
    is_kokoro_voice,
    list_models,
    static_voices,
)
from ort_tts.models.loaded import (
    FallbackModel,
    LoadedModel,
    ModelConfig,
    NativeModel,
    render,
    validate_text,
)
from ort_tts.models.loader import ModelLoader
from ort_tts.models.progress import ProgressCallback, ProgressEvent, ProgressReporter
from ort_tts.models.registry import ModelRegistry

__all__ = [
    "FALLBACK_MODEL_ID",
    "FallbackModel",
    "KOKORO_VOICE_PREFIXES",
    "LoadedModel",
    "ModelConfig",
    "ModelLoader",
    "ModelRegistry",
    "NativeModel",
    "ProgressCallback",
    "ProgressEvent",
    "ProgressReporter",
    "is_kokoro_voice",
    "list_models",
    "render",
    "static_voices",
    "validate_text",
]
