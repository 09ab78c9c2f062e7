"""Inference engine adapter and voice conditioning."""

from ort_tts.engine.session import (
    InferenceEngine,
    SessionLike,
    build_feeds,
    create_session,
    extract_waveform,
)
from ort_tts.engine.style import STYLE_BASES, style_base, style_vector

__all__ = [
    "InferenceEngine",
    "STYLE_BASES",
    "SessionLike",
    "build_feeds",
    "create_session",
    "extract_waveform",
    "style_base",
    "style_vector",
]
