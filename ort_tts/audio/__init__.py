"""Audio post-processing, fallback tone and WAV encoding."""

from ort_tts.audio.fallback import synthesize_fallback
from ort_tts.audio.postprocess import (
    AudioPostProcessor,
    apply_speed,
    apply_volume,
    pitch_shift_stub,
    resample_speed,
    sanitize,
)
from ort_tts.audio.wav import encode_wav

__all__ = [
    "AudioPostProcessor",
    "apply_speed",
    "apply_volume",
    "encode_wav",
    "pitch_shift_stub",
    "resample_speed",
    "sanitize",
    "synthesize_fallback",
]
