"""Fallback synthesizer - Audible placeholder when no neural model is loaded.

Produces a 440 Hz sine at amplitude 0.3, 0.1 s per character of input,
at 22050 Hz. Only the volume option is honored.
"""

from __future__ import annotations

import numpy as np

from ort_tts.audio.postprocess import apply_volume
from ort_tts.config.constants import TTS
from ort_tts.interface import SynthesisOptions

TONE_HZ = 440.0
TONE_AMPLITUDE = 0.3
SECONDS_PER_CHAR = 0.1


def synthesize_fallback(
    text: str,
    options: SynthesisOptions | None = None,
    sample_rate: int = TTS.FALLBACK_SAMPLE_RATE,
) -> np.ndarray:
    """Render a fixed tone whose duration tracks the text length."""
    num_samples = max(1, int(len(text) * SECONDS_PER_CHAR * sample_rate))
    t = np.arange(num_samples, dtype=np.float32) / sample_rate
    tone = (TONE_AMPLITUDE * np.sin(2.0 * np.pi * TONE_HZ * t)).astype(np.float32)

    if options is not None:
        tone = apply_volume(tone, options.volume)
    return tone
