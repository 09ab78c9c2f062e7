"""WAV encoding - mono 16-bit PCM."""

from __future__ import annotations

import io

import numpy as np
import soundfile as sf

from ort_tts.config.constants import TTS


def to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Scale [-1, 1] floats to int16 (x * 32767, clamped)."""
    scaled = np.asarray(samples, dtype=np.float32) * 32767.0
    return np.clip(scaled, -32768, 32767).astype(np.int16)


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode a mono float waveform as WAV bytes."""
    buffer = io.BytesIO()
    sf.write(buffer, to_pcm16(samples), sample_rate, format="WAV", subtype=TTS.WAV_SUBTYPE)
    return buffer.getvalue()
