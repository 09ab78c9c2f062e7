"""Audio Post-Processor - Ordered transforms applied after inference.

Pipeline (order matters):
1. sanitize  - non-finite samples become silence, then clamp to [-1, 1]
2. volume    - dB gain (10^(dB/20)), re-clamped
3. speed     - nearest-neighbor index mapping at ratio ``speed``
4. pitch     - not applied inline

Changes smaller than MODIFICATION_EPSILON are skipped. Every sample
leaving ``AudioPostProcessor.process`` is finite and within [-1, 1].

``resample_speed`` (FFT, band-limited) and ``pitch_shift_stub`` are
separate opt-in routines and are not part of the inline pipeline.
"""

from __future__ import annotations

import numpy as np
from scipy import signal

from ort_tts.config.constants import TTS
from ort_tts.interface import SynthesisOptions
from ort_tts.observability.logging import get_logger

logger = get_logger(__name__)


def sanitize(samples: np.ndarray) -> np.ndarray:
    """Replace NaN/inf with 0.0 and clamp to [-1, 1]."""
    audio = np.asarray(samples, dtype=np.float32)
    audio = np.nan_to_num(audio, nan=0.0, posinf=0.0, neginf=0.0)
    return np.clip(audio, -1.0, 1.0)


def db_to_gain(volume_db: float) -> float:
    return float(10.0 ** (volume_db / 20.0))


def apply_volume(samples: np.ndarray, volume_db: float | None) -> np.ndarray:
    """Scale by a dB adjustment and re-clamp."""
    if volume_db is None or abs(volume_db) <= TTS.MODIFICATION_EPSILON:
        return samples
    return np.clip(samples * db_to_gain(volume_db), -1.0, 1.0).astype(np.float32)


def apply_speed(samples: np.ndarray, speed: float | None) -> np.ndarray:
    """Nearest-neighbor decimation/duplication; output length is about len / speed.

    Not band-limited. A non-empty input always yields a non-empty output.
    """
    if speed is None or abs(speed - 1.0) <= TTS.MODIFICATION_EPSILON or samples.size == 0:
        return samples

    new_len = max(1, int(samples.size / speed))
    indices = (np.arange(new_len) * speed).astype(np.int64)
    indices = indices[indices < samples.size]
    return samples[indices]


def resample_speed(samples: np.ndarray, speed: float) -> np.ndarray:
    """FFT-based speed change; output length is round(len / speed).

    Band-limited alternative to ``apply_speed`` for explicit speed
    changes. Output is clamped to [-1, 1] since ringing can overshoot.
    """
    audio = np.asarray(samples, dtype=np.float32)
    if abs(speed - 1.0) <= TTS.MODIFICATION_EPSILON or audio.size == 0:
        return audio

    new_len = max(1, int(round(audio.size / speed)))
    resampled = signal.resample(audio, new_len)
    return np.clip(resampled, -1.0, 1.0).astype(np.float32)


def pitch_shift_stub(samples: np.ndarray, semitones: float) -> np.ndarray:
    """Placeholder pitch shift by linear-interpolated resampling.

    Upward shifts read the signal faster and zero-fill the tail, so
    duration is kept but the tail goes silent; downward shifts return
    the input unchanged. Not used by the inline pipeline.
    """
    audio = np.array(samples, dtype=np.float32, copy=True)
    if abs(semitones) <= TTS.MODIFICATION_EPSILON or audio.size < 2:
        return audio

    factor = 2.0 ** (semitones / 12.0)
    if factor <= 1.0:
        return audio

    positions = np.arange(0.0, audio.size - 1, factor)
    positions = positions[: audio.size]
    shifted = np.interp(positions, np.arange(audio.size), audio).astype(np.float32)

    out = np.zeros_like(audio)
    out[: shifted.size] = shifted
    return out


class AudioPostProcessor:
    """Applies synthesis options to a raw waveform.

    Usage:
        processor = AudioPostProcessor()
        audio = processor.process(raw, SynthesisOptions(volume=6.0))
    """

    def process(
        self,
        samples: np.ndarray,
        options: SynthesisOptions | None = None,
    ) -> np.ndarray:
        audio = sanitize(samples)
        if options is None:
            return audio

        audio = apply_volume(audio, options.volume)
        audio = apply_speed(audio, options.speed)

        if options.pitch is not None and abs(options.pitch) > TTS.MODIFICATION_EPSILON:
            logger.debug("pitch_shift_skipped", pitch=options.pitch)

        return sanitize(audio)
