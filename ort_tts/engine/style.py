"""Style vectors - Per-voice conditioning embeddings.

Approximation of a learned embedding table: each voice has a base
scalar, expanded across the 256 positions as a linear ramp

    value[i] = base * (0.5 + 0.5 * i / 255)

Only the shape (256 finite values, deterministic per voice) is a
contract; the values themselves are a placeholder.
"""

from __future__ import annotations

import numpy as np

from ort_tts.config.constants import TTS

DEFAULT_STYLE_BASE = 0.5

STYLE_BASES: dict[str, float] = {
    "af_jessica": 0.1,
    "af_bella": 0.2,
    "af_sarah": 0.3,
    "af_sky": 0.4,
    "af_kore": 0.5,
    "af_nicole": 0.6,
    "af_nova": 0.7,
    "af_river": 0.8,
    "am_adam": 0.9,
    "am_echo": 1.0,
    "am_eric": 0.15,
    "am_fenrir": 0.25,
    "am_liam": 0.35,
    "am_michael": 0.45,
    "am_onyx": 0.55,
    "am_puck": 0.65,
    "am_santa": 0.75,
    "jf_alpha": 0.85,
    "jm_kumo": 0.95,
    "zf_xiaobei": 0.5,
    "zm_yunjian": 0.6,
    "af": 0.5,
    "am": 0.8,
}


def style_base(voice_id: str) -> float:
    return STYLE_BASES.get(voice_id, DEFAULT_STYLE_BASE)


def style_vector(voice_id: str, dim: int = TTS.STYLE_DIM) -> np.ndarray:
    """Build the style embedding for a voice.

    Args:
        voice_id: Voice identifier (unknown voices use the default base)
        dim: Embedding width

    Returns:
        float32 array of shape (dim,)
    """
    ramp = np.linspace(0.0, 1.0, dim, dtype=np.float32)
    return (style_base(voice_id) * (0.5 + 0.5 * ramp)).astype(np.float32)
