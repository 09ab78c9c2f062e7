"""Model catalog - Known models and their static voice tables."""

from __future__ import annotations

from ort_tts.assets.layout import AssetResolver
from ort_tts.assets.remote import KOKORO_MODEL_ID
from ort_tts.interface import ModelDescriptor, VoiceDescriptor

FALLBACK_MODEL_ID = "espeak-ng"

# Voice-id prefixes that belong to the Kokoro family
KOKORO_VOICE_PREFIXES: tuple[str, ...] = ("af", "am", "jf", "jm", "zf", "zm")

# (id, name, gender, language)
_KOKORO_VOICES: tuple[tuple[str, str, str, str], ...] = (
    ("af", "Female (Default)", "female", "English"),
    ("af_heart", "Female (Heart)", "female", "English"),
    ("af_alloy", "Female (Alloy)", "female", "English"),
    ("af_aoede", "Female (Aoede)", "female", "English"),
    ("af_bella", "Female (Bella)", "female", "English"),
    ("af_jessica", "Female (Jessica)", "female", "English"),
    ("af_kore", "Female (Kore)", "female", "English"),
    ("af_nicole", "Female (Nicole)", "female", "English"),
    ("af_nova", "Female (Nova)", "female", "English"),
    ("af_river", "Female (River)", "female", "English"),
    ("af_sarah", "Female (Sarah)", "female", "English"),
    ("af_sky", "Female (Sky)", "female", "English"),
    ("am_adam", "Male (Adam)", "male", "English"),
    ("am_echo", "Male (Echo)", "male", "English"),
    ("am_eric", "Male (Eric)", "male", "English"),
    ("am_fenrir", "Male (Fenrir)", "male", "English"),
    ("am_liam", "Male (Liam)", "male", "English"),
    ("am_michael", "Male (Michael)", "male", "English"),
    ("am_onyx", "Male (Onyx)", "male", "English"),
    ("am_puck", "Male (Puck)", "male", "English"),
    ("am_santa", "Male (Santa)", "male", "English"),
    ("jf_alpha", "Japanese Female (Alpha)", "female", "Japanese"),
    ("jm_kumo", "Japanese Male (Kumo)", "male", "Japanese"),
    ("zf_xiaobei", "Chinese Female (Xiaobei)", "female", "Chinese"),
    ("zm_yunjian", "Chinese Male (Yunjian)", "male", "Chinese"),
)

_FALLBACK_VOICES: tuple[tuple[str, str, str, str], ...] = (
    ("espeak-en", "eSpeak English", "neutral", "en-US"),
    ("espeak-es", "eSpeak Spanish", "neutral", "es-ES"),
)


def kokoro_voices(model_id: str = KOKORO_MODEL_ID) -> list[VoiceDescriptor]:
    return [VoiceDescriptor(*row, model_id=model_id) for row in _KOKORO_VOICES]


def fallback_voices() -> list[VoiceDescriptor]:
    return [VoiceDescriptor(*row, model_id=FALLBACK_MODEL_ID) for row in _FALLBACK_VOICES]


def default_voice() -> VoiceDescriptor:
    """Voice listed when nothing else is available."""
    return fallback_voices()[0]


def static_voices(model_id: str) -> list[VoiceDescriptor]:
    """Voices known for a model without loading it."""
    if model_id == KOKORO_MODEL_ID:
        return kokoro_voices(model_id)
    if model_id == FALLBACK_MODEL_ID:
        return fallback_voices()
    return []


def is_kokoro_voice(voice_id: str) -> bool:
    return voice_id.startswith(KOKORO_VOICE_PREFIXES)


def fallback_model() -> ModelDescriptor:
    """The fallback synthesizer needs no assets and is always installed."""
    return ModelDescriptor(
        id=FALLBACK_MODEL_ID,
        name="eSpeak NG (Fallback)",
        size=5_000_000,
        quality="low",
        languages=("Multiple",),
        installed=True,
    )


def list_models(resolver: AssetResolver) -> list[ModelDescriptor]:
    """Known models with their installed flags."""
    return [
        ModelDescriptor(
            id=KOKORO_MODEL_ID,
            name="Kokoro-82M (ONNX Community)",
            size=82_000_000,
            quality="high",
            languages=("English", "Japanese", "Chinese"),
            installed=resolver.is_installed(KOKORO_MODEL_ID),
        ),
        fallback_model(),
    ]
