"""Loaded models - The two variants a registry entry can hold.

``LoadedModel`` is a closed union:

- NativeModel: exclusively owns an inference engine, its parsed
  config, its voice list and its tokenizer
- FallbackModel: stateless tone synthesizer, always available

Operations dispatch on the concrete variant rather than through a
shared base class.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field
from tokenizers import Tokenizer

from ort_tts.audio.fallback import synthesize_fallback
from ort_tts.audio.postprocess import AudioPostProcessor, sanitize
from ort_tts.config.constants import TTS
from ort_tts.engine.session import InferenceEngine
from ort_tts.engine.style import style_vector
from ort_tts.exceptions import ValidationError
from ort_tts.interface import SynthesisOptions, VoiceDescriptor
from ort_tts.models.catalog import FALLBACK_MODEL_ID, fallback_voices, static_voices
from ort_tts.observability.logging import get_logger

logger = get_logger(__name__)


class VoiceConfig(BaseModel):
    id: str
    name: str
    gender: str
    language: str


class ModelConfig(BaseModel):
    """Parsed ``config.json``. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    model_type: str | None = None
    sample_rate: int = Field(default=TTS.NATIVE_SAMPLE_RATE, gt=0)
    max_length: int = Field(default=TTS.MAX_TOKENS, gt=0)
    voices: list[VoiceConfig] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: Path) -> ModelConfig:
        return cls.model_validate(json.loads(path.read_text(encoding="utf-8")))


def validate_text(text: str) -> None:
    """Reject text that must never reach the tokenizer.

    Raises:
        ValidationError: Empty (after trimming) or longer than 1000 characters
    """
    if not text or not text.strip():
        raise ValidationError("Text input cannot be empty", field="text")
    if len(text) > TTS.MAX_TEXT_CHARS:
        raise ValidationError(
            f"Text too long (max {TTS.MAX_TEXT_CHARS} characters)",
            field="text",
            value=len(text),
        )


@dataclass
class NativeModel:
    """A neural model ready for inference."""

    model_id: str
    engine: InferenceEngine
    config: ModelConfig
    tokenizer: Tokenizer
    voices: list[VoiceDescriptor] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.voices:
            self.voices = [
                VoiceDescriptor(v.id, v.name, v.gender, v.language, self.model_id)
                for v in self.config.voices
            ] or static_voices(self.model_id)
        if not self.voices:
            raise ValueError(f"model {self.model_id} has no voices")

    def encode(self, text: str) -> list[int]:
        return list(self.tokenizer.encode(text.strip(), add_special_tokens=False).ids)


@dataclass
class FallbackModel:
    """The always-available placeholder synthesizer."""

    model_id: str = FALLBACK_MODEL_ID
    voices: list[VoiceDescriptor] = field(default_factory=fallback_voices)


LoadedModel = Union[NativeModel, FallbackModel]


def voices_of(model: LoadedModel) -> list[VoiceDescriptor]:
    return list(model.voices)


def has_voice(model: LoadedModel, voice_id: str) -> bool:
    return any(v.id == voice_id for v in model.voices)


def sample_rate_of(model: LoadedModel) -> int:
    if isinstance(model, NativeModel):
        return model.config.sample_rate
    return TTS.FALLBACK_SAMPLE_RATE


def render(
    model: LoadedModel,
    text: str,
    voice_id: str,
    options: SynthesisOptions | None = None,
    processor: AudioPostProcessor | None = None,
) -> np.ndarray:
    """Synthesize ``text`` with ``model`` and return post-processed samples.

    CPU-bound; call from a worker thread when serving async callers.

    Raises:
        ValidationError: Text, options or tensor inputs are invalid
        InferenceError: The engine failed or produced unusable output
    """
    validate_text(text)
    if options is not None:
        options.validate()

    if isinstance(model, NativeModel):
        token_ids = model.encode(text)
        speed = 1.0 if options is None else options.effective_speed
        raw = model.engine.run(token_ids, style_vector(voice_id), speed=speed)
        audio = (processor or AudioPostProcessor()).process(raw, options)
        logger.debug(
            "native_synthesis_completed",
            model_id=model.model_id,
            voice_id=voice_id,
            tokens=len(token_ids),
            samples=int(audio.size),
        )
        return audio

    if isinstance(model, FallbackModel):
        return sanitize(synthesize_fallback(text, options))

    raise TypeError(f"unknown model variant: {type(model).__name__}")


def close_model(model: LoadedModel) -> None:
    """Release resources held by a model."""
    if isinstance(model, NativeModel):
        model.engine.close()
