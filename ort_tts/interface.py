"""Public data types exchanged with callers.

Descriptors are immutable and built on demand for listing. Options and
results travel across the synthesis boundary.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from ort_tts.config.constants import TTS
from ort_tts.exceptions import ValidationError


@dataclass(frozen=True)
class ModelDescriptor:
    """A model as shown in listings."""

    id: str
    name: str
    size: int
    quality: str
    languages: tuple[str, ...] = ()
    installed: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["languages"] = list(self.languages)
        return data


@dataclass(frozen=True)
class VoiceDescriptor:
    """A voice and the model that owns it."""

    id: str
    name: str
    gender: str
    language: str
    model_id: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SynthesisOptions:
    """Optional audio modifications. ``None`` means no modification."""

    pitch: float | None = None  # Semitones
    speed: float | None = None  # Multiplier
    volume: float | None = None  # dB

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SynthesisOptions | None:
        """Build options from a loosely-typed payload; unknown keys are ignored."""
        if data is None:
            return None
        values: dict[str, float | None] = {}
        for key in ("pitch", "speed", "volume"):
            value = data.get(key)
            if value is not None and not isinstance(value, (int, float)):
                raise ValidationError(f"Option {key} must be a number", field=key, value=value)
            values[key] = None if value is None else float(value)
        return cls(**values)

    def validate(self) -> None:
        """Reject out-of-range values.

        Raises:
            ValidationError: speed outside (0, 3], or a non-finite value
        """
        if self.speed is not None:
            if not math.isfinite(self.speed) or self.speed <= 0.0 or self.speed > TTS.MAX_SPEED:
                raise ValidationError(
                    f"Speed must be finite and between 0.0 and {TTS.MAX_SPEED}, got {self.speed}",
                    field="speed",
                    value=self.speed,
                )
        for key in ("pitch", "volume"):
            value = getattr(self, key)
            if value is not None and not math.isfinite(value):
                raise ValidationError(f"Option {key} must be finite", field=key, value=value)

    @property
    def effective_speed(self) -> float:
        return 1.0 if self.speed is None else self.speed


@dataclass
class SynthesisResult:
    """Outcome of a synthesis request: WAV bytes, or a descriptive error."""

    audio: bytes = b""
    sample_rate: int = TTS.NATIVE_SAMPLE_RATE
    num_samples: int = 0
    error: str | None = None
    error_type: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def duration_s(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.num_samples / self.sample_rate
