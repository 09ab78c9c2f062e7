"""Inference Engine Adapter - Tensor contract around an ONNX Runtime session.

Inputs:
    input_ids  int64    [1, N]     N in 1..512, each id in 0..100000
    style      float32  [1, 256]   finite
    speed      float32  [1]        finite, 0 < speed <= 3

The waveform is taken from the first output whose name matches one of
OUTPUT_NAME_PRIORITY. Exported models name that tensor inconsistently.

The session is used only while holding the engine lock; output is
copied out of engine-owned buffers and validated before the lock is
released.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Protocol, Sequence

import numpy as np
import onnxruntime as ort

from ort_tts.config.constants import OUTPUT_NAME_PRIORITY, TTS
from ort_tts.exceptions import InferenceError, ValidationError
from ort_tts.observability.logging import get_logger

logger = get_logger(__name__)


class SessionLike(Protocol):
    """Subset of onnxruntime.InferenceSession used by the adapter."""

    def get_inputs(self) -> list[Any]: ...

    def get_outputs(self) -> list[Any]: ...

    def run(self, output_names: list[str] | None, input_feed: dict[str, Any]) -> list[Any]: ...


def create_session(model_path: Path, intra_op_threads: int = 1) -> ort.InferenceSession:
    """Create a CPU-only inference session with basic graph optimization
    and sequential execution."""
    options = ort.SessionOptions()
    options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_BASIC
    options.execution_mode = ort.ExecutionMode.ORT_SEQUENTIAL
    options.intra_op_num_threads = intra_op_threads

    session = ort.InferenceSession(
        str(model_path),
        options,
        providers=["CPUExecutionProvider"],
    )
    logger.info(
        "inference_session_created",
        model_path=str(model_path),
        inputs=[i.name for i in session.get_inputs()],
        outputs=[o.name for o in session.get_outputs()],
    )
    return session


def validate_token_ids(token_ids: Sequence[int]) -> np.ndarray:
    """Check the token sequence and return it as int64."""
    if len(token_ids) == 0:
        raise ValidationError("Tokenization produced no tokens", field="input_ids")

    if len(token_ids) > TTS.MAX_TOKENS:
        raise ValidationError(
            f"Tokenized sequence too long (max {TTS.MAX_TOKENS} tokens)",
            field="input_ids",
            value=len(token_ids),
        )

    ids = np.asarray(token_ids, dtype=np.int64)
    bad = ids[(ids < 0) | (ids > TTS.MAX_TOKEN_ID)]
    if bad.size:
        raise ValidationError(
            f"Invalid token value: {int(bad[0])}",
            field="input_ids",
            value=int(bad[0]),
        )
    return ids


def validate_style(style: Sequence[float] | np.ndarray) -> np.ndarray:
    """Check the style vector and return it as float32."""
    vector = np.asarray(style, dtype=np.float32).reshape(-1)

    if vector.size != TTS.STYLE_DIM:
        raise ValidationError(
            f"Style vector must be {TTS.STYLE_DIM} dimensions, got {vector.size}",
            field="style",
            value=int(vector.size),
        )

    non_finite = np.flatnonzero(~np.isfinite(vector))
    if non_finite.size:
        i = int(non_finite[0])
        raise ValidationError(
            f"Style vector contains non-finite value at index {i}: {vector[i]}",
            field="style",
        )
    return vector


def validate_speed(speed: float) -> float:
    if not np.isfinite(speed) or speed <= 0.0 or speed > TTS.MAX_SPEED:
        raise ValidationError(
            f"Speed must be finite and between 0.0 and {TTS.MAX_SPEED}, got {speed}",
            field="speed",
            value=speed,
        )
    return float(speed)


def build_feeds(
    token_ids: Sequence[int],
    style: Sequence[float] | np.ndarray,
    speed: float,
) -> dict[str, np.ndarray]:
    """Validate inputs and build the named input tensors.

    Raises:
        ValidationError: If any input breaks the tensor contract
    """
    ids = validate_token_ids(token_ids)
    vector = validate_style(style)
    speed = validate_speed(speed)

    return {
        "input_ids": ids.reshape(1, -1),
        "style": vector.reshape(1, TTS.STYLE_DIM),
        "speed": np.array([speed], dtype=np.float32),
    }


def extract_waveform(outputs: dict[str, Any]) -> np.ndarray:
    """Pick the waveform tensor out of a named output collection.

    Raises:
        InferenceError: If no conventional output name is present
    """
    for name in OUTPUT_NAME_PRIORITY:
        if name in outputs:
            return np.array(outputs[name], dtype=np.float32, copy=True).reshape(-1)

    raise InferenceError(
        f"No audio output found in model. Available outputs: {sorted(outputs)}",
        available_outputs=sorted(outputs),
    )


class InferenceEngine:
    """Exclusive-access wrapper around one inference session.

    Usage:
        engine = InferenceEngine(create_session(model_path))
        audio = engine.run(token_ids, style_vector("af"), speed=1.0)
    """

    def __init__(self, session: SessionLike) -> None:
        self._session: SessionLike | None = session
        self._lock = threading.Lock()

    @property
    def input_names(self) -> list[str]:
        with self._lock:
            return [i.name for i in self._require_session().get_inputs()]

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def _require_session(self) -> SessionLike:
        if self._session is None:
            raise InferenceError("inference session is closed")
        return self._session

    def run(
        self,
        token_ids: Sequence[int],
        style: Sequence[float] | np.ndarray,
        speed: float = 1.0,
    ) -> np.ndarray:
        """Run inference and return a validated mono waveform.

        Raises:
            ValidationError: Inputs break the tensor contract
            InferenceError: Engine failure, missing output, or bad samples
        """
        feeds = build_feeds(token_ids, style, speed)
        logger.debug(
            "inference_started",
            input_ids_shape=list(feeds["input_ids"].shape),
            speed=float(feeds["speed"][0]),
        )

        with self._lock:
            session = self._require_session()
            output_names = [o.name for o in session.get_outputs()]

            try:
                values = session.run(None, feeds)
            except Exception as e:
                raise InferenceError(f"engine failure: {e}")

            audio = extract_waveform(dict(zip(output_names, values)))

            if audio.size == 0:
                raise InferenceError("Model produced empty audio output")

            invalid = int(np.count_nonzero(~np.isfinite(audio)))
            if invalid:
                raise InferenceError(f"Model produced {invalid} invalid audio samples")

        logger.debug("inference_completed", samples=int(audio.size))
        return audio

    def close(self) -> None:
        """Release the session."""
        with self._lock:
            self._session = None
