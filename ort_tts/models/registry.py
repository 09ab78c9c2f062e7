"""Model Registry - Loaded models and the current-model pointer.

Explicit state handed to whoever needs it; there is no module-level
instance. Lifecycle: ``initialize()`` at startup, ``teardown()`` at exit.

State access is serialized by a short-held thread lock. Loads of the
same identifier are serialized by a per-identifier asyncio lock so a
model is never loaded twice concurrently.
"""

from __future__ import annotations

import asyncio
import threading

from ort_tts.models.catalog import FALLBACK_MODEL_ID
from ort_tts.models.loaded import FallbackModel, LoadedModel, close_model, has_voice
from ort_tts.observability.logging import get_logger

logger = get_logger(__name__)


class ModelRegistry:
    """Mapping from model identifier to LoadedModel.

    Usage:
        registry = ModelRegistry()
        registry.initialize()
        async with registry.load_lock(model_id):
            if registry.get(model_id) is None:
                registry.put(await build(model_id))
        registry.teardown()
    """

    def __init__(self, fallback_enabled: bool = True) -> None:
        self._fallback_enabled = fallback_enabled
        self._models: dict[str, LoadedModel] = {}
        self._current_id: str | None = None
        self._lock = threading.Lock()
        self._load_locks: dict[str, asyncio.Lock] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Register the fallback synthesizer (when enabled). Idempotent."""
        with self._lock:
            if self._fallback_enabled and FALLBACK_MODEL_ID not in self._models:
                self._models[FALLBACK_MODEL_ID] = FallbackModel()
            self._initialized = True
        logger.info(
            "model_registry_initialized",
            fallback_enabled=self._fallback_enabled,
            models=self.loaded_ids(),
        )

    def teardown(self) -> None:
        """Release every model and reset to empty."""
        with self._lock:
            models = list(self._models.values())
            self._models.clear()
            self._current_id = None
            self._load_locks.clear()
            self._initialized = False

        for model in models:
            close_model(model)
        logger.info("model_registry_torn_down", released=len(models))

    def load_lock(self, model_id: str) -> asyncio.Lock:
        with self._lock:
            lock = self._load_locks.get(model_id)
            if lock is None:
                lock = self._load_locks[model_id] = asyncio.Lock()
            return lock

    def get(self, model_id: str) -> LoadedModel | None:
        with self._lock:
            return self._models.get(model_id)

    def __contains__(self, model_id: str) -> bool:
        with self._lock:
            return model_id in self._models

    def put(self, model: LoadedModel, make_current: bool = True) -> None:
        """Store a model; it becomes current unless told otherwise."""
        with self._lock:
            previous = self._models.get(model.model_id)
            self._models[model.model_id] = model
            if make_current:
                self._current_id = model.model_id

        if previous is not None and previous is not model:
            close_model(previous)

    def evict(self, model_id: str) -> LoadedModel | None:
        """Remove a model, clearing the current pointer if it named it."""
        with self._lock:
            model = self._models.pop(model_id, None)
            if self._current_id == model_id:
                self._current_id = None

        if model is not None:
            close_model(model)
        return model

    @property
    def current_id(self) -> str | None:
        with self._lock:
            return self._current_id

    def current(self) -> LoadedModel | None:
        with self._lock:
            if self._current_id is None:
                return None
            return self._models.get(self._current_id)

    def find_for_voice(self, voice_id: str) -> LoadedModel | None:
        """The first model that owns ``voice_id``, else the current model."""
        with self._lock:
            for model in self._models.values():
                if has_voice(model, voice_id):
                    return model
            if self._current_id is not None:
                return self._models.get(self._current_id)
            return None

    def loaded_ids(self) -> list[str]:
        with self._lock:
            return list(self._models)

    def models(self) -> list[LoadedModel]:
        with self._lock:
            return list(self._models.values())
