"""TTS Service - Single entry point for listing, loading and synthesis.

Usage:
    service = TTSService(get_settings())
    await service.init()

    await service.load_model(progress=on_progress)  # settings.default_model_id
    result = await service.synthesize("Hello world", "af")
    if result.ok:
        play(result.audio)

    await service.shutdown()

Load policy for a model identifier:
1. Already loaded: return immediately
2. Installed locally: cache-only load
3. Cache load failed: clear the cache, then a time-bounded network load.
   Failure raises ModelLoadError with voices_available=True;
   expiry raises ModelLoadTimeoutError
4. Not installed: time-bounded network load; failure raises ModelLoadError,
   expiry raises ModelLoadTimeoutError (voices_available=False)

Listing never raises. Synthesis never raises; failures come back as a
SynthesisResult carrying a descriptive error string.
"""

from __future__ import annotations

import asyncio
import time

from ort_tts.assets.downloader import Downloader
from ort_tts.assets.layout import AssetResolver, CacheLayout
from ort_tts.assets.remote import KOKORO_MODEL_ID, is_downloadable
from ort_tts.audio.postprocess import AudioPostProcessor
from ort_tts.audio.wav import encode_wav
from ort_tts.config.settings import Settings, get_settings
from ort_tts.exceptions import (
    ModelLoadError,
    ModelLoadTimeoutError,
    ModelNotLoadedError,
    NoSuitableModelError,
    OrtTTSError,
)
from ort_tts.interface import ModelDescriptor, SynthesisOptions, SynthesisResult, VoiceDescriptor
from ort_tts.models.catalog import (
    FALLBACK_MODEL_ID,
    default_voice,
    fallback_model,
    is_kokoro_voice,
    list_models,
    static_voices,
)
from ort_tts.models.loaded import (
    FallbackModel,
    LoadedModel,
    NativeModel,
    render,
    sample_rate_of,
    validate_text,
    voices_of,
)
from ort_tts.models.loader import ModelLoader
from ort_tts.models.progress import ProgressCallback
from ort_tts.models.registry import ModelRegistry
from ort_tts.observability.logging import (
    ModelLoadLogger,
    bind_model,
    configure_logging,
    get_logger,
    unbind_model,
)
from ort_tts.utils.async_timeout import AsyncTimeoutError, with_timeout

logger = get_logger(__name__)


class TTSService:
    """Orchestrates the asset cache, model registry and synthesis pipeline.

    Collaborators default to instances built from ``settings``; pass
    them explicitly to share state or substitute fakes.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        registry: ModelRegistry | None = None,
        resolver: AssetResolver | None = None,
        downloader: Downloader | None = None,
        loader: ModelLoader | None = None,
        processor: AudioPostProcessor | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._registry = registry or ModelRegistry(self._settings.fallback_enabled)
        self._resolver = resolver or AssetResolver(
            CacheLayout(self._settings.cache_base, self._settings.cache_namespace)
        )
        self._downloader = downloader or Downloader(
            self._resolver.layout.namespace_root,
            timeout_s=self._settings.download_timeout_s,
        )
        self._loader = loader or ModelLoader(self._resolver, self._downloader, self._settings)
        self._processor = processor or AudioPostProcessor()

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    @property
    def resolver(self) -> AssetResolver:
        return self._resolver

    async def init(self) -> None:
        """Configure logging from settings and initialize the registry. Idempotent."""
        configure_logging(self._settings.log_level, self._settings.log_json)
        if not self._registry.initialized:
            self._registry.initialize()

    async def shutdown(self) -> None:
        """Release models and network resources."""
        self._registry.teardown()
        await self._downloader.aclose()
        logger.info("tts_service_shutdown")

    async def __aenter__(self) -> TTSService:
        await self.init()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def list_models(self) -> list[ModelDescriptor]:
        """Known models with installed flags."""
        try:
            return list_models(self._resolver)
        except Exception as e:
            logger.warning("list_models_degraded", error=str(e))
            return [fallback_model()]

    def list_voices(self) -> list[VoiceDescriptor]:
        """Voices of loaded models, plus Kokoro's voices when installed but not loaded.

        Falls back to a single default voice when nothing else is known.
        """
        voices: list[VoiceDescriptor] = []
        try:
            for model in self._registry.models():
                voices.extend(voices_of(model))

            if KOKORO_MODEL_ID not in self._registry and self._resolver.is_installed(
                KOKORO_MODEL_ID
            ):
                voices.extend(static_voices(KOKORO_MODEL_ID))
        except Exception as e:
            logger.warning("list_voices_degraded", error=str(e))

        if not voices:
            voices.append(default_voice())
        return voices

    def list_installed_models(self) -> list[str]:
        """Loaded identifiers plus identifiers installed on disk."""
        installed = self._registry.loaded_ids()
        try:
            if KOKORO_MODEL_ID not in installed and self._resolver.is_installed(KOKORO_MODEL_ID):
                installed.append(KOKORO_MODEL_ID)
        except Exception as e:
            logger.warning("list_installed_models_degraded", error=str(e))
        return installed

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load_model(
        self,
        model_id: str | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Load ``model_id`` (default: ``settings.default_model_id``) and make it current.

        Raises:
            ModelLoadError: Cache and network loads both failed
            ModelLoadTimeoutError: The network load did not finish in time
        """
        model_id = model_id or self._settings.default_model_id
        async with self._registry.load_lock(model_id):
            await self._load_and_register(model_id, progress)

    async def reload_model(
        self,
        model_id: str | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """Evict ``model_id``, clear its cached assets, then load it again.

        Holds the model's load lock throughout, so a concurrent load_model
        never reads a cache that is being cleared.
        """
        model_id = model_id or self._settings.default_model_id
        async with self._registry.load_lock(model_id):
            logger.info("model_reload_started", model_id=model_id)
            self._registry.evict(model_id)
            ModelLoadLogger(model_id).evicted()

            if is_downloadable(model_id):
                await asyncio.to_thread(self._resolver.clear_cache, model_id)

            await self._load_and_register(model_id, progress)

    async def _load_and_register(
        self,
        model_id: str,
        progress: ProgressCallback | None,
    ) -> None:
        # Caller holds the model's load lock
        if model_id in self._registry:
            ModelLoadLogger(model_id).already_loaded()
            return

        bind_model(model_id)
        try:
            model = await self._load(model_id, progress)
        finally:
            unbind_model()

        self._registry.put(model)

    async def _load(self, model_id: str, progress: ProgressCallback | None) -> LoadedModel:
        log = ModelLoadLogger(model_id)
        start = time.perf_counter()

        if model_id == FALLBACK_MODEL_ID:
            log.load_started(installed=True)
            model: LoadedModel = FallbackModel()
            source = "builtin"
        elif await asyncio.to_thread(self._resolver.is_installed, model_id):
            log.load_started(installed=True)
            model, source = await self._load_installed(model_id, progress, log)
        else:
            log.load_started(installed=False)
            model = await self._load_network(model_id, progress, log, voices_available=False)
            source = "network"

        log.load_completed(source, elapsed_ms=(time.perf_counter() - start) * 1000)
        return model

    async def _load_installed(
        self,
        model_id: str,
        progress: ProgressCallback | None,
        log: ModelLoadLogger,
    ) -> tuple[NativeModel, str]:
        try:
            return await self._loader.load_from_cache(model_id), "cache"
        except Exception as e:
            log.cache_load_failed(str(e))

        await asyncio.to_thread(self._resolver.clear_cache, model_id)
        model = await self._load_network(model_id, progress, log, voices_available=True)
        return model, "network"

    async def _load_network(
        self,
        model_id: str,
        progress: ProgressCallback | None,
        log: ModelLoadLogger,
        voices_available: bool,
    ) -> NativeModel:
        timeout_s = self._settings.network_load_timeout_s
        try:
            return await with_timeout(
                self._loader.load_from_network(model_id, progress),
                timeout_s=timeout_s,
                operation=f"network load of {model_id}",
            )
        except AsyncTimeoutError as e:
            log.network_load_timeout(e.timeout_s)
            raise ModelLoadTimeoutError(
                model_id, e.timeout_s, voices_available=voices_available
            ) from e
        except Exception as e:
            log.network_load_failed(str(e))
            raise ModelLoadError(model_id, str(e), voices_available=voices_available) from e

    # -------------------------------------------------------------------------
    # Synthesis
    # -------------------------------------------------------------------------

    def _resolve_model(self, voice_id: str) -> LoadedModel:
        model = self._registry.find_for_voice(voice_id)
        if model is not None:
            return model
        if is_kokoro_voice(voice_id):
            raise ModelNotLoadedError(voice_id)
        raise NoSuitableModelError(voice_id)

    async def synthesize(
        self,
        text: str,
        voice_id: str,
        options: SynthesisOptions | None = None,
    ) -> SynthesisResult:
        """Synthesize ``text`` with ``voice_id`` into WAV bytes.

        Text and options are validated before any model is consulted.
        """
        try:
            validate_text(text)
            if options is not None:
                options.validate()

            model = self._resolve_model(voice_id)
            audio = await asyncio.to_thread(
                render, model, text, voice_id, options, self._processor
            )
            sample_rate = sample_rate_of(model)
            wav = await asyncio.to_thread(encode_wav, audio, sample_rate)
        except OrtTTSError as e:
            logger.warning(
                "synthesis_failed",
                voice_id=voice_id,
                error_type=type(e).__name__,
                error=e.message,
            )
            return SynthesisResult(error=e.message, error_type=type(e).__name__, details=e.details)
        except Exception as e:
            logger.error("synthesis_error", voice_id=voice_id, error=str(e), exc_info=True)
            return SynthesisResult(error=f"Synthesis failed: {e}", error_type=type(e).__name__)

        logger.info(
            "synthesis_completed",
            model_id=model.model_id,
            voice_id=voice_id,
            samples=int(audio.size),
            sample_rate=sample_rate,
        )
        return SynthesisResult(audio=wav, sample_rate=sample_rate, num_samples=int(audio.size))
