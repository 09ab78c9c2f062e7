"""Model Loader - Builds native models from cached or freshly fetched assets.

Two entry points, composed by the service into the load policy:

- load_from_cache: local files only; fails fast when any file is missing
- load_from_network: fetches whatever the current layout lacks, emitting
  progress milestones, then builds the model from the current layout

Neither touches the registry. Bounding the network path in time is the
caller's job.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

from tokenizers import Tokenizer

from ort_tts.assets.downloader import Downloader
from ort_tts.assets.layout import CONFIG_FILE, MODEL_FILE, TOKENIZER_FILE, AssetResolver
from ort_tts.assets.remote import get_model_source, is_downloadable
from ort_tts.config.constants import PROGRESS_START
from ort_tts.config.settings import Settings, get_settings
from ort_tts.engine.session import InferenceEngine, SessionLike, create_session
from ort_tts.exceptions import AssetNotFoundError
from ort_tts.models.loaded import ModelConfig, NativeModel
from ort_tts.models.progress import ProgressCallback, ProgressReporter
from ort_tts.observability.logging import get_logger
from ort_tts.tokenizer.loader import LoadFn, TokenizerLoader, load_tokenizer_file

logger = get_logger(__name__)

SessionFactory = Callable[[Path, int], SessionLike]


class ModelLoader:
    """Turns assets on disk (or on the hub) into a NativeModel.

    Usage:
        loader = ModelLoader(resolver, downloader)
        model = await loader.load_from_cache("hexgrad/Kokoro-82M")
        model = await loader.load_from_network("hexgrad/Kokoro-82M", on_progress)

    Args:
        resolver: Cache presence and path resolution
        downloader: Fetches missing assets
        settings: Endpoint and engine settings
        session_factory: Builds the inference session (injectable for tests)
        tokenizer_load_fn: Tokenizer deserializer (injectable for tests)
    """

    def __init__(
        self,
        resolver: AssetResolver,
        downloader: Downloader,
        settings: Settings | None = None,
        session_factory: SessionFactory = create_session,
        tokenizer_load_fn: LoadFn = load_tokenizer_file,
    ) -> None:
        self._resolver = resolver
        self._downloader = downloader
        self._settings = settings or get_settings()
        self._session_factory = session_factory
        self._tokenizer_load_fn = tokenizer_load_fn

    def tokenizer_loader(self, model_id: str) -> TokenizerLoader:
        refetch_url = None
        if is_downloadable(model_id):
            source = get_model_source(model_id)
            refetch_url = source.url_for(TOKENIZER_FILE, endpoint=self._settings.hf_endpoint)
        return TokenizerLoader(
            downloader=self._downloader,
            refetch_url=refetch_url,
            load_fn=self._tokenizer_load_fn,
        )

    async def load_from_cache(self, model_id: str) -> NativeModel:
        """Build a model from files already in the cache.

        Raises:
            AssetNotFoundError: A required file is missing
            TokenizerLoadError: The tokenizer repair chain was exhausted
        """
        missing = self._resolver.missing_files(model_id)
        if missing:
            raise AssetNotFoundError(model_id, missing)

        tokenizer_path = self._resolver.resolve_path(model_id, TOKENIZER_FILE)
        tokenizer = await self.tokenizer_loader(model_id).load_cached(tokenizer_path)

        return await asyncio.to_thread(
            self._build,
            model_id,
            self._resolver.resolve_path(model_id, MODEL_FILE),
            self._resolver.resolve_path(model_id, CONFIG_FILE),
            tokenizer,
        )

    async def load_from_network(
        self,
        model_id: str,
        progress: ProgressCallback | None = None,
    ) -> NativeModel:
        """Fetch missing assets into the current layout and build the model.

        Files already present in the current layout are not fetched again.

        Raises:
            UnsupportedModelError: No remote source for ``model_id``
            DownloadError: A fetch failed
            AsyncTimeoutError: A fetch timed out
            TokenizerLoadError: The fetched tokenizer could not be loaded
        """
        source = get_model_source(model_id)
        root = self._resolver.current_root(model_id)
        reporter = ProgressReporter(progress, label=model_id)

        await reporter.emit(PROGRESS_START)
        for asset in source.assets:
            target = root / asset.name
            if target.is_file():
                logger.debug("asset_already_present", model_id=model_id, path=str(target))
            else:
                await self._downloader.fetch(
                    source.url_for(asset.remote_path, endpoint=self._settings.hf_endpoint),
                    asset.name,
                    dest_dir=root,
                )
            await reporter.emit(asset.progress, label=asset.name)

        tokenizer = await self.tokenizer_loader(model_id).load_fresh(root / TOKENIZER_FILE)
        model = await asyncio.to_thread(
            self._build,
            model_id,
            root / MODEL_FILE,
            root / CONFIG_FILE,
            tokenizer,
        )

        await reporter.finish(model_id)
        return model

    def _build(
        self,
        model_id: str,
        model_path: Path,
        config_path: Path,
        tokenizer: Tokenizer,
    ) -> NativeModel:
        config = ModelConfig.from_file(config_path)
        session = self._session_factory(model_path, self._settings.intra_op_threads)
        model = NativeModel(
            model_id=model_id,
            engine=InferenceEngine(session),
            config=config,
            tokenizer=tokenizer,
        )
        logger.info(
            "native_model_built",
            model_id=model_id,
            model_type=config.model_type,
            sample_rate=config.sample_rate,
            voices=len(model.voices),
        )
        return model
