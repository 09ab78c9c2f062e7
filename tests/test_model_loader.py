"""Tests for the Model Loader (cache and network paths)."""

from unittest.mock import AsyncMock

import pytest

from ort_tts.assets.layout import MODEL_FILE
from ort_tts.exceptions import AssetNotFoundError, DownloadError, UnsupportedModelError
from ort_tts.models.loaded import NativeModel
from ort_tts.models.loader import ModelLoader

KOKORO = "hexgrad/Kokoro-82M"


@pytest.fixture
def loader(resolver, hub, test_settings, session_factory):
    return ModelLoader(
        resolver,
        hub.downloader(resolver.layout.namespace_root),
        test_settings,
        session_factory=session_factory,
    )


class TestLoadFromCache:
    """Tests for cache-only loads."""

    @pytest.mark.asyncio
    async def test_missing_files(self, loader):
        with pytest.raises(AssetNotFoundError) as exc_info:
            await loader.load_from_cache(KOKORO)
        assert len(exc_info.value.missing) == 4

    @pytest.mark.asyncio
    async def test_current_layout(self, loader, resolver, install_assets, session_factory, hub):
        root = install_assets(resolver.current_root(KOKORO))

        model = await loader.load_from_cache(KOKORO)

        assert isinstance(model, NativeModel)
        assert model.config.model_type == "kokoro"
        assert session_factory.opened == [(root / MODEL_FILE, 1)]
        assert hub.requests == []

    @pytest.mark.asyncio
    async def test_legacy_layout(self, loader, resolver, install_assets, session_factory):
        install_assets(resolver.legacy_root)

        await loader.load_from_cache(KOKORO)

        assert session_factory.opened[0][0] == resolver.legacy_root / MODEL_FILE

    @pytest.mark.asyncio
    async def test_bad_config_fails(self, loader, resolver, install_assets):
        root = install_assets(resolver.current_root(KOKORO))
        (root / "config.json").write_text("{truncated")

        with pytest.raises(ValueError):
            await loader.load_from_cache(KOKORO)


class TestLoadFromNetwork:
    """Tests for network loads."""

    @pytest.mark.asyncio
    async def test_fetches_into_current_layout(self, loader, resolver, hub):
        events = []

        model = await loader.load_from_network(KOKORO, lambda *e: events.append(e))

        assert isinstance(model, NativeModel)
        assert resolver.is_installed(KOKORO)
        assert (resolver.current_root(KOKORO) / MODEL_FILE).is_file()
        assert hub.requests[0] == "/onnx-community/Kokoro-82M-v1.0-ONNX/resolve/main/onnx/model.onnx"
        assert len(hub.requests) == 4

    @pytest.mark.asyncio
    async def test_progress_milestones(self, loader):
        events = []

        await loader.load_from_network(KOKORO, lambda *e: events.append(e))

        assert [e[2] for e in events] == [0.0, 40.0, 60.0, 80.0, 90.0, 100.0]
        assert events[-1] == (True, KOKORO, 100.0, 100, 100)
        assert not any(e[0] for e in events[:-1])

    @pytest.mark.asyncio
    async def test_skips_present_files(self, loader, resolver, install_assets, hub):
        """Files already in the current layout are not fetched again."""
        install_assets(resolver.current_root(KOKORO), names=(MODEL_FILE,))

        await loader.load_from_network(KOKORO)

        assert len(hub.requests) == 3
        assert not any(path.endswith("model.onnx") for path in hub.requests)

    @pytest.mark.asyncio
    async def test_download_failure(self, loader, hub):
        hub.status = 503

        with pytest.raises(DownloadError) as exc_info:
            await loader.load_from_network(KOKORO)

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_unsupported_model(self, loader, hub):
        with pytest.raises(UnsupportedModelError):
            await loader.load_from_network("someone/else")
        assert hub.requests == []

    @pytest.mark.asyncio
    async def test_no_per_file_transfer_bound(self, resolver, hub, test_settings, session_factory):
        """Asset fetches rely on the outer network-load bound, not download_timeout_s."""
        downloader = hub.downloader(resolver.layout.namespace_root)
        fetch = AsyncMock(side_effect=downloader.fetch)
        downloader.fetch = fetch
        loader = ModelLoader(resolver, downloader, test_settings, session_factory=session_factory)

        await loader.load_from_network(KOKORO)

        assert fetch.await_count == 4
        assert all(call.kwargs.get("timeout_s") is None for call in fetch.await_args_list)
