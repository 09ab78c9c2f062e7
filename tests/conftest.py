"""Pytest configuration and shared fixtures."""

import asyncio
import json
from pathlib import Path
from types import SimpleNamespace

import httpx
import numpy as np
import pytest

from ort_tts.assets.downloader import Downloader
from ort_tts.assets.layout import (
    CONFIG_FILE,
    MODEL_FILE,
    REQUIRED_FILES,
    TOKENIZER_CONFIG_FILE,
    TOKENIZER_FILE,
    AssetResolver,
    CacheLayout,
)
from ort_tts.config.settings import Settings
from ort_tts.models.loader import ModelLoader
from ort_tts.models.registry import ModelRegistry
from ort_tts.service import TTSService

KOKORO = "hexgrad/Kokoro-82M"

# Minimal WordLevel definition the tokenizers runtime accepts
WORDLEVEL_TOKENIZER = {
    "version": "1.0",
    "truncation": None,
    "padding": None,
    "added_tokens": [],
    "normalizer": None,
    "pre_tokenizer": {"type": "Whitespace"},
    "post_processor": None,
    "decoder": None,
    "model": {
        "type": "WordLevel",
        "vocab": {"[UNK]": 0, "hello": 1, "world": 2},
        "unk_token": "[UNK]",
    },
}


class FakeSession:
    """Duck-typed stand-in for onnxruntime.InferenceSession."""

    def __init__(self, outputs=None, error=None):
        if outputs is None:
            t = np.arange(2400, dtype=np.float32) / 24000
            outputs = {"audio": 0.5 * np.sin(2 * np.pi * 220 * t)}
        self.outputs = outputs
        self.error = error
        self.calls = []

    def get_inputs(self):
        return [SimpleNamespace(name=n) for n in ("input_ids", "style", "speed")]

    def get_outputs(self):
        return [SimpleNamespace(name=n) for n in self.outputs]

    def run(self, output_names, input_feed):
        self.calls.append(input_feed)
        if self.error is not None:
            raise self.error
        return [np.asarray(v) for v in self.outputs.values()]


class FakeTokenizer:
    """Maps each whitespace-separated word to a small token id."""

    def __init__(self):
        self.calls = []

    def encode(self, text, add_special_tokens=True):
        self.calls.append(text)
        ids = [(sum(map(ord, word)) % 200) + 1 for word in text.split()]
        return SimpleNamespace(ids=ids)


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Empty cache base directory."""
    return tmp_path / "cache"


@pytest.fixture
def test_settings(cache_root: Path) -> Settings:
    """Provide test settings instance."""
    return Settings(
        _env_file=None,
        cache_dir=cache_root,
        hf_endpoint="https://hub.test",
        network_load_timeout_s=5.0,
        download_timeout_s=2.0,
        log_json=False,
    )


@pytest.fixture
def layout(cache_root: Path) -> CacheLayout:
    return CacheLayout(cache_root)


@pytest.fixture
def resolver(layout: CacheLayout) -> AssetResolver:
    return AssetResolver(layout)


@pytest.fixture
def install_assets():
    """Write a complete (or partial) asset set into a directory."""

    def _install(root: Path, names=REQUIRED_FILES, config=None) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        contents = {
            MODEL_FILE: b"onnx-bytes",
            CONFIG_FILE: json.dumps(config or {"model_type": "kokoro"}).encode(),
            TOKENIZER_FILE: json.dumps(WORDLEVEL_TOKENIZER).encode(),
            TOKENIZER_CONFIG_FILE: b"{}",
        }
        for name in names:
            (root / name).write_bytes(contents[name])
        return root

    return _install


@pytest.fixture
def wordlevel_definition() -> dict:
    return json.loads(json.dumps(WORDLEVEL_TOKENIZER))


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_tokenizer() -> FakeTokenizer:
    return FakeTokenizer()


@pytest.fixture
def session_factory():
    """Session factory recording the paths it was asked to open."""
    opened = []

    def _factory(model_path, intra_op_threads):
        opened.append((Path(model_path), intra_op_threads))
        return FakeSession()

    _factory.opened = opened
    return _factory


@pytest.fixture
def make_session():
    """The FakeSession class, for tests that need custom outputs."""
    return FakeSession


class MockHub:
    """httpx.MockTransport handler serving a valid asset set.

    Records requested paths; ``status`` and ``delay`` simulate failures.
    """

    def __init__(self):
        self.requests = []
        self.status = 200
        self.delay = 0.0
        self.assets = {
            MODEL_FILE: b"onnx-bytes",
            CONFIG_FILE: json.dumps({"model_type": "kokoro"}).encode(),
            TOKENIZER_FILE: json.dumps(WORDLEVEL_TOKENIZER).encode(),
            TOKENIZER_CONFIG_FILE: b"{}",
        }

    async def __call__(self, request):
        self.requests.append(request.url.path)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.status != 200:
            return httpx.Response(self.status, content=b"error")
        name = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(200, content=self.assets[name])

    def downloader(self, root: Path) -> Downloader:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self))
        return Downloader(root, timeout_s=2.0, client=client)


@pytest.fixture
def hub() -> MockHub:
    return MockHub()


@pytest.fixture
def make_service(test_settings, resolver, hub, session_factory):
    """Build an initialized TTSService wired to the mock hub and fake sessions."""

    def _make(settings=None, fallback_enabled=True) -> TTSService:
        settings = settings or test_settings
        downloader = hub.downloader(resolver.layout.namespace_root)
        loader = ModelLoader(resolver, downloader, settings, session_factory=session_factory)
        service = TTSService(
            settings,
            registry=ModelRegistry(fallback_enabled=fallback_enabled),
            resolver=resolver,
            downloader=downloader,
            loader=loader,
        )
        service.registry.initialize()
        return service

    return _make
