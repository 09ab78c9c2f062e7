"""Tests for Application Settings and Constants."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from ort_tts.config.constants import OUTPUT_NAME_PRIORITY, TTS, Constants
from ort_tts.config.settings import Settings, get_settings


class TestConstants:
    """Tests for the Constants singleton."""

    def test_is_frozen(self):
        """Constants are frozen (immutable)."""
        with pytest.raises(Exception):  # FrozenInstanceError
            TTS.MAX_TEXT_CHARS = 5

    def test_singleton_instance(self):
        assert isinstance(TTS, Constants)

    def test_tensor_contract(self):
        """Tensor limits match the inference contract."""
        assert TTS.MAX_TOKENS == 512
        assert TTS.MAX_TOKEN_ID == 100_000
        assert TTS.STYLE_DIM == 256
        assert TTS.MAX_SPEED == 3.0

    def test_sample_rates(self):
        assert TTS.NATIVE_SAMPLE_RATE == 24000
        assert TTS.FALLBACK_SAMPLE_RATE == 22050

    def test_output_name_order(self):
        assert OUTPUT_NAME_PRIORITY[0] == "audio"
        assert OUTPUT_NAME_PRIORITY[-1] == "logits"


class TestSettings:
    """Tests for environment-based settings."""

    @pytest.fixture(autouse=True)
    def clear_cache(self):
        """Clear settings cache before each test."""
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_defaults(self):
        """Defaults are correct."""
        settings = Settings(_env_file=None)
        assert settings.cache_namespace == "kokoro"
        assert settings.network_load_timeout_s == 60.0
        assert settings.default_model_id == "hexgrad/Kokoro-82M"
        assert settings.fallback_enabled is True
        assert settings.intra_op_threads == 1

    def test_env_override(self, monkeypatch, tmp_path):
        """ORT_TTS_ prefixed variables are read."""
        monkeypatch.setenv("ORT_TTS_CACHE_DIR", str(tmp_path))
        monkeypatch.setenv("ORT_TTS_NETWORK_LOAD_TIMEOUT_S", "12")

        settings = Settings(_env_file=None)
        assert settings.cache_base == tmp_path
        assert settings.network_load_timeout_s == 12.0

    def test_cache_base_default(self):
        """Without cache_dir the platform cache dir is used."""
        settings = Settings(_env_file=None, cache_dir=None)
        assert isinstance(settings.cache_base, Path)

    def test_endpoint_trailing_slash_stripped(self):
        settings = Settings(_env_file=None, hf_endpoint="https://hub.test/")
        assert settings.hf_endpoint == "https://hub.test"

    def test_timeout_bounds(self):
        """Out-of-range timeouts are rejected."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, network_load_timeout_s=0)

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
