"""Configuration module."""

from ort_tts.config.constants import TTS, Constants
from ort_tts.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "Constants", "TTS"]
