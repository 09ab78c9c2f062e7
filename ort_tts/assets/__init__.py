"""Model asset lifecycle: cache layout, remote sources and downloads."""

from ort_tts.assets.downloader import Downloader
from ort_tts.assets.layout import (
    CONFIG_FILE,
    MODEL_FILE,
    REQUIRED_FILES,
    TOKENIZER_CONFIG_FILE,
    TOKENIZER_FILE,
    TOKENIZER_FILES,
    AssetResolver,
    CacheLayout,
)
from ort_tts.assets.remote import (
    KOKORO_MODEL_ID,
    KOKORO_SOURCE,
    ModelSource,
    RemoteAsset,
    get_model_source,
    is_downloadable,
)

__all__ = [
    "AssetResolver",
    "CacheLayout",
    "CONFIG_FILE",
    "Downloader",
    "KOKORO_MODEL_ID",
    "KOKORO_SOURCE",
    "MODEL_FILE",
    "ModelSource",
    "REQUIRED_FILES",
    "RemoteAsset",
    "TOKENIZER_CONFIG_FILE",
    "TOKENIZER_FILE",
    "TOKENIZER_FILES",
    "get_model_source",
    "is_downloadable",
]
