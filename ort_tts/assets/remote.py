"""Remote asset source - Maps model identifiers to downloadable files.

Assets are fetched from ``<endpoint>/<repo-id>/resolve/main/<path>``.
URLs are built with huggingface_hub so the scheme matches the hub's own
resolution rules.
"""

from __future__ import annotations

from dataclasses import dataclass

from huggingface_hub import hf_hub_url

from ort_tts.assets.layout import (
    CONFIG_FILE,
    MODEL_FILE,
    TOKENIZER_CONFIG_FILE,
    TOKENIZER_FILE,
)
from ort_tts.exceptions import UnsupportedModelError

KOKORO_MODEL_ID = "hexgrad/Kokoro-82M"
KOKORO_REPO_ID = "onnx-community/Kokoro-82M-v1.0-ONNX"


@dataclass(frozen=True)
class RemoteAsset:
    """One file to fetch: local cache name, remote path and progress milestone."""

    name: str
    remote_path: str
    progress: float


@dataclass(frozen=True)
class ModelSource:
    """Where a model's assets live remotely."""

    model_id: str
    repo_id: str
    revision: str = "main"
    assets: tuple[RemoteAsset, ...] = ()

    def url_for(self, remote_path: str, endpoint: str | None = None) -> str:
        return hf_hub_url(
            self.repo_id,
            remote_path,
            revision=self.revision,
            endpoint=endpoint,
        )

    def asset(self, name: str) -> RemoteAsset:
        for asset in self.assets:
            if asset.name == name:
                return asset
        raise KeyError(name)


# Weights first; each milestone is emitted once its file is in place
KOKORO_SOURCE = ModelSource(
    model_id=KOKORO_MODEL_ID,
    repo_id=KOKORO_REPO_ID,
    assets=(
        RemoteAsset(MODEL_FILE, "onnx/model.onnx", 40.0),
        RemoteAsset(CONFIG_FILE, CONFIG_FILE, 60.0),
        RemoteAsset(TOKENIZER_FILE, TOKENIZER_FILE, 80.0),
        RemoteAsset(TOKENIZER_CONFIG_FILE, TOKENIZER_CONFIG_FILE, 90.0),
    ),
)

_SOURCES: dict[str, ModelSource] = {KOKORO_MODEL_ID: KOKORO_SOURCE}


def get_model_source(model_id: str) -> ModelSource:
    """Look up the remote source for a model identifier.

    Raises:
        UnsupportedModelError: If the identifier has no known source
    """
    try:
        return _SOURCES[model_id]
    except KeyError:
        raise UnsupportedModelError(model_id)


def is_downloadable(model_id: str) -> bool:
    return model_id in _SOURCES
