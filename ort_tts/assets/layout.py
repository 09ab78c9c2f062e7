"""Asset Resolver - Cache presence, path resolution and invalidation.

Model assets live under one of two address schemes:

    current:  <cache>/huggingface/transformers/<namespace>/<model_id with / -> _>/
    legacy:   <cache>/huggingface/transformers/

A model is installed only when every required file exists within a
single layout. Paths resolve to the current layout when the file is
there and fall back to the legacy layout otherwise, so old installs
keep working while new downloads land in the namespaced directory.

This module touches the filesystem only; it never goes to the network.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ort_tts.observability.logging import get_logger

logger = get_logger(__name__)

MODEL_FILE = "model.onnx"
CONFIG_FILE = "config.json"
TOKENIZER_FILE = "tokenizer.json"
TOKENIZER_CONFIG_FILE = "tokenizer_config.json"

REQUIRED_FILES: tuple[str, ...] = (
    MODEL_FILE,
    CONFIG_FILE,
    TOKENIZER_FILE,
    TOKENIZER_CONFIG_FILE,
)
TOKENIZER_FILES: tuple[str, ...] = (TOKENIZER_FILE, TOKENIZER_CONFIG_FILE)

# Scratch suffixes left behind by abandoned downloads and tokenizer repair
PARTIAL_SUFFIX = ".part"
REPAIR_SUFFIX = ".fixed.json"


@dataclass(frozen=True)
class CacheLayout:
    """Both address schemes for one cache base directory."""

    base: Path
    namespace: str = "kokoro"

    @property
    def legacy_root(self) -> Path:
        """Flat, unnamespaced directory used by older installs."""
        return self.base / "huggingface" / "transformers"

    @property
    def namespace_root(self) -> Path:
        return self.legacy_root / self.namespace

    def current_root(self, model_id: str) -> Path:
        """Namespaced directory for a model identifier."""
        return self.namespace_root / model_id.replace("/", "_")

    def roots(self, model_id: str) -> tuple[Path, Path]:
        """(current, legacy) roots, in lookup order."""
        return self.current_root(model_id), self.legacy_root


class AssetResolver:
    """Answers presence questions and maintains the asset cache.

    The required file set is a constructor argument so sibling model
    families (e.g. a speech-to-text model) can reuse the same layout
    rules with their own assets.

    Usage:
        resolver = AssetResolver(CacheLayout(Path("~/.cache").expanduser()))
        if not resolver.is_installed("hexgrad/Kokoro-82M"):
            ...
        tokenizer_path = resolver.resolve_path("hexgrad/Kokoro-82M", "tokenizer.json")
    """

    def __init__(
        self,
        layout: CacheLayout,
        required_files: tuple[str, ...] = REQUIRED_FILES,
    ) -> None:
        self._layout = layout
        self._required = required_files

    @property
    def layout(self) -> CacheLayout:
        return self._layout

    @property
    def required_files(self) -> tuple[str, ...]:
        return self._required

    def current_root(self, model_id: str) -> Path:
        return self._layout.current_root(model_id)

    @property
    def legacy_root(self) -> Path:
        return self._layout.legacy_root

    def _complete(self, root: Path) -> bool:
        return all((root / name).is_file() for name in self._required)

    def is_installed(self, model_id: str) -> bool:
        """Check whether every required file exists within one layout.

        The current layout is checked first and short-circuits. Files
        split across the two layouts count as not installed.
        """
        current, legacy = self._layout.roots(model_id)

        if self._complete(current):
            logger.debug("model_found", model_id=model_id, layout="current", root=str(current))
            return True

        if self._complete(legacy):
            logger.debug("model_found", model_id=model_id, layout="legacy", root=str(legacy))
            return True

        logger.debug("model_not_found", model_id=model_id)
        return False

    def resolve_path(self, model_id: str, name: str) -> Path:
        """Current-layout path if the file exists there, else the legacy path."""
        preferred = self._layout.current_root(model_id) / name
        if preferred.exists():
            return preferred
        return self._layout.legacy_root / name

    def missing_files(self, model_id: str) -> list[str]:
        """Required files not resolvable in either layout."""
        return [
            name
            for name in self._required
            if not self.resolve_path(model_id, name).is_file()
        ]

    def clear_cache(self, model_id: str) -> list[Path]:
        """Delete the model's files from both layouts.

        Best-effort: missing files are skipped and removal failures are
        logged, never raised. Empty directories left behind in the
        current layout are removed.

        Returns:
            Paths that were removed
        """
        logger.info("cache_clear_started", model_id=model_id)
        current, legacy = self._layout.roots(model_id)

        names = list(self._required)
        current_names = names + [n + PARTIAL_SUFFIX for n in names] + [
            Path(n).stem + REPAIR_SUFFIX for n in TOKENIZER_FILES
        ]

        removed = self._remove_files(current, current_names)
        removed += self._remove_files(legacy, names)

        self._remove_empty_dir(current)
        self._remove_empty_dir(self._layout.namespace_root)
        return removed

    def clear_tokenizer_cache(self, model_id: str) -> list[Path]:
        """Delete only tokenizer files (and repair scratch files) from both layouts."""
        logger.info("tokenizer_cache_clear_started", model_id=model_id)
        names = list(TOKENIZER_FILES) + [Path(n).stem + REPAIR_SUFFIX for n in TOKENIZER_FILES]

        removed: list[Path] = []
        for root in self._layout.roots(model_id):
            removed += self._remove_files(root, names)
        return removed

    def _remove_files(self, root: Path, names: list[str]) -> list[Path]:
        removed: list[Path] = []
        for name in names:
            path = root / name
            if not path.exists():
                continue
            try:
                path.unlink()
                removed.append(path)
                logger.info("cache_file_removed", path=str(path))
            except OSError as e:
                logger.warning("cache_file_remove_failed", path=str(path), error=str(e))
        return removed

    def _remove_empty_dir(self, path: Path) -> None:
        try:
            path.rmdir()
        except OSError:
            # Not empty or already gone
            pass
