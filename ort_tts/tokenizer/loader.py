"""Tokenizer Loader - Ordered fallback chain.

Stages, each tried only if the previous one failed:

1. direct   - load the definition from disk as-is
2. repair   - patch the parsed definition (see repair.py), load the
              patched copy, then atomically replace the original
3. refetch  - download a canonical definition, apply the same repair
              rules and persist it (cache loads only)

When every stage fails the chain raises TokenizerLoadError. There is no
placeholder tokenizer.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from tokenizers import Tokenizer

from ort_tts.assets.downloader import Downloader
from ort_tts.assets.layout import REPAIR_SUFFIX, TOKENIZER_FILE
from ort_tts.exceptions import TokenizerLoadError
from ort_tts.observability.logging import get_logger
from ort_tts.tokenizer.repair import repair_document

logger = get_logger(__name__)

LoadFn = Callable[[Path], Tokenizer]


def load_tokenizer_file(path: Path) -> Tokenizer:
    """Deserialize a tokenizer definition with the tokenizers runtime."""
    return Tokenizer.from_file(str(path))


def scratch_path(path: Path) -> Path:
    """Sibling file a patched definition is written to before replacing ``path``."""
    return path.with_name(path.stem + REPAIR_SUFFIX)


class RepairNotApplicable(Exception):
    """Raised by the repair stage when no rule changed the definition."""


@dataclass(frozen=True)
class Stage:
    """One step of the chain."""

    name: str
    attempt: Callable[[Path], Awaitable[Tokenizer]]


class TokenizerLoader:
    """Loads tokenizers, repairing malformed definitions on the way.

    Usage:
        loader = TokenizerLoader(downloader, refetch_url=url)
        tokenizer = await loader.load_cached(path)   # direct, repair, refetch
        tokenizer = await loader.load_fresh(path)    # direct, repair

    Args:
        downloader: Used by the refetch stage
        refetch_url: Canonical definition URL; refetch is skipped when None
        load_fn: Deserializer (injectable for tests)
    """

    def __init__(
        self,
        downloader: Downloader | None = None,
        refetch_url: str | None = None,
        load_fn: LoadFn = load_tokenizer_file,
    ) -> None:
        self._downloader = downloader
        self._refetch_url = refetch_url
        self._load_fn = load_fn

    def stages(self, allow_refetch: bool) -> list[Stage]:
        stages = [
            Stage("direct", self._load_direct),
            Stage("repair", self._load_repaired),
        ]
        if allow_refetch and self._downloader is not None and self._refetch_url:
            stages.append(Stage("refetch", self._load_refetched))
        return stages

    async def load_cached(self, path: Path) -> Tokenizer:
        """Load a definition found in the cache; may fall back to the network."""
        return await self._run_chain(path, self.stages(allow_refetch=True))

    async def load_fresh(self, path: Path) -> Tokenizer:
        """Load a definition that was just downloaded."""
        return await self._run_chain(path, self.stages(allow_refetch=False))

    async def _run_chain(self, path: Path, stages: list[Stage]) -> Tokenizer:
        attempts: list[str] = []
        last_error = "no stages to run"

        for stage in stages:
            attempts.append(stage.name)
            try:
                tokenizer = await stage.attempt(path)
            except Exception as e:
                last_error = f"{stage.name}: {e}"
                logger.warning(
                    "tokenizer_stage_failed",
                    path=str(path),
                    stage=stage.name,
                    error=str(e),
                )
                continue

            logger.info("tokenizer_loaded", path=str(path), stage=stage.name)
            return tokenizer

        raise TokenizerLoadError(str(path), attempts, last_error)

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    async def _load_direct(self, path: Path) -> Tokenizer:
        return await asyncio.to_thread(self._load_fn, path)

    async def _load_repaired(self, path: Path) -> Tokenizer:
        document = await asyncio.to_thread(_read_document, path)
        outcome = repair_document(document)
        if not outcome.changed:
            raise RepairNotApplicable("no repair rule applies")

        logger.info(
            "tokenizer_repair_applied",
            path=str(path),
            actions=[a.value for a in outcome.actions],
            removed_processors=outcome.removed_processors,
        )
        return await asyncio.to_thread(self._persist_and_load, path, outcome.document)

    async def _load_refetched(self, path: Path) -> Tokenizer:
        with tempfile.TemporaryDirectory(prefix="ort-tts-tokenizer-") as tmp:
            fetched = await self._downloader.fetch(
                self._refetch_url, TOKENIZER_FILE, dest_dir=Path(tmp)
            )
            document = await asyncio.to_thread(_read_document, fetched)

        outcome = repair_document(document, strict=False, normalize_model=True)
        if outcome.changed:
            logger.info(
                "tokenizer_repair_applied",
                path=str(path),
                actions=[a.value for a in outcome.actions],
                source="refetch",
            )
        return await asyncio.to_thread(self._persist_and_load, path, outcome.document)

    def _persist_and_load(self, path: Path, document: dict[str, Any]) -> Tokenizer:
        """Write ``document`` next to ``path``, load it, then swap it into place.

        Blocking; stages run it in a worker thread.
        """
        scratch = scratch_path(path)
        scratch.parent.mkdir(parents=True, exist_ok=True)
        scratch.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")

        try:
            tokenizer = self._load_fn(scratch)
        except Exception:
            scratch.unlink(missing_ok=True)
            raise

        os.replace(scratch, path)
        return tokenizer


def _read_document(path: Path) -> dict[str, Any]:
    document = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(document, dict):
        raise ValueError("tokenizer definition is not a JSON object")
    return document
