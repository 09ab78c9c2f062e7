"""Tests for the tokenizer loading chain.

Deserialization is replaced with a fake ``load_fn`` that rejects any
definition still carrying a ByteFallback post-processor, so the chain
can be driven deterministically.
"""

import json
import threading

import pytest

from ort_tts.exceptions import TokenizerLoadError
from ort_tts.tokenizer.loader import TokenizerLoader, load_tokenizer_file, scratch_path

BROKEN = {
    "model": {"type": "BPE"},
    "post_processor": {
        "type": "Sequence",
        "processors": [{"type": "ByteFallback"}, {"type": "TemplateProcessing"}],
    },
}


def strict_load(path):
    """Fake deserializer: fails on ByteFallback or on non-JSON."""
    document = json.loads(path.read_text())
    if "ByteFallback" in json.dumps(document.get("post_processor")):
        raise ValueError("unknown variant `ByteFallback`")
    return {"loaded_from": path.name, "document": document}


def always_fail(path):
    raise ValueError("cannot deserialize")


class FakeDownloader:
    """Serves a fixed document for any URL."""

    def __init__(self, document):
        self.document = document
        self.calls = []

    async def fetch(self, url, filename, dest_dir=None, timeout_s=None):
        self.calls.append(url)
        path = dest_dir / filename
        path.write_text(json.dumps(self.document))
        return path


def write(path, document):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document))
    return path


class TestStages:
    """Tests for stage selection."""

    def test_cached_includes_refetch(self):
        loader = TokenizerLoader(FakeDownloader({}), refetch_url="https://x/tokenizer.json")
        assert [s.name for s in loader.stages(allow_refetch=True)] == ["direct", "repair", "refetch"]

    def test_fresh_excludes_refetch(self):
        loader = TokenizerLoader(FakeDownloader({}), refetch_url="https://x/tokenizer.json")
        assert [s.name for s in loader.stages(allow_refetch=False)] == ["direct", "repair"]

    def test_no_url_no_refetch(self):
        loader = TokenizerLoader(FakeDownloader({}))
        assert [s.name for s in loader.stages(allow_refetch=True)] == ["direct", "repair"]


class TestLoadChain:
    """Tests for the ordered fallback chain."""

    @pytest.mark.asyncio
    async def test_direct_load(self, tmp_path):
        path = write(tmp_path / "tokenizer.json", {"model": {}, "post_processor": None})
        loader = TokenizerLoader(load_fn=strict_load)

        result = await loader.load_cached(path)

        assert result["loaded_from"] == "tokenizer.json"

    @pytest.mark.asyncio
    async def test_repair_replaces_original(self, tmp_path):
        """A repaired definition is persisted over the original."""
        path = write(tmp_path / "tokenizer.json", BROKEN)
        loader = TokenizerLoader(load_fn=strict_load)

        result = await loader.load_fresh(path)

        assert result["loaded_from"] == scratch_path(path).name
        on_disk = json.loads(path.read_text())
        assert on_disk["post_processor"] == {"type": "TemplateProcessing"}
        assert not scratch_path(path).exists()

    @pytest.mark.asyncio
    async def test_refetch_after_repair_fails(self, tmp_path):
        """Cache loads fall back to a fresh download."""
        path = write(tmp_path / "tokenizer.json", {"model": {}, "post_processor": None})
        canonical = {"model": {"type": "BPE", "byte_fallback": True}, "post_processor": None}
        downloader = FakeDownloader(canonical)
        calls = []

        def load_fn(p):
            calls.append(p.name)
            if len(calls) == 1:
                raise ValueError("corrupt cache")
            return strict_load(p)

        loader = TokenizerLoader(downloader, refetch_url="https://hub.test/t.json", load_fn=load_fn)
        result = await loader.load_cached(path)

        assert downloader.calls == ["https://hub.test/t.json"]
        assert result["document"]["model"]["unk_token"] is None
        assert "byte_fallback" not in json.loads(path.read_text())["model"]

    @pytest.mark.asyncio
    async def test_fresh_path_never_downloads(self, tmp_path):
        path = write(tmp_path / "tokenizer.json", BROKEN)
        downloader = FakeDownloader({})
        loader = TokenizerLoader(downloader, refetch_url="https://hub.test/t.json", load_fn=always_fail)

        with pytest.raises(TokenizerLoadError) as exc_info:
            await loader.load_fresh(path)

        assert downloader.calls == []
        assert exc_info.value.attempts == ["direct", "repair"]

    @pytest.mark.asyncio
    async def test_exhausted_chain_is_hard_failure(self, tmp_path):
        """Every stage failing raises TokenizerLoadError; no placeholder."""
        path = write(tmp_path / "tokenizer.json", BROKEN)
        loader = TokenizerLoader(
            FakeDownloader(BROKEN), refetch_url="https://hub.test/t.json", load_fn=always_fail
        )

        with pytest.raises(TokenizerLoadError) as exc_info:
            await loader.load_cached(path)

        assert exc_info.value.attempts == ["direct", "repair", "refetch"]
        assert not scratch_path(path).exists()

    @pytest.mark.asyncio
    async def test_unparseable_file(self, tmp_path):
        path = tmp_path / "tokenizer.json"
        path.write_text("{not json")
        loader = TokenizerLoader(load_fn=strict_load)

        with pytest.raises(TokenizerLoadError):
            await loader.load_fresh(path)

    @pytest.mark.asyncio
    async def test_stages_run_off_event_loop(self, tmp_path):
        """Deserialization and repair writes happen in worker threads."""
        path = write(tmp_path / "tokenizer.json", BROKEN)
        loop_thread = threading.get_ident()
        threads = []

        def recording_load(p):
            threads.append(threading.get_ident())
            return strict_load(p)

        result = await TokenizerLoader(load_fn=recording_load).load_fresh(path)

        assert result["loaded_from"] == scratch_path(path).name
        assert len(threads) == 2
        assert loop_thread not in threads


class TestRealTokenizer:
    """Tests against the tokenizers runtime."""

    @pytest.mark.asyncio
    async def test_wordlevel_definition_loads(self, tmp_path, wordlevel_definition):
        path = write(tmp_path / "tokenizer.json", wordlevel_definition)

        tokenizer = await TokenizerLoader().load_fresh(path)

        assert tokenizer.encode("hello world", add_special_tokens=False).ids == [1, 2]

    def test_load_tokenizer_file(self, tmp_path, wordlevel_definition):
        path = write(tmp_path / "tokenizer.json", wordlevel_definition)
        assert load_tokenizer_file(path).get_vocab_size() == 3
