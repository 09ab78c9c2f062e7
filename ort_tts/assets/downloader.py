"""Downloader - HTTP asset fetch into the cache.

Streams a remote file to ``<dest>/<filename>.part`` and renames it into
place once the body is complete. The instance timeout bounds each
connect and read; a bound on the whole transfer is opt-in per call.
A timeout is reported as AsyncTimeoutError, never as DownloadError, so
callers can tell "try again later" apart from "asset unavailable".
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import httpx

from ort_tts.assets.layout import PARTIAL_SUFFIX
from ort_tts.exceptions import AssetWriteError, DownloadError
from ort_tts.observability.logging import get_logger
from ort_tts.utils.async_timeout import AsyncTimeoutError, with_timeout

logger = get_logger(__name__)

CHUNK_SIZE = 1 << 20  # 1 MiB


class Downloader:
    """Fetches remote assets over HTTP.

    Usage:
        downloader = Downloader(cache_root)
        path = await downloader.fetch(url, "config.json", dest_dir=model_dir)
        await downloader.aclose()

    Args:
        cache_root: Default destination directory
        timeout_s: Per-request connect/read timeout
        client: Optional preconfigured httpx.AsyncClient (not closed by aclose)
    """

    def __init__(
        self,
        cache_root: Path,
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._cache_root = cache_root
        self._timeout_s = timeout_s
        self._client = client
        self._owns_client = client is None

    @property
    def cache_root(self) -> Path:
        return self._cache_root

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout_s),
                follow_redirects=True,
            )
        return self._client

    async def fetch(
        self,
        url: str,
        filename: str,
        dest_dir: Path | None = None,
        timeout_s: float | None = None,
    ) -> Path:
        """Download ``url`` to ``dest_dir / filename``.

        Args:
            url: Remote URL
            filename: Name to store the file under
            dest_dir: Destination directory (created if needed)
            timeout_s: Optional bound on the whole transfer. When None only
                the per-request timeout applies

        Returns:
            Final path of the persisted file

        Raises:
            DownloadError: Non-success status or transport failure
            AsyncTimeoutError: The download did not finish in time
            AssetWriteError: The file could not be written
        """
        destination = (dest_dir or self._cache_root) / filename

        logger.info("download_started", url=url, path=str(destination))
        transfer = self._fetch(url, filename, destination)
        if timeout_s is None:
            path = await transfer
        else:
            path = await with_timeout(
                transfer,
                timeout_s=timeout_s,
                operation=f"download of {filename}",
            )
        logger.info("download_completed", path=str(path), size=path.stat().st_size)
        return path

    async def _fetch(
        self,
        url: str,
        filename: str,
        destination: Path,
    ) -> Path:
        client = self._get_client()
        try:
            async with client.stream(
                "GET", url, timeout=httpx.Timeout(self._timeout_s)
            ) as response:
                if not response.is_success:
                    raise DownloadError(
                        filename,
                        f"HTTP {response.status_code}",
                        url=url,
                        status_code=response.status_code,
                    )
                await self._persist(response, destination)
        except httpx.TimeoutException:
            raise AsyncTimeoutError(f"download of {filename}", self._timeout_s, {"url": url})
        except httpx.HTTPError as e:
            raise DownloadError(filename, str(e) or type(e).__name__, url=url)

        return destination

    async def _persist(self, response: httpx.Response, destination: Path) -> None:
        partial = destination.with_name(destination.name + PARTIAL_SUFFIX)
        try:
            await asyncio.to_thread(destination.parent.mkdir, parents=True, exist_ok=True)
            with open(partial, "wb") as f:
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    await asyncio.to_thread(f.write, chunk)
            await asyncio.to_thread(os.replace, partial, destination)
        except OSError as e:
            raise AssetWriteError(str(destination), str(e))

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
