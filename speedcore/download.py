"""
Download speed test module.

Each transfer is one GET whose body is streamed into the shared Counter.
The pool in ``sampler`` keeps the configured number of them in flight.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp
from yarl import URL

from .constants import BROWSER_UA, CHUNK_SIZE
from .sampler import ThroughputResult, ThroughputTester, TransferOptions
from .servers import Server, ServerType
from .transport import build_url, is_timeout

logger = logging.getLogger(__name__)


class DownloadTester(ThroughputTester):
    """Parallel download speed tester."""

    direction = "download"

    HEADERS = {
        "User-Agent": BROWSER_UA,
        "Accept": "*/*",
        "Connection": "close",
    }

    def __init__(self, options: Optional[TransferOptions] = None) -> None:
        super().__init__(options)
        self._url: Optional[URL] = None

    def _prepare(self, server: Server) -> None:
        params = None
        if server.type == ServerType.GLOBAL_SPEED:
            params = {"key": self.options.token}
        self._url = build_url(server.download_url, params)

    async def _transfer(self) -> None:
        async with self._session.get(self._url, headers=self.HEADERS) as resp:
            try:
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    self.counter.write(chunk)
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                if not is_timeout(exc):
                    logger.debug("Failed when reading HTTP response: %s", exc)


async def download(server: Server, options: Optional[TransferOptions] = None) -> ThroughputResult:
    return await DownloadTester(options).test(server)
