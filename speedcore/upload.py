"""
Upload speed test module.

Each transfer is one POST whose body is the Counter itself: bytes are
counted as they are handed to the connection.  Without pre-allocation the
body is an endless random stream, so transfers only end at cutoff.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import aiohttp
from yarl import URL

from .constants import ANDROID_UA, FORM_CONTENT_TYPE, MULTIPART_CONTENT_TYPE
from .sampler import ThroughputResult, ThroughputTester, TransferOptions
from .servers import Server, ServerType
from .transport import build_url, is_timeout

logger = logging.getLogger(__name__)


def upload_headers(server: Server, token: str) -> Dict[str, str]:
    headers = {"User-Agent": ANDROID_UA}
    if server.type != ServerType.WIRELESS_SPEED:
        headers.update({
            "Connection": "close",
            "Charset": "UTF-8",
            "Key": token,
            "Content-Type": MULTIPART_CONTENT_TYPE,
        })
    else:
        headers["Content-Type"] = FORM_CONTENT_TYPE
    return headers


class UploadTester(ThroughputTester):
    """Parallel upload speed tester."""

    direction = "upload"

    def __init__(self, options: Optional[TransferOptions] = None) -> None:
        super().__init__(options)
        self._url: Optional[URL] = None
        self._headers: Dict[str, str] = {}

    def _prepare(self, server: Server) -> None:
        self._url = build_url(server.upload_url)
        self._headers = upload_headers(server, self.options.token)

        self.counter.set_upload_size(self.options.upload_size)
        if self.options.no_prealloc:
            logger.info("Pre-allocation is disabled, performance might be lower!")
            self.counter.use_random_stream()
        else:
            self.counter.generate_blob()

    async def _transfer(self) -> None:
        async with self._session.post(
            self._url, data=self.counter.payload(), headers=self._headers
        ) as resp:
            try:
                await resp.read()
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                if not is_timeout(exc):
                    logger.debug("Failed when reading HTTP response: %s", exc)


async def upload(server: Server, options: Optional[TransferOptions] = None) -> ThroughputResult:
    return await UploadTester(options).test(server)
