"""Reachability check run before a server is tested."""
from __future__ import annotations

import asyncio
import logging

import aiohttp

from .constants import ANDROID_UA, LIVENESS_TIMEOUT
from .errors import RequestError
from .servers import Server
from .transport import build_url, probe_session

logger = logging.getLogger(__name__)

# Some dialects answer a bare ping hit with 403 but are otherwise functional.
_UP_STATUSES = frozenset({200, 403})


async def is_server_up(server: Server, timeout: float = LIVENESS_TIMEOUT) -> bool:
    """GET the ping endpoint once; True iff it answers 200 or 403."""
    try:
        url = build_url(server.ping_url)
    except RequestError as exc:
        logger.debug("Failed when creating HTTP request: %s", exc)
        return False

    try:
        async with probe_session(timeout) as session:
            async with session.get(url, headers={"User-Agent": ANDROID_UA}) as resp:
                await resp.read()
                return resp.status in _UP_STATUSES
    except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
        logger.debug("Error checking for server status: %s", exc)
        return False
