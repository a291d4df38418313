"""
HTTP plumbing shared by the probes and the throughput drivers.

Everything goes through ``aiohttp``; this module only decides how sessions
are configured and how request URLs are validated.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import aiohttp
from yarl import URL

from .constants import CONNECT_TIMEOUT, SOCK_READ_TIMEOUT
from .errors import RequestError


def build_url(url: str, params: Optional[Dict[str, str]] = None) -> URL:
    """Parse *url* into a request URL, raising ``RequestError`` if malformed."""
    try:
        parsed = URL(url)
        if params:
            parsed = parsed.update_query(params)
        port = parsed.port
    except (ValueError, TypeError) as exc:
        raise RequestError(f"Invalid request URL: {url!r}: {exc}") from exc
    if not parsed.is_absolute() or not parsed.host or port is None:
        raise RequestError(f"Invalid request URL: {url!r}")
    return parsed


def is_timeout(exc: BaseException) -> bool:
    """True for errors caused by a deadline rather than a broken transport."""
    return isinstance(exc, asyncio.TimeoutError)


def probe_session(timeout: float) -> aiohttp.ClientSession:
    """Short-lived keep-alive session for liveness and latency probes."""
    return aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout),
        auto_decompress=False,
    )


def transfer_session(connections: int) -> aiohttp.ClientSession:
    """Session for one throughput run; every request gets its own connection."""
    connector = aiohttp.TCPConnector(
        limit=connections,
        limit_per_host=connections,
        force_close=True,
        enable_cleanup_closed=True,
    )
    timeout = aiohttp.ClientTimeout(
        total=None, connect=CONNECT_TIMEOUT, sock_read=SOCK_READ_TIMEOUT
    )
    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        auto_decompress=False,
    )
