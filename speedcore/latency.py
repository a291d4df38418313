"""
Latency and jitter measurement.

Two interchangeable strategies produce a ``LatencyResult`` from a requested
sample count:

    * ``IcmpStrategy`` -- privileged ICMP echoes via ``icmplib``.
    * ``HttpStrategy`` -- sequential GETs against the server's ping URL,
      each body drained before the clock stops.  The first sample carries
      connection setup and is dropped.

``LatencyProber`` tries an ordered list of strategies and returns the first
success.  A server whose ICMP burst comes back empty is marked so later
probes go straight to HTTP.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import aiohttp
from icmplib import ICMPLibError, async_ping

from .constants import (
    ANDROID_UA,
    DEFAULT_PING_COUNT,
    ICMP_INTERVAL,
    ICMP_REPLY_TIMEOUT,
    PING_TIMEOUT,
)
from .errors import ProbeError, RequestError
from .servers import Server
from .stats import calculate_jitter, calculate_mean
from .transport import build_url, probe_session

logger = logging.getLogger(__name__)

_NETWORK_FAMILIES = {"ip4": 4, "ip6": 6}


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class LatencyResult:
    """Average round-trip time and smoothed jitter, both in milliseconds."""

    ping_ms: float = 0.0
    jitter_ms: float = 0.0
    method: str = ""
    samples: List[float] = field(default_factory=list)

    @classmethod
    def from_samples(cls, samples: Sequence[float], method: str) -> LatencyResult:
        return cls(
            ping_ms=calculate_mean(samples),
            jitter_ms=calculate_jitter(samples),
            method=method,
            samples=list(samples),
        )

    def to_dict(self) -> dict:
        return {
            "ping_ms": round(self.ping_ms, 2),
            "jitter_ms": round(self.jitter_ms, 2),
            "method": self.method,
            "samples": [round(s, 2) for s in self.samples],
        }


@dataclass
class ProbeOutcome:
    """Either a result or the reason a strategy gave up."""

    result: Optional[LatencyResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class IcmpStrategy:
    """Privileged ICMP echo burst."""

    name = "icmp"

    def __init__(self, source: str = "", network: str = "ip") -> None:
        self.source = source
        self.family = _NETWORK_FAMILIES.get(network)

    async def probe(self, server: Server, count: int) -> ProbeOutcome:
        if server.no_icmp:
            logger.debug("Skipping ICMP for server %s, will use HTTP ping", server.name)
            return ProbeOutcome(error=ProbeError("ICMP disabled for this server"))

        try:
            host = await async_ping(
                server.host,
                count=count,
                interval=ICMP_INTERVAL,
                timeout=ICMP_REPLY_TIMEOUT,
                source=self.source or None,
                family=self.family,
                privileged=True,
            )
        except (ICMPLibError, OSError) as exc:
            logger.debug("ICMP ping failed: %s, will use HTTP ping", exc)
            return ProbeOutcome(error=exc)

        if not host.rtts:
            server.mark_no_icmp()
            logger.debug(
                "No ICMP pings returned for server %s (%s), trying HTTP ping",
                server.name,
                server.ip,
            )
            return ProbeOutcome(error=ProbeError("no ICMP echo replies"))

        return ProbeOutcome(result=LatencyResult.from_samples(host.rtts, self.name))


class HttpStrategy:
    """Round trips timed over sequential HTTP GETs."""

    name = "http"

    def __init__(self, extra_samples: int = 0, timeout: float = PING_TIMEOUT) -> None:
        self.extra_samples = extra_samples
        self.timeout = timeout

    async def probe(self, server: Server, count: int) -> ProbeOutcome:
        try:
            url = build_url(server.ping_url)
        except RequestError as exc:
            logger.debug("Failed when creating HTTP request: %s", exc)
            return ProbeOutcome(error=exc)

        headers = {"User-Agent": ANDROID_UA}
        pings: List[float] = []

        async with probe_session(self.timeout) as session:
            for _ in range(count + self.extra_samples):
                start = time.perf_counter()
                try:
                    async with session.get(url, headers=headers) as resp:
                        await resp.read()
                except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                    logger.debug("Failed when making HTTP request: %s", exc)
                    return ProbeOutcome(error=ProbeError(f"HTTP ping failed: {exc}"))
                pings.append((time.perf_counter() - start) * 1000)

        # The first round trip pays for connection setup.
        return ProbeOutcome(result=LatencyResult.from_samples(pings[1:], self.name))


# ---------------------------------------------------------------------------
# Prober
# ---------------------------------------------------------------------------

class LatencyProber:
    """Run strategies in order and keep the first result."""

    def __init__(self, strategies: Sequence) -> None:
        self.strategies = list(strategies)

    async def measure(self, server: Server, count: int = DEFAULT_PING_COUNT) -> LatencyResult:
        last_error: Optional[Exception] = None
        for strategy in self.strategies:
            outcome = await strategy.probe(server, count)
            if outcome.ok:
                return outcome.result
            last_error = outcome.error
        if last_error is None:
            raise ProbeError("no latency strategy configured")
        raise last_error


async def icmp_ping_and_jitter(
    server: Server,
    count: int = DEFAULT_PING_COUNT,
    source_ip: str = "",
    network: str = "ip",
) -> LatencyResult:
    """ICMP ping with HTTP fallback (two extra samples to cover the drop)."""
    prober = LatencyProber([IcmpStrategy(source_ip, network), HttpStrategy(extra_samples=2)])
    return await prober.measure(server, count)


async def ping_and_jitter(server: Server, count: int = DEFAULT_PING_COUNT) -> LatencyResult:
    """HTTP-only ping."""
    return await LatencyProber([HttpStrategy()]).measure(server, count)
