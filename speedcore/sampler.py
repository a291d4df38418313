"""
Fixed-concurrency throughput sampling.

A ``TransferPool`` keeps ``concurrency`` transfers in flight for a fixed
wall-clock duration.  Launches are staggered so the pool ramps up instead of
opening every connection at once; afterwards every transfer that completes
is replaced immediately.  At cutoff all in-flight transfers are cancelled.

The rate is never derived from individual transfers: the shared ``Counter``
sees every byte, and its average since ``start()`` is the result.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Set

import aiohttp

from .constants import (
    DEFAULT_CONNECTIONS,
    DEFAULT_DURATION,
    DEFAULT_UPLOAD_SIZE,
    LAUNCH_STAGGER,
    MAX_CONNECTIONS,
    MIN_CONNECTIONS,
    PROGRESS_INTERVAL,
)
from .counter import Counter
from .servers import Server
from .stats import format_speed
from .transport import is_timeout, transfer_session

logger = logging.getLogger(__name__)

Transfer = Callable[[], Awaitable[None]]
ProgressCallback = Callable[[float, str], None]


# ---------------------------------------------------------------------------
# Options / result
# ---------------------------------------------------------------------------

@dataclass
class TransferOptions:
    """Knobs shared by the download and upload drivers."""

    silent: bool = False
    use_bytes: bool = False
    use_mebi: bool = False
    concurrency: int = DEFAULT_CONNECTIONS
    duration: float = DEFAULT_DURATION
    token: str = ""
    no_prealloc: bool = False
    upload_size: int = DEFAULT_UPLOAD_SIZE * 1024


@dataclass
class ThroughputResult:
    """Download or upload test result."""

    direction: str = ""
    speed_mbps: float = 0.0
    bytes_total: int = 0
    duration_ms: float = 0.0
    launched: int = 0
    completed: int = 0

    def to_dict(self) -> dict:
        return {
            "direction": self.direction,
            "speed_mbps": round(self.speed_mbps, 2),
            "bytes_total": self.bytes_total,
            "duration_ms": round(self.duration_ms, 2),
            "launched": self.launched,
            "completed": self.completed,
        }


# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------

class TransferPool:
    """Hold ``concurrency`` copies of *transfer* in flight for ``duration`` s."""

    def __init__(
        self,
        transfer: Transfer,
        concurrency: int = DEFAULT_CONNECTIONS,
        duration: float = DEFAULT_DURATION,
        stagger: float = LAUNCH_STAGGER,
    ) -> None:
        self._transfer = transfer
        self.concurrency = max(MIN_CONNECTIONS, min(concurrency, MAX_CONNECTIONS))
        self.duration = duration
        self.stagger = stagger

        self.launched = 0
        self.completed = 0
        self.peak_in_flight = 0
        self._active = 0
        self._tasks: Set[asyncio.Task] = set()
        self._done: Optional[asyncio.Queue] = None

    @property
    def in_flight(self) -> int:
        return self._active

    async def run(self) -> None:
        # Each in-flight transfer posts at most one completion and nothing is
        # relaunched before its completion is taken, so ``concurrency`` slots
        # are always enough.
        self._done = asyncio.Queue(maxsize=self.concurrency)
        loop = asyncio.get_running_loop()
        try:
            for _ in range(self.concurrency):
                self._launch()
                await asyncio.sleep(self.stagger)

            deadline = loop.time() + self.duration
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                try:
                    await asyncio.wait_for(self._done.get(), timeout=remaining)
                except asyncio.TimeoutError:
                    break
                self._launch()
        finally:
            await self._cancel()

    def _launch(self) -> None:
        self._active += 1
        self.launched += 1
        self.peak_in_flight = max(self.peak_in_flight, self._active)
        task = asyncio.create_task(self._attempt())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _attempt(self) -> None:
        ok = False
        try:
            await self._transfer()
            ok = True
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            if not is_timeout(exc):
                logger.debug("Failed when making HTTP request: %s", exc)
        finally:
            self._active -= 1

        if ok:
            self.completed += 1
            self._done.put_nowait(None)

    async def _cancel(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


# ---------------------------------------------------------------------------
# Driver base
# ---------------------------------------------------------------------------

class ThroughputTester:
    """Shared run loop of the download and upload drivers.

    Subclasses prepare the request in :meth:`_prepare` (raising
    ``RequestError`` before any load is generated) and implement one
    request/response cycle in :meth:`_transfer`.
    """

    direction = ""

    def __init__(self, options: Optional[TransferOptions] = None) -> None:
        self.options = options or TransferOptions()
        self.on_progress: Optional[ProgressCallback] = None
        self.counter = Counter(mebi=self.options.use_mebi, use_bytes=self.options.use_bytes)
        self.pool: Optional[TransferPool] = None
        self._session: Optional[aiohttp.ClientSession] = None

    async def test(self, server: Server) -> ThroughputResult:
        self._prepare(server)
        opts = self.options

        async with transfer_session(opts.concurrency) as session:
            self._session = session
            self.pool = TransferPool(self._transfer, opts.concurrency, opts.duration)

            self.counter.start()
            reporter = None
            if self.on_progress and not opts.silent:
                reporter = asyncio.create_task(self._report_progress())
            try:
                await self.pool.run()
            finally:
                if reporter is not None:
                    reporter.cancel()
                    await asyncio.gather(reporter, return_exceptions=True)

            result = ThroughputResult(
                direction=self.direction,
                speed_mbps=self.counter.avg_mbps(),
                bytes_total=self.counter.total_bytes(),
                duration_ms=self.counter.elapsed() * 1000,
                launched=self.pool.launched,
                completed=self.pool.completed,
            )
        return result

    def rate_text(self) -> str:
        if self.counter.use_bytes:
            return self.counter.avg_humanize()
        return format_speed(self.counter.avg_mbps(), self.counter.mebi)

    async def _report_progress(self) -> None:
        total = self.pool.concurrency * self.pool.stagger + self.options.duration
        t0 = time.perf_counter()
        while True:
            await asyncio.sleep(PROGRESS_INTERVAL)
            fraction = min((time.perf_counter() - t0) / total, 1.0) if total > 0 else 1.0
            self.on_progress(fraction, self.rate_text())

    def _prepare(self, server: Server) -> None:
        raise NotImplementedError

    async def _transfer(self) -> None:
        raise NotImplementedError
