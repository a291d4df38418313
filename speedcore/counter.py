"""
Byte accounting for one throughput run.

A ``Counter`` is the sink for downloaded bytes and the source of upload
payload.  Transfer tasks write to it concurrently while the progress
display reads its live rate from another thread, so every access goes
through one lock.
"""
from __future__ import annotations

import os
import threading
import time
from typing import AsyncIterator, Optional

from .constants import CHUNK_SIZE
from .stats import format_bytes


class Counter:
    """Tracks bytes moved since :meth:`start` and derives the average rate."""

    def __init__(self, mebi: bool = False, use_bytes: bool = False) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._start: Optional[float] = None
        self.mebi = mebi
        self.use_bytes = use_bytes
        self.upload_size = 0
        self._blob: Optional[bytes] = None
        self._random_stream = False

    # -- Configuration ------------------------------------------------------

    def set_mebi(self, mebi: bool) -> None:
        self.mebi = mebi

    def set_use_bytes(self, use_bytes: bool) -> None:
        self.use_bytes = use_bytes

    def set_upload_size(self, size: int) -> None:
        self.upload_size = max(0, int(size))

    def generate_blob(self) -> None:
        """Pre-fill one reusable random payload of ``upload_size`` bytes."""
        self._blob = os.urandom(self.upload_size)
        self._random_stream = False

    def use_random_stream(self) -> None:
        """Generate payload inline, without pre-allocation and without end."""
        self._blob = None
        self._random_stream = True

    # -- Accounting ---------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            self._total = 0
            self._start = time.perf_counter()

    def write(self, data: bytes) -> int:
        n = len(data)
        with self._lock:
            self._total += n
        return n

    def total_bytes(self) -> int:
        with self._lock:
            return self._total

    def elapsed(self) -> float:
        with self._lock:
            if self._start is None:
                return 0.0
            return time.perf_counter() - self._start

    def avg_bytes_per_second(self) -> float:
        with self._lock:
            if self._start is None:
                return 0.0
            elapsed = time.perf_counter() - self._start
            total = self._total
        if elapsed <= 0:
            return 0.0
        return total / elapsed

    def avg_mbps(self) -> float:
        divisor = 1024 * 1024 if self.mebi else 1000 * 1000
        return self.avg_bytes_per_second() * 8 / divisor

    # -- Presentation -------------------------------------------------------

    def mbytes(self) -> float:
        divisor = 1024 * 1024 if self.mebi else 1000 * 1000
        return self.total_bytes() / divisor

    def avg_humanize(self) -> str:
        return f"{format_bytes(self.avg_bytes_per_second(), self.mebi)}/s"

    def bytes_humanize(self) -> str:
        return format_bytes(self.total_bytes(), self.mebi)

    # -- Upload source ------------------------------------------------------

    async def payload(self) -> AsyncIterator[bytes]:
        """Yield one request body, counting bytes as they are handed out.

        With a blob the body is exactly ``upload_size`` bytes; the random
        stream never ends on its own and relies on the run being cancelled.
        """
        if self._random_stream:
            while True:
                chunk = os.urandom(CHUNK_SIZE)
                self.write(chunk)
                yield chunk

        if self._blob is None:
            self.generate_blob()
        blob = self._blob
        for offset in range(0, len(blob), CHUNK_SIZE):
            chunk = blob[offset:offset + CHUNK_SIZE]
            self.write(chunk)
            yield chunk
