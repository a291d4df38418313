"""
Network measurement statistics.

Pure functions -- no I/O, no side effects.  Everything here is
deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from typing import Sequence

_DECIMAL_UNITS = ("B", "KB", "MB", "GB", "TB")
_BINARY_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------

def calculate_jitter(samples: Sequence[float]) -> float:
    """Asymmetrically smoothed jitter over *samples*, in sample order.

    The instantaneous jitter is the absolute difference between consecutive
    samples.  From the third sample on it is folded into the running value:
    a spike moves the estimate by 20 %, an improvement only decays it by
    30 % of the gap.  The second sample never updates the estimate.
    """
    last = 0.0
    jitter = 0.0
    for idx, sample in enumerate(samples):
        if idx != 0:
            inst = abs(last - sample)
            if idx > 1:
                if jitter > inst:
                    jitter = jitter * 0.7 + inst * 0.3
                else:
                    jitter = inst * 0.2 + jitter * 0.8
        last = sample
    return jitter


def calculate_mean(samples: Sequence[float]) -> float:
    if not samples:
        return 0.0
    return statistics.mean(samples)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float, mebi: bool = False) -> str:
    """Human-readable speed string."""
    prefix = "Mi" if mebi else "M"
    if speed_mbps >= 1000:
        return f"{speed_mbps / 1000:.2f} {'Gi' if mebi else 'G'}bps"
    return f"{speed_mbps:.2f} {prefix}bps"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms:.1f} ms"


def format_bytes(count: float, mebi: bool = False) -> str:
    """Humanize a byte count with a decimal or binary unit base."""
    base = 1024.0 if mebi else 1000.0
    units = _BINARY_UNITS if mebi else _DECIMAL_UNITS
    value = float(count)
    for unit in units[:-1]:
        if abs(value) < base:
            return f"{value:.2f} {unit}"
        value /= base
    return f"{value:.2f} {units[-1]}"
