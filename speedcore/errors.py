"""Exceptions raised by the measurement engine."""


class SpeedtestError(Exception):
    """Base class for engine errors."""


class RequestError(SpeedtestError, ValueError):
    """A request could not be built (malformed URL or headers)."""


class ProbeError(SpeedtestError):
    """Latency probing failed and no fallback strategy was left."""
