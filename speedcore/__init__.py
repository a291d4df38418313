"""Speed-test measurement engine -- probes, throughput sampling, and statistics."""

from .counter import Counter
from .download import DownloadTester, download
from .errors import ProbeError, RequestError, SpeedtestError
from .isp import GlobalServer, ISPInfo, ISPRegistry, default_registry, load_servers
from .latency import (
    HttpStrategy,
    IcmpStrategy,
    LatencyProber,
    LatencyResult,
    icmp_ping_and_jitter,
    ping_and_jitter,
)
from .liveness import is_server_up
from .sampler import ThroughputResult, TransferOptions, TransferPool
from .servers import Server, ServerType, TestKind, endpoint_url
from .stats import calculate_jitter, calculate_mean, format_bytes, format_latency, format_speed
from .upload import UploadTester, upload

__version__ = "1.0.0"

__all__ = [
    "Counter",
    "DownloadTester",
    "GlobalServer",
    "HttpStrategy",
    "ISPInfo",
    "ISPRegistry",
    "IcmpStrategy",
    "LatencyProber",
    "LatencyResult",
    "ProbeError",
    "RequestError",
    "Server",
    "ServerType",
    "SpeedtestError",
    "TestKind",
    "ThroughputResult",
    "TransferOptions",
    "TransferPool",
    "UploadTester",
    "calculate_jitter",
    "calculate_mean",
    "default_registry",
    "download",
    "endpoint_url",
    "format_bytes",
    "format_latency",
    "format_speed",
    "icmp_ping_and_jitter",
    "is_server_up",
    "load_servers",
    "ping_and_jitter",
    "upload",
]
