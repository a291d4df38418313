"""
Shared constants used across all engine modules.

Centralises user agents, dialect paths, and tunables so they live in
exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

ANDROID_UA = (
    "Dalvik/2.1.0 (Linux; U; Android 11; M2012K11AC Build/RKQ1.200826.002)"
)

BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36"
)

UPLOAD_BOUNDARY = "00content0boundary00"
MULTIPART_CONTENT_TYPE = f"multipart/form-data;boundary={UPLOAD_BOUNDARY}"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# ---------------------------------------------------------------------------
# Dialect paths (download, upload, ping)
# ---------------------------------------------------------------------------

GLOBAL_SPEED_PATHS = ("/speed/File(1G).dl", "/speed/doAnalsLoad.do", "/speed/")
PERCEPTION_PATHS = ("/speedtest/download", "/speedtest/upload", "/speedtest/ping")
WIRELESS_SPEED_PATHS = (
    "/GSpeedTestServer/download",
    "/GSpeedTestServer/upload",
    "/GSpeedTestServer/",
)

# ---------------------------------------------------------------------------
# Connection limits
# ---------------------------------------------------------------------------

MIN_CONNECTIONS = 1
MAX_CONNECTIONS = 32
DEFAULT_CONNECTIONS = 4

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

DEFAULT_PING_COUNT = 10
DEFAULT_DURATION = 15.0          # seconds for download / upload
MIN_DURATION = 1.0
MAX_DURATION = 300.0
MIN_PING_COUNT = 1
MAX_PING_COUNT = 100

LAUNCH_STAGGER = 0.2             # 200 ms between initial transfer launches
PROGRESS_INTERVAL = 0.1          # live rate refresh

LIVENESS_TIMEOUT = 5.0
PING_TIMEOUT = 5.0               # per HTTP probe request
CONNECT_TIMEOUT = 5.0
SOCK_READ_TIMEOUT = 5.0

# One ICMP echo fits in interval + reply timeout, so ``count`` echoes finish
# within ``count`` seconds.
ICMP_INTERVAL = 0.2
ICMP_REPLY_TIMEOUT = 0.8

# ---------------------------------------------------------------------------
# Data transfer
# ---------------------------------------------------------------------------

CHUNK_SIZE = 256 * 1024          # 256 KB read / write granularity
DEFAULT_UPLOAD_SIZE = 1024       # KiB per upload request
MIN_UPLOAD_SIZE = 1
MAX_UPLOAD_SIZE = 1024 * 1024    # 1 GiB expressed in KiB
