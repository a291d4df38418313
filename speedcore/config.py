"""
User configuration file support.

Reads/writes ``~/.taierspeed/config.json``.  Command-line flags override
whatever is stored here.

Supported keys::

    concurrent = 4           # concurrent transfers per test
    duration = 15.0          # seconds per download / upload test
    ping_count = 10
    upload_size = 1024       # KiB per upload request
    token = ""               # GlobalSpeed API key
    source = ""              # source address for ICMP probes
    no_icmp = false          # always use HTTP ping
    no_pre_allocate = false  # stream random upload data inline
    bytes = false            # show byte rates instead of bits
    mebibytes = false        # binary unit base
    ipv6 = false             # ICMP over IPv6
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from .constants import (
    DEFAULT_CONNECTIONS,
    DEFAULT_DURATION,
    DEFAULT_PING_COUNT,
    DEFAULT_UPLOAD_SIZE,
)

_CONFIG_DIR = os.path.join(Path.home(), ".taierspeed")
_CONFIG_FILE = "config.json"


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "concurrent": DEFAULT_CONNECTIONS,
    "duration": DEFAULT_DURATION,
    "ping_count": DEFAULT_PING_COUNT,
    "upload_size": DEFAULT_UPLOAD_SIZE,
    "token": "",
    "source": "",
    "no_icmp": False,
    "no_pre_allocate": False,
    "bytes": False,
    "mebibytes": False,
    "ipv6": False,
}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
        if isinstance(user, dict):
            config.update(user)
    except (json.JSONDecodeError, IOError):
        pass  # corrupt file; use defaults

    return config


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path


def get_config_value(key: str) -> Any:
    """Get a single config value."""
    return load_config().get(key, DEFAULTS.get(key))


def set_config_value(key: str, value: Any) -> str:
    """Set a single config value and persist.  Returns file path."""
    if key not in DEFAULTS:
        raise KeyError(f"Unknown config key: {key}")
    config = load_config()
    config[key] = _coerce(key, value)
    return save_config(config)


def _coerce(key: str, value: Any) -> Any:
    """Convert a string from the command line to the type of the default."""
    default = DEFAULTS[key]
    if not isinstance(value, str):
        return value
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def config_path() -> str:
    """Return the config file path (for display purposes)."""
    return _config_path()
