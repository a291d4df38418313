"""
Speed-test server descriptors and endpoint resolution.

A ``Server`` names a test target and knows which of the three backend API
dialects it speaks.  URL building is pure: no I/O happens here.
"""
from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from typing import Any, Dict

from .constants import GLOBAL_SPEED_PATHS, PERCEPTION_PATHS, WIRELESS_SPEED_PATHS


class ServerType(enum.IntEnum):
    """Backend API dialect."""

    GLOBAL_SPEED = 0
    PERCEPTION = 1
    WIRELESS_SPEED = 2


class TestKind(enum.IntEnum):
    """Which endpoint of a server to resolve."""

    __test__ = False  # keep pytest from collecting this enum

    DOWNLOAD = 0
    UPLOAD = 1
    PING = 2


_DIALECT_PATHS = {
    ServerType.GLOBAL_SPEED: GLOBAL_SPEED_PATHS,
    ServerType.PERCEPTION: PERCEPTION_PATHS,
    ServerType.WIRELESS_SPEED: WIRELESS_SPEED_PATHS,
}


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass
class Server:
    """A single speed-test backend."""

    id: str
    name: str = ""
    ip: str = ""
    ipv6: str = ""
    host: str = ""
    port: int = 80
    prov: int = 0
    province: str = ""
    city: str = ""
    isp: int = 0
    download_uri: str = ""
    upload_uri: str = ""
    ping_uri: str = ""
    type: ServerType = ServerType.GLOBAL_SPEED
    _no_icmp: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False, compare=False
    )

    # -- Constructors -------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> Server:
        ip = data.get("ip", "")
        try:
            kind = ServerType(int(data.get("type", 0)))
        except ValueError:
            kind = ServerType.GLOBAL_SPEED
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            ip=ip,
            ipv6=data.get("ipv6", ""),
            host=data.get("host") or ip,
            port=int(data.get("port", 80)),
            prov=int(data.get("province", 0)),
            city=data.get("city", ""),
            isp=int(data.get("isp", 0)),
            download_uri=data.get("download", ""),
            upload_uri=data.get("upload", ""),
            ping_uri=data.get("ping", ""),
            type=kind,
        )

    # -- Sticky ICMP flag ---------------------------------------------------

    @property
    def no_icmp(self) -> bool:
        """True once ICMP probing has been found unusable for this host."""
        return self._no_icmp.is_set()

    def mark_no_icmp(self) -> None:
        self._no_icmp.set()

    # -- Derived URLs -------------------------------------------------------

    @property
    def download_url(self) -> str:
        return endpoint_url(self, TestKind.DOWNLOAD)

    @property
    def upload_url(self) -> str:
        return endpoint_url(self, TestKind.UPLOAD)

    @property
    def ping_url(self) -> str:
        return endpoint_url(self, TestKind.PING)

    # -- Serialisation ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "ip": self.ip,
            "ipv6": self.ipv6,
            "host": self.host,
            "port": self.port,
            "province": self.prov,
            "city": self.city,
            "isp": self.isp,
            "download": self.download_uri,
            "upload": self.upload_uri,
            "ping": self.ping_uri,
            "type": int(self.type),
        }


# ---------------------------------------------------------------------------
# Endpoint resolution
# ---------------------------------------------------------------------------

def endpoint_url(server: Server, kind: TestKind) -> str:
    """Absolute URL of *server*'s endpoint for *kind*.

    An explicit per-server URI wins; otherwise the dialect's default path
    is used.
    """
    override = (server.download_uri, server.upload_uri, server.ping_uri)[kind]
    path = override or _DIALECT_PATHS.get(server.type, GLOBAL_SPEED_PATHS)[kind]
    return f"http://{server.host}:{server.port}{path}"
