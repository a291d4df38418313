"""
Operator registry and directory records.

The registry is built once and handed to whoever needs to classify a
server; nothing here is module-level mutable state.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from .servers import Server, ServerType


@dataclass(frozen=True)
class ISPInfo:
    """A network operator."""

    id: int
    name: str
    label: str = ""


TELECOM = ISPInfo(1, "电信", "China Telecom")
UNICOM = ISPInfo(2, "联通", "China Unicom")
MOBILE = ISPInfo(3, "移动", "China Mobile")
CERNET = ISPInfo(4, "教育网", "CERNET")
CATV = ISPInfo(5, "广电网", "China Broadnet")
DRPENG = ISPInfo(6, "鹏博士", "Dr.Peng")
DEFISP = ISPInfo(0, "未知", "Unknown")


class ISPRegistry:
    """Immutable operator lookup.

    ``known`` is matched exactly against a record's operator string.
    ``suffixes`` is the broader registry, matched against the end of the
    server name with the longest suffix winning.
    """

    def __init__(
        self,
        known: Iterable[ISPInfo],
        suffixes: Iterable[ISPInfo] = (),
        default: ISPInfo = DEFISP,
    ) -> None:
        self._known: Mapping[str, ISPInfo] = MappingProxyType(
            {isp.name: isp for isp in known}
        )
        self._suffixes: Tuple[ISPInfo, ...] = tuple(
            sorted(suffixes, key=lambda isp: len(isp.name), reverse=True)
        )
        self.default = default

    def resolve(self, oper: str, name: str = "") -> ISPInfo:
        isp = self._known.get(oper)
        if isp is not None:
            return isp
        for candidate in self._suffixes:
            if candidate.name and name.endswith(candidate.name):
                return candidate
        return self.default

    def by_id(self, isp_id: int) -> Optional[ISPInfo]:
        for isp in (*self._known.values(), *self._suffixes):
            if isp.id == isp_id:
                return isp
        return None


def default_registry() -> ISPRegistry:
    known = (TELECOM, UNICOM, MOBILE, CERNET, CATV, DRPENG)
    return ISPRegistry(known=known, suffixes=known)


# ---------------------------------------------------------------------------
# Directory record
# ---------------------------------------------------------------------------

@dataclass
class GlobalServer:
    """A server entry as published by the GlobalSpeed directory."""

    id: int
    name: str
    ip: str
    port: str
    prov: str = ""
    city: str = ""
    loc: str = ""
    isp: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> GlobalServer:
        return cls(
            id=int(data.get("hostid", 0)),
            name=data.get("hostname", ""),
            ip=data.get("hostip", ""),
            port=str(data.get("port", "80")),
            prov=data.get("pname", ""),
            city=data.get("city", ""),
            loc=data.get("location", ""),
            isp=data.get("oper", ""),
        )

    def get_isp(self, registry: ISPRegistry) -> ISPInfo:
        return registry.resolve(self.isp, self.name)

    def to_server(self, registry: ISPRegistry) -> Server:
        return Server(
            id=str(self.id),
            name=self.name,
            ip=self.ip,
            host=self.ip,
            port=int(self.port or 80),
            province=self.prov,
            city=self.city,
            isp=self.get_isp(registry).id,
            type=ServerType.GLOBAL_SPEED,
        )


def load_servers(entries: Iterable[dict], registry: ISPRegistry) -> List[Server]:
    """Build ``Server`` objects from raw directory JSON.

    Entries carrying ``hostid`` are GlobalSpeed directory records; anything
    else is read as a plain server descriptor.
    """
    servers: List[Server] = []
    for entry in entries:
        if "hostid" in entry:
            servers.append(GlobalServer.from_dict(entry).to_server(registry))
        else:
            servers.append(Server.from_dict(entry))
    return servers
