"""Data models for content servers and catalog records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class KeyResult(str, Enum):
    """Outcome of a depot decryption key request."""

    OK = "ok"
    ACCESS_DENIED = "access_denied"
    FAIL = "fail"


@dataclass(frozen=True)
class Server:
    """A content server as reported by the server directory."""

    host: str
    port: Optional[int] = None
    weighted_load: float = 0.0
    type: str = "CDN"  # SteamCache | CDN | ... (only some are eligible)
    allowed_package_ids: FrozenSet[int] = frozenset()  # empty = serves all
    cell_id: int = 0

    def serves(self, package_id: int) -> bool:
        return not self.allowed_package_ids or package_id in self.allowed_package_ids

    @property
    def address(self) -> str:
        return self.host if self.port is None else f"{self.host}:{self.port}"


@dataclass(frozen=True)
class DepotRecord:
    """One installable sub-item of a package."""

    depot_id: int
    manifest_id: Optional[int] = None  # public manifest; None = nothing downloadable
    os_list: Tuple[str, ...] = ()  # empty = all platforms

    def applies_to(self, platform: str) -> bool:
        if self.manifest_id is None:
            return False
        if not self.os_list:
            return True
        return platform.lower() in (os_name.lower() for os_name in self.os_list)


@dataclass(frozen=True)
class PackageRecord:
    """A catalog entry: package id, display name, depots, raw metadata."""

    package_id: int
    name: str
    depots: Tuple[DepotRecord, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
