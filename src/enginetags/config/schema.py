"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

OutputFormat = Literal["terminal", "json"]

ELIGIBLE_SERVER_TYPES: tuple[str, ...] = ("SteamCache", "CDN")


@dataclass
class ScanConfig:
    platform: str = "windows"  # depots restricted to other platforms are skipped
    dump_raw_info: bool = True


@dataclass
class RulesConfig:
    path: str = "rules.ini"
    corpus: str = ""  # rule test corpus directory, empty = <rules dir>/tests


@dataclass
class PoolConfig:
    refresh_interval: float = 5.0
    rate_limit_backoff: float = 60.0
    eligible_types: List[str] = field(default_factory=lambda: list(ELIGIBLE_SERVER_TYPES))


@dataclass
class SessionConfig:
    max_reconnect_attempts: int = 10
    reconnect_delay: float = 1.0  # attempt N waits N * reconnect_delay


@dataclass
class CacheConfig:
    manifests_dir: str = "manifests"
    raw_info_dir: str = "info"


@dataclass
class OutputConfig:
    path: str = "detected.json"
    format: OutputFormat = "terminal"


@dataclass
class EngineTagsConfig:
    version: str = "1.0"
    scan: ScanConfig = field(default_factory=ScanConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    pool: PoolConfig = field(default_factory=PoolConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
