"""Tag data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True, order=True)
class TagInfo:
    """A package credited with a detection; equal by value."""

    package_id: int
    name: str


@dataclass
class RunStats:
    """Counters for one orchestration run."""

    packages: int = 0
    depots_scanned: int = 0
    depots_skipped: int = 0
    cache_hits: int = 0
    failed_packages: List[int] = field(default_factory=list)
