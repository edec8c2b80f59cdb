"""On-disk manifest cache and raw metadata dumps.

Manifests are stored as ``<manifests_dir>/<depot_id>.json`` (a JSON list of
paths). The cache is keyed by depot only: once a depot has a cached file
list, later manifest versions of that depot are not fetched again.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger

Fetch = Callable[[], Awaitable[List[str]]]


def normalize_paths(paths: List[str]) -> List[str]:
    return [p.replace("\\", "/") for p in paths]


class ManifestCache:
    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.hits = 0
        self.misses = 0

    def path_for(self, depot_id: int) -> Path:
        return self.directory / f"{depot_id}.json"

    def load(self, depot_id: int) -> Optional[List[str]]:
        """Cached file list, or None when absent or unreadable."""
        path = self.path_for(depot_id)
        if not path.is_file():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                files = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable manifest cache {}: {}", path, exc)
            return None
        if not isinstance(files, list):
            logger.warning("Ignoring malformed manifest cache {}", path)
            return None
        return files

    def store(self, depot_id: int, files: List[str]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(depot_id)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(json.dumps(files), encoding="utf-8")
        tmp.replace(path)

    async def get(self, depot_id: int, manifest_id: int, fetch: Fetch) -> List[str]:
        """Cached file list for *depot_id*, fetching and persisting on a miss."""
        cached = self.load(depot_id)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        files = normalize_paths(await fetch())
        self.store(depot_id, files)
        logger.debug("Cached manifest {} for depot {} ({} files)", manifest_id, depot_id, len(files))
        return files


class RawInfoStore:
    """Writes fetched package metadata verbatim; never read back."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, package_id: int, raw: Dict[str, Any]) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{package_id}.json"
        path.write_text(json.dumps(raw, indent=2, default=str), encoding="utf-8")
        return path
