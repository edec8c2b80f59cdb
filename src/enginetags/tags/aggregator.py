"""Detected map — detector key to the set of packages it fired for."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Set, Tuple

from enginetags.tags.models import TagInfo


class DetectedMap:
    """Grows monotonically; sets are extended, never replaced."""

    def __init__(self) -> None:
        self._tags: Dict[str, Set[TagInfo]] = {}

    def merge(self, keys: Iterable[str], tag: TagInfo) -> None:
        for key in keys:
            self._tags.setdefault(key, set()).add(tag)

    def get(self, key: str) -> Set[TagInfo]:
        return set(self._tags.get(key, ()))

    def keys(self) -> List[str]:
        return sorted(self._tags)

    def items(self) -> Iterator[Tuple[str, List[TagInfo]]]:
        """Keys and members in sorted order."""
        for key in self.keys():
            yield key, sorted(self._tags[key])

    def __contains__(self, key: object) -> bool:
        return key in self._tags

    def __len__(self) -> int:
        return len(self._tags)
