"""Core match engine — evaluates a file list against every detector.

A detector fires when any path matches any of its patterns. Each detector
is evaluated into its own DetectorResult so that one broken detector
(e.g. a pattern that raises at match time) is reported and counted as
"no match" without stopping the others.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

from loguru import logger

from enginetags.rules.registry import RuleSet


@dataclass(frozen=True)
class DetectorResult:
    key: str
    matched: bool = False
    matched_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _first_match(paths: Sequence[str], patterns: List[re.Pattern[str]]) -> Optional[str]:
    for path in paths:
        if any(p.search(path) for p in patterns):
            return path
    return None


def evaluate(key: str, paths: Sequence[str], patterns: List[re.Pattern[str]]) -> DetectorResult:
    """Evaluate one detector. Never raises; failures land in ``error``."""
    try:
        hit = _first_match(paths, patterns)
    except Exception as exc:  # a broken detector must not abort the run
        return DetectorResult(key=key, error=f"{type(exc).__name__}: {exc}")
    return DetectorResult(key=key, matched=hit is not None, matched_path=hit)


def evaluate_all(file_list: Iterable[str], ruleset: RuleSet) -> List[DetectorResult]:
    paths = list(file_list)
    return [evaluate(key, paths, patterns) for key, patterns in ruleset.items()]


def run(file_list: Iterable[str], ruleset: RuleSet) -> Set[str]:
    """Return the set of detector keys that fire for *file_list*."""
    detected: Set[str] = set()
    for result in evaluate_all(file_list, ruleset):
        if not result.ok:
            logger.warning("Detector {} failed and was skipped: {}", result.key, result.error)
            continue
        if result.matched:
            detected.add(result.key)
    return detected
