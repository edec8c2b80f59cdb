"""Rule test corpus — regression checks for a rule file.

Layout of a corpus directory::

    filelists/<Category>.<Field>[.anything].txt   whole list must detect the key
    types/<Category>.<Field>[.anything].txt       every line alone must detect it
    types/_NonMatchingTests.txt                   no line may detect a non-Evidence key

Files whose key is not defined in the rule set are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from enginetags.rules.registry import RuleSet
from enginetags.scanner.engine import run

NON_MATCHING_FILE = "_NonMatchingTests.txt"
EVIDENCE_PREFIX = "Evidence."
# Allowed to miss in whole-list checks.
TOLERATED_FILELIST_MISSES = frozenset({"Engine.Godot"})


@dataclass
class CorpusFailure:
    kind: str  # filelist | type | non_matching
    source: str
    expected: str
    detail: str


@dataclass
class CorpusReport:
    checked: int = 0
    skipped: int = 0
    failures: List[CorpusFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


def expected_key(path: Path) -> str:
    """``Engine.Unity.big.txt`` -> ``Engine.Unity``."""
    return ".".join(path.name.split(".")[:2])


def _read_lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8-sig").splitlines()


def check_filelists(directory: Path, ruleset: RuleSet, report: CorpusReport) -> None:
    for path in sorted(directory.glob("*.txt")):
        expected = expected_key(path)
        if expected not in ruleset:
            report.skipped += 1
            continue
        report.checked += 1
        result = run(_read_lines(path), ruleset)
        if expected not in result and expected not in TOLERATED_FILELIST_MISSES:
            report.failures.append(
                CorpusFailure("filelist", path.name, expected, f"not detected in {path.name}")
            )


def check_types(directory: Path, ruleset: RuleSet, report: CorpusReport) -> None:
    for path in sorted(directory.glob("*.txt")):
        if path.name == NON_MATCHING_FILE:
            continue
        expected = expected_key(path)
        if expected not in ruleset:
            report.skipped += 1
            continue
        for line in _read_lines(path):
            if not line.strip():
                continue
            report.checked += 1
            if expected not in run([line], ruleset):
                report.failures.append(CorpusFailure("type", path.name, expected, line))


def check_non_matching(path: Path, ruleset: RuleSet, report: CorpusReport) -> None:
    for line in _read_lines(path):
        line = line.strip()
        if not line:
            continue
        report.checked += 1
        unexpected = sorted(k for k in run([line], ruleset) if not k.startswith(EVIDENCE_PREFIX))
        if unexpected:
            report.failures.append(
                CorpusFailure("non_matching", path.name, "", f"{line} matched {', '.join(unexpected)}")
            )


def verify_corpus(root: Path, ruleset: RuleSet) -> CorpusReport:
    """Run every corpus check present under *root*."""
    report = CorpusReport()
    if (root / "filelists").is_dir():
        check_filelists(root / "filelists", ruleset, report)
    types_dir = root / "types"
    if types_dir.is_dir():
        check_types(types_dir, ruleset, report)
        if (types_dir / NON_MATCHING_FILE).is_file():
            check_non_matching(types_dir / NON_MATCHING_FILE, ruleset, report)
    return report
