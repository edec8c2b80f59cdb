"""Rule set — parses rule files into detector key -> compiled patterns."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Tuple, Union

from enginetags.rules.models import RuleLine, RuleSyntaxError, compile_pattern

COMMENT_CHAR = ";"
REPEAT_MARKER = "[]"


class RuleSet:
    """Detector key to an ordered, append-only list of compiled patterns."""

    def __init__(self) -> None:
        self._rules: Dict[str, List[re.Pattern[str]]] = {}

    # ---- registration ----

    def add(self, key: str, pattern: re.Pattern[str]) -> None:
        """Append *pattern* to *key*; repeated keys accumulate, never replace."""
        self._rules.setdefault(key, []).append(pattern)

    def add_line(self, line: RuleLine) -> None:
        try:
            compiled = compile_pattern(line.pattern)
        except RuleSyntaxError as exc:
            raise RuleSyntaxError(str(exc), line.line_no) from exc
        self.add(line.key, compiled)

    # ---- queries ----

    @property
    def keys(self) -> List[str]:
        return list(self._rules)

    def get(self, key: str) -> List[re.Pattern[str]]:
        return list(self._rules.get(key, ()))

    def items(self) -> Iterator[Tuple[str, List[re.Pattern[str]]]]:
        return iter(self._rules.items())

    def __contains__(self, key: object) -> bool:
        return key in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({len(self)} detectors)"


def iter_rule_lines(lines: Iterable[str]) -> Iterator[RuleLine]:
    """Yield a RuleLine per entry, tracking the current ``[Category]``."""
    category = ""
    for line_no, raw in enumerate(lines, start=1):
        line = raw.split(COMMENT_CHAR, 1)[0].strip()
        if not line:
            continue

        if line.startswith("["):
            category = line[1:-1] if line.endswith("]") else line[1:]
            continue

        if "=" not in line:
            raise RuleSyntaxError(f"expected 'field = pattern', got {line!r}", line_no)

        field, pattern = line.split("=", 1)
        field = field.strip()
        if field.endswith(REPEAT_MARKER):
            field = field[: -len(REPEAT_MARKER)]

        yield RuleLine(category=category, field=field, pattern=pattern.strip(), line_no=line_no)


def parse_rules(source: Union[str, Iterable[str]]) -> RuleSet:
    """Parse rule text (or an iterable of lines) into a RuleSet."""
    lines = source.splitlines() if isinstance(source, str) else source
    ruleset = RuleSet()
    for rule_line in iter_rule_lines(lines):
        ruleset.add_line(rule_line)
    return ruleset


def load_rules(path: Path) -> RuleSet:
    """Parse the rule file at *path*. Missing files are a RuleSyntaxError."""
    if not path.is_file():
        raise RuleSyntaxError(f"rule file not found: {path}")
    with open(path, encoding="utf-8-sig") as f:
        return parse_rules(f)
