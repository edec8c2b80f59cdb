"""Pattern compilation — strict first, permissive fallback second.

Rule files are shared with tooling that accepts ``\\_`` as an escaped
underscore and free-spacing syntax. A pattern is first compiled as written;
only if that fails is the permissive form tried: ``\\_`` becomes ``_`` and
verbose mode is switched on, so whitespace is ignored and ``#`` starts a
comment. Both stages are pure functions of the pattern text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

BASE_FLAGS = re.IGNORECASE | re.DOTALL
PERMISSIVE_FLAGS = BASE_FLAGS | re.VERBOSE


class RuleSyntaxError(Exception):
    """Raised when a rule file line is malformed or its pattern won't compile."""

    def __init__(self, message: str, line_no: Optional[int] = None) -> None:
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)


def compile_strict(text: str) -> re.Pattern[str]:
    return re.compile(text, BASE_FLAGS)


def permissive_text(text: str) -> str:
    return text.replace("\\_", "_")


def compile_permissive(text: str) -> re.Pattern[str]:
    return re.compile(permissive_text(text), PERMISSIVE_FLAGS)


def compile_pattern(text: str) -> re.Pattern[str]:
    """Compile *text*, falling back to the permissive form.

    Raises RuleSyntaxError if neither form compiles.
    """
    try:
        return compile_strict(text)
    except re.error as strict_exc:
        try:
            return compile_permissive(text)
        except re.error as exc:
            raise RuleSyntaxError(
                f"invalid pattern {text!r}: {strict_exc} (fallback: {exc})"
            ) from exc


@dataclass(frozen=True)
class RuleLine:
    """One ``field = pattern`` entry as it appeared in the rule file."""

    category: str
    field: str
    pattern: str
    line_no: int

    @property
    def key(self) -> str:
        return f"{self.category}.{self.field}"
