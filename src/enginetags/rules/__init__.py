"""Rule engine — pattern compilation and rule-file parsing."""

from enginetags.rules.models import RuleSyntaxError, compile_pattern
from enginetags.rules.registry import RuleSet, load_rules, parse_rules

__all__ = ["RuleSet", "RuleSyntaxError", "compile_pattern", "load_rules", "parse_rules"]
