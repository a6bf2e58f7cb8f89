"""Regex rules for sensitive-text filtering."""

from .engine import DEFAULT_RULES_PATH, RegexMatch, RegexRule, find_matches, load_rules

__all__ = ["DEFAULT_RULES_PATH", "RegexMatch", "RegexRule", "find_matches", "load_rules"]
