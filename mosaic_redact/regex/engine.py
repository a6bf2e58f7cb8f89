"""Regex rule runner (YAML rules + optional Python validators)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

import yaml

from .validators import DEFAULT_VALIDATORS

DEFAULT_RULES_PATH = Path(__file__).with_name("sensitive_rules.yaml")


@dataclass
class RegexRule:
    name: str
    pattern: str
    group: int = 0
    flags: Optional[str] = None
    validator: Optional[str] = None


@dataclass
class RegexMatch:
    rule: str
    value: str
    start: int
    end: int


def _parse_flags(flag_str: Optional[str]) -> int:
    if not flag_str:
        return 0
    mapping = {
        "I": re.IGNORECASE,
        "M": re.MULTILINE,
        "S": re.DOTALL,
        "X": re.VERBOSE,
        "A": re.ASCII,
    }
    flags = 0
    for ch in flag_str:
        if ch in mapping:
            flags |= mapping[ch]
    return flags


def load_rules(path: Optional[Path] = None) -> List[RegexRule]:
    """Load rules from YAML; the bundled sensitive-data rules when ``path`` is None."""
    path = Path(path) if path is not None else DEFAULT_RULES_PATH
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    if not isinstance(data, list):
        raise ValueError(f"Rules file must contain a list: {path}")
    rules: List[RegexRule] = []
    for item in data:
        if not item.get("name") or not item.get("pattern"):
            raise ValueError(f"Rule needs a name and a pattern: {item!r}")
        rules.append(
            RegexRule(
                name=item["name"],
                pattern=item["pattern"],
                group=int(item.get("group", 0)),
                flags=item.get("flags"),
                validator=item.get("validator"),
            )
        )
    return rules


def find_matches(
    text: str,
    rules: Iterable[RegexRule],
    validators: Optional[Dict[str, Callable[[str], bool]]] = None,
) -> List[RegexMatch]:
    """Return every rule match in ``text`` that passes its validator."""
    if validators is None:
        validators = DEFAULT_VALIDATORS
    matches: List[RegexMatch] = []
    if not text:
        return matches

    for rule in rules:
        check = validators.get(rule.validator) if rule.validator else None
        if rule.validator and check is None:
            raise KeyError(f"Unknown validator {rule.validator!r} in rule {rule.name!r}")
        for match in re.finditer(rule.pattern, text, flags=_parse_flags(rule.flags)):
            value = match.group(rule.group)
            if check is not None and not check(value):
                continue
            matches.append(RegexMatch(rule=rule.name, value=value, start=match.start(rule.group), end=match.end(rule.group)))
    return matches
