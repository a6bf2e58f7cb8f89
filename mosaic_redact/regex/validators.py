"""Python validators referenced by name from rule files."""

from __future__ import annotations

import re
from typing import Callable, Dict


def luhn_valid(value: str) -> bool:
    """Luhn checksum over the digits of ``value`` (card numbers)."""
    digits = [int(ch) for ch in re.sub(r"\D", "", value)]
    if len(digits) < 12:
        return False
    total = 0
    for i, digit in enumerate(reversed(digits)):
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def cn_id_checksum(value: str) -> bool:
    """Check digit of an 18-character mainland China resident ID."""
    value = value.upper()
    if not re.fullmatch(r"\d{17}[\dX]", value):
        return False
    weights = [7, 9, 10, 5, 8, 4, 2, 1, 6, 3, 7, 9, 10, 5, 8, 4, 2]
    checks = "10X98765432"
    total = sum(int(ch) * w for ch, w in zip(value[:17], weights))
    return checks[total % 11] == value[17]


DEFAULT_VALIDATORS: Dict[str, Callable[[str], bool]] = {
    "luhn": luhn_valid,
    "cn_id": cn_id_checksum,
}
