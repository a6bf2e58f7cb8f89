from pathlib import Path

import pytest
from PIL import Image

from mosaic_redact.detection import SensitiveTextDetector
from mosaic_redact.detection.base import TextBox
from mosaic_redact.regex import find_matches, load_rules
from mosaic_redact.regex.validators import cn_id_checksum, luhn_valid


def test_load_rules_and_match(tmp_path: Path):
    rules_path = tmp_path / "rules.yaml"
    rules_path.write_text(
        """
- name: invoice_number
  pattern: 'invoice\\s*(no|number)?\\s*[:#-]?\\s*([A-Z0-9-]{3,})'
  group: 2
  flags: I
"""
    )

    rules = load_rules(rules_path)
    assert len(rules) == 1
    assert rules[0].name == "invoice_number"

    matches = find_matches("INVOICE No: ABC-123", rules)
    assert [m.value for m in matches] == ["ABC-123"]


def test_unknown_validator_raises(tmp_path: Path):
    rules_path = tmp_path / "rules.yaml"
    rules_path.write_text("- name: x\n  pattern: 'x'\n  validator: nope\n")
    with pytest.raises(KeyError):
        find_matches("x", load_rules(rules_path))


def test_rule_without_pattern_is_rejected(tmp_path: Path):
    rules_path = tmp_path / "rules.yaml"
    rules_path.write_text("- name: x\n")
    with pytest.raises(ValueError):
        load_rules(rules_path)


def test_default_rules_flag_contact_details():
    rules = load_rules()
    names = {m.rule for m in find_matches("mail anna@example.com or 13812345678", rules)}
    assert {"email", "mobile_cn"} <= names
    assert find_matches("Quarterly report", rules) == []


def test_bank_card_rule_uses_luhn():
    rules = [r for r in load_rules() if r.name == "bank_card"]
    assert find_matches("card 4111 1111 1111 1111", rules)
    assert find_matches("card 4111 1111 1111 1112", rules) == []


def test_validators():
    assert luhn_valid("4111-1111-1111-1111")
    assert not luhn_valid("1234")
    assert cn_id_checksum("11010519491231002X")
    assert not cn_id_checksum("110105194912310021")


def test_sensitive_detector_keeps_matching_lines(make_detector):
    inner = make_detector(
        [
            TextBox(0.1, 0.1, 0.5, 0.1, text="Call 13812345678"),
            TextBox(0.1, 0.3, 0.5, 0.1, text="Hello world"),
            TextBox(0.1, 0.5, 0.5, 0.1, text=None),
        ]
    )
    detector = SensitiveTextDetector(inner)
    boxes = detector.detect(Image.new("RGB", (10, 10)))
    assert [b.text for b in boxes] == ["Call 13812345678"]
    assert detector.origin == inner.origin
