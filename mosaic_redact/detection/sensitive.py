"""Narrow text boxes down to lines that look like personal data.

Wraps another detector and keeps only boxes whose recognised text matches a
regex rule (phone numbers, e-mail addresses, ID and card numbers by
default). Boxes without text are dropped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image

from ..regex import RegexRule, find_matches, load_rules
from .base import TextBox, TextDetector

LOGGER = logging.getLogger("mosaic_redact.detection")


class SensitiveTextDetector:
    def __init__(
        self,
        inner: TextDetector,
        rules: Optional[Sequence[RegexRule]] = None,
        *,
        rules_path: Optional[Path] = None,
    ) -> None:
        self.inner = inner
        self.rules = list(rules) if rules is not None else load_rules(rules_path)

    @property
    def origin(self) -> str:
        return self.inner.origin

    def detect(self, image: Image.Image) -> List[TextBox]:
        boxes = self.inner.detect(image)
        kept = [box for box in boxes if box.text and find_matches(box.text, self.rules)]
        LOGGER.debug("Kept %s of %s text boxes as sensitive", len(kept), len(boxes))
        return kept
