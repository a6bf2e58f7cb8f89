"""Tesseract text localization adapter.

Runs word-level ``image_to_data`` in sparse-text mode with the dictionary
word lists disabled (no language-model correction) and groups words into
lines. Only geometry is needed downstream; the recognised text is carried
along for optional filtering.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

import cv2
import numpy as np
import pytesseract
from PIL import Image

from ..geometry import normalize_box
from .base import TOP_LEFT, TextBox

FAST_FLAGS = "-c load_system_dawg=0 -c load_freq_dawg=0"


def preprocess_image(im: Image.Image, *, denoise: bool = False) -> np.ndarray:
    """Convert to a grayscale array for Tesseract; optional light denoising."""
    arr = cv2.cvtColor(np.array(im.convert("RGB")), cv2.COLOR_RGB2BGR)
    gray = cv2.cvtColor(arr, cv2.COLOR_BGR2GRAY)
    if denoise:
        gray = cv2.fastNlMeansDenoising(gray, h=8)
    return gray


def word_boxes(preprocessed_im, *, lang: str = "eng", psm: int = 11) -> List[Dict[str, object]]:
    """Run OCR and return word dicts with pixel bboxes, confidence and line keys."""
    cfg = f"--psm {psm} {FAST_FLAGS}"
    data = pytesseract.image_to_data(
        preprocessed_im, lang=lang, config=cfg, output_type=pytesseract.Output.DICT
    )

    words: List[Dict[str, object]] = []
    n = len(data.get("text", []))
    confs = data.get("conf")
    for i in range(n):
        text = (data["text"][i] or "").strip()
        if not text:
            continue
        width = int(data["width"][i])
        height = int(data["height"][i])
        if width <= 0 or height <= 0:
            continue
        words.append(
            {
                "text": text,
                "left": int(data["left"][i]),
                "top": int(data["top"][i]),
                "width": width,
                "height": height,
                "conf": float(confs[i]) if confs is not None else None,
                "line": (
                    int(data.get("block_num", [0] * n)[i]),
                    int(data.get("par_num", [0] * n)[i]),
                    int(data.get("line_num", [0] * n)[i]),
                ),
                "word_num": int(data.get("word_num", [0] * n)[i]),
            }
        )
    words.sort(key=lambda w: (w["line"], w["word_num"]))
    return words


def group_lines(words: List[Dict[str, object]]) -> List[Dict[str, object]]:
    """Merge words sharing (block, paragraph, line) into one line box."""
    lines: Dict[Tuple[int, int, int], Dict[str, object]] = {}
    for word in words:
        key = word["line"]
        x0, y0 = word["left"], word["top"]
        x1, y1 = x0 + word["width"], y0 + word["height"]
        line = lines.get(key)
        if line is None:
            lines[key] = {"x0": x0, "y0": y0, "x1": x1, "y1": y1, "words": [word["text"]], "confs": [word["conf"]]}
            continue
        line["x0"] = min(line["x0"], x0)
        line["y0"] = min(line["y0"], y0)
        line["x1"] = max(line["x1"], x1)
        line["y1"] = max(line["y1"], y1)
        line["words"].append(word["text"])
        line["confs"].append(word["conf"])

    out = []
    for key in sorted(lines):
        line = lines[key]
        confs = [c for c in line["confs"] if c is not None and c >= 0]
        out.append(
            {
                "left": line["x0"],
                "top": line["y0"],
                "width": line["x1"] - line["x0"],
                "height": line["y1"] - line["y0"],
                "text": " ".join(line["words"]),
                "conf": sum(confs) / len(confs) if confs else None,
            }
        )
    return out


class TesseractTextDetector:
    """Text detector returning top-left normalized line boxes."""

    origin = TOP_LEFT

    def __init__(self, *, lang: str = "eng", psm: int = 11, min_confidence: float = 0.0, denoise: bool = False) -> None:
        self.lang = lang
        self.psm = psm
        self.min_confidence = min_confidence
        self.denoise = denoise

    def detect(self, image: Image.Image) -> List[TextBox]:
        width, height = image.size
        if width <= 0 or height <= 0:
            raise ValueError(f"Cannot detect text in a {width}x{height} image")
        gray = preprocess_image(image, denoise=self.denoise)
        boxes: List[TextBox] = []
        for line in group_lines(word_boxes(gray, lang=self.lang, psm=self.psm)):
            conf = line["conf"]
            if conf is not None and conf < self.min_confidence:
                continue
            rect = normalize_box(line["left"], line["top"], line["width"], line["height"], width, height)
            boxes.append(
                TextBox(x=rect.x, y=rect.y, width=rect.width, height=rect.height, text=line["text"], conf=conf)
            )
        return boxes
