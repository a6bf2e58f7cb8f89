"""Settings loaded from defaults.yaml with MOSAIC_* environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")


def _get_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    intensity: str = "strong"
    min_region_size: float = 0.02
    detection_lang: str = "eng"
    detection_psm: int = 11
    detection_timeout: float = 30.0
    detection_max_workers: int = 2
    detection_min_confidence: float = 0.0
    dedupe_candidates: bool = True
    sensitive_rules_path: Optional[str] = None
    dpi: int = 300


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RuntimeError(f"Config file not found: {path}") from exc
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in config file: {path}") from exc
    if not isinstance(data, dict):
        raise RuntimeError(f"Config file must be a mapping: {path}")
    return data


def load_settings(path: Optional[Path] = None, *, use_env: bool = True) -> Settings:
    """Load settings from YAML (defaults.yaml when ``path`` is None)."""
    data = _read_yaml(path or DEFAULTS_PATH)
    mosaic = data.get("mosaic") or {}
    detection = data.get("detection") or {}
    sensitive = data.get("sensitive") or {}
    io_cfg = data.get("io") or {}

    settings = Settings(
        intensity=str(mosaic.get("intensity", "strong")),
        min_region_size=float(mosaic.get("min_region_size", 0.02)),
        detection_lang=str(detection.get("lang", "eng")),
        detection_psm=int(detection.get("psm", 11)),
        detection_timeout=float(detection.get("timeout", 30.0)),
        detection_max_workers=int(detection.get("max_workers", 2)),
        detection_min_confidence=float(detection.get("min_confidence", 0.0)),
        dedupe_candidates=bool(detection.get("dedupe_candidates", True)),
        sensitive_rules_path=sensitive.get("rules_path"),
        dpi=int(io_cfg.get("dpi", 300)),
    )
    if use_env:
        _apply_env(settings)
    return settings


def _apply_env(settings: Settings) -> None:
    intensity = _get_env("MOSAIC_INTENSITY")
    if intensity:
        settings.intensity = intensity
    lang = _get_env("MOSAIC_OCR_LANG")
    if lang:
        settings.detection_lang = lang
    timeout = _get_env("MOSAIC_DETECTION_TIMEOUT")
    if timeout:
        try:
            settings.detection_timeout = float(timeout)
        except ValueError as exc:
            raise RuntimeError(f"Invalid MOSAIC_DETECTION_TIMEOUT: {timeout}") from exc
    rules = _get_env("MOSAIC_SENSITIVE_RULES_PATH")
    if rules:
        settings.sensitive_rules_path = rules
    if os.getenv("MOSAIC_DEDUPE_CANDIDATES") is not None:
        settings.dedupe_candidates = _env_bool("MOSAIC_DEDUPE_CANDIDATES", default=True)


__all__ = ["DEFAULTS_PATH", "Settings", "load_settings"]
