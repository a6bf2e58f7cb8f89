"""Command line entry point: pixelate regions of an image or PDF."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Union

from .config import load_settings
from .geometry import NormalizedRect
from .io.writers import write_image, write_json, write_jsonl
from .pipeline.redact import detect_document_bytes, redact_document_bytes
from .regions import Region

LOGGER = logging.getLogger("mosaic_redact.cli")


def _parse_region(value: str) -> NormalizedRect:
    try:
        parts = [float(p) for p in value.split(",")]
        if len(parts) != 4:
            raise ValueError("expected four numbers")
        return NormalizedRect.from_sequence(parts)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid region {value!r} (x,y,width,height in [0,1]): {exc}") from exc


def _load_regions_json(path: Path) -> List[Region]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("regions", [])
    return [Region.from_dict(item) for item in data]


def _page_path(output: Path, page: int, page_count: int) -> Path:
    if page_count == 1:
        return output
    return output.with_name(f"{output.stem}-p{page}{output.suffix}")


def _configure_logging(level: str | None) -> None:
    level_name = (level or os.getenv("MOSAIC_LOG_LEVEL") or "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _emit(data: dict, output: Path | None) -> None:
    if output:
        write_json(output, data)
    else:
        print(json.dumps(data, ensure_ascii=False, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Pixelate rectangular regions of an image or PDF.")
    parser.add_argument("--config", type=Path, default=None, help="Settings YAML (defaults.yaml if omitted)")
    parser.add_argument("--log-level", default=None, help="Logging level (default: MOSAIC_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="cmd")

    apply = sub.add_parser("apply", help="Pixelate regions and write the redacted image")
    apply.add_argument("path", nargs="?", help="Path to PDF or image")
    apply.add_argument(
        "--region",
        action="append",
        type=_parse_region,
        default=[],
        help="Normalized region x,y,width,height (top-left origin); repeatable",
    )
    apply.add_argument("--regions-json", type=Path, default=None, help="JSON list of regions")
    apply.add_argument("--auto-detect", action="store_true", help="Add detected text lines as regions")
    apply.add_argument("--sensitive-only", action="store_true", help="Only detect lines matching sensitive-data rules")
    apply.add_argument("--output", type=Path, default=None, help="Redacted image path (PNG by default)")
    apply.add_argument("--summary", type=Path, default=None, help="Write region summary JSON to file")

    detect = sub.add_parser("detect", help="Print candidate text regions as JSON")
    detect.add_argument("path", nargs="?", help="Path to PDF or image")
    detect.add_argument("--sensitive-only", action="store_true", help="Only report lines matching sensitive-data rules")
    detect.add_argument("--output", type=Path, default=None, help="Write JSON output to file (.jsonl: one line per page)")

    # Backward-compatible: allow `mosaic-redact /path/to/image.png --region ...`
    if len(sys.argv) > 1 and sys.argv[1] not in {"apply", "detect"} and not sys.argv[1].startswith("-"):
        sys.argv.insert(1, "apply")

    args = parser.parse_args()
    _configure_logging(args.log_level)

    if args.cmd is None:
        parser.print_help()
        raise SystemExit(2)
    if not args.path:
        raise SystemExit("Provide a file path")

    settings = load_settings(args.config)
    payload = Path(args.path).read_bytes()

    if args.cmd == "detect":
        summary = detect_document_bytes(payload, sensitive_only=args.sensitive_only, settings=settings)
        if args.output and args.output.suffix.lower() == ".jsonl":
            rows = write_jsonl(args.output, summary.to_dict()["pages"])
            LOGGER.info("Wrote %s pages to %s", rows, args.output)
        else:
            _emit(summary.to_dict(), args.output)
        return

    regions: List[Union[Region, NormalizedRect]] = list(args.region)
    if args.regions_json:
        regions.extend(_load_regions_json(args.regions_json))
    if not regions and not args.auto_detect:
        raise SystemExit("Nothing to redact: pass --region, --regions-json or --auto-detect")

    result = redact_document_bytes(
        payload,
        regions,
        auto_detect=args.auto_detect,
        sensitive_only=args.sensitive_only,
        settings=settings,
    )
    source = Path(args.path)
    output = args.output or source.with_name(f"{source.stem}.redacted.png")
    for page, raster in zip(result.summary.pages, result.outputs):
        target = _page_path(output, page.page, len(result.outputs))
        write_image(target, raster)
        LOGGER.info("Wrote %s", target)
    _emit(result.to_dict(), args.summary)


if __name__ == "__main__":
    main()
