"""FastAPI service for text detection and region pixelation."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from ..config import Settings, load_settings
from ..detection import TextDetector
from ..io.writers import encode_png
from ..pipeline.redact import detect_document_bytes, redact_document_bytes
from ..regions import Region

LOGGER = logging.getLogger("mosaic_redact.api")


def _parse_regions(raw: str) -> List[Region]:
    try:
        data = json.loads(raw or "[]")
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=422, detail="regions must be a JSON list.") from exc
    if isinstance(data, dict):
        data = data.get("regions", [])
    if not isinstance(data, list):
        raise HTTPException(status_code=422, detail="regions must be a JSON list.")
    try:
        return [Region.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=f"Invalid region: {exc}") from exc


def create_app(settings: Optional[Settings] = None, detector: Optional[TextDetector] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.settings is None:
            app.state.settings = load_settings()
        LOGGER.info("Detection language: %s", app.state.settings.detection_lang)
        yield

    app = FastAPI(title="mosaic_redact API", lifespan=lifespan)
    app.state.settings = settings
    app.state.detector = detector

    def _settings() -> Settings:
        if app.state.settings is None:
            app.state.settings = load_settings()
        return app.state.settings

    async def _read(file: UploadFile) -> bytes:
        payload = await file.read()
        if not payload:
            raise HTTPException(status_code=400, detail="Empty file payload.")
        return payload

    @app.post("/detect")
    async def detect(file: UploadFile = File(...), sensitive_only: bool = False) -> dict:
        payload = await _read(file)
        try:
            summary = detect_document_bytes(
                payload,
                sensitive_only=sensitive_only,
                settings=_settings(),
                detector=app.state.detector,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return summary.to_dict()

    @app.post("/redact")
    async def redact(
        file: UploadFile = File(...),
        regions: str = Form("[]"),
        auto_detect: bool = Form(False),
        sensitive_only: bool = Form(False),
        page: int = Form(1),
    ) -> Response:
        payload = await _read(file)
        parsed = _parse_regions(regions)
        try:
            result = redact_document_bytes(
                payload,
                parsed,
                auto_detect=auto_detect,
                sensitive_only=sensitive_only,
                settings=_settings(),
                detector=app.state.detector,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if not 1 <= page <= len(result.outputs):
            raise HTTPException(status_code=404, detail=f"Page {page} not found.")

        summary = result.summary.pages[page - 1]
        return Response(
            content=encode_png(result.outputs[page - 1]),
            media_type="image/png",
            headers={
                "X-Region-Count": str(len(summary.regions)),
                "X-Rejected-Count": str(summary.rejected),
            },
        )

    return app


app = create_app()
