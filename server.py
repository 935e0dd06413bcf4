"""FastAPI server exposing the channel ingestion stream."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from config.settings import (
    API_SERVER_BIND,
    API_SERVER_PORT,
    PUBLIC_DATA_DIR,
    STREAMLIT_BASE_URL,
)
from ingestion.models import IngestRequest
from ingestion.orchestrator import IngestionOrchestrator
from ingestion.sse import MEDIA_TYPE, encode_event

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


def safe_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def _validation_message(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "body"
    return f"{field}: {error['msg']}"


async def _json_body(request: Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def build_app(
    orchestrator_factory: Callable[[], IngestionOrchestrator] = IngestionOrchestrator,
    *,
    public_dir: str = PUBLIC_DATA_DIR,
) -> FastAPI:
    """Construct the FastAPI app."""
    app = FastAPI(title="Channel Analytics API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[STREAMLIT_BASE_URL],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    public_path = Path(public_dir)

    @app.post("/api/youtube/download")
    async def download_channel(request: Request):
        body = await _json_body(request)
        try:
            ingest_request = IngestRequest.model_validate(body or {})
        except ValidationError as exc:
            return JSONResponse({"error": _validation_message(exc)}, status_code=400)
        if not ingest_request.channel_handle:
            return JSONResponse({"error": "channelHandle required"}, status_code=400)

        orchestrator = orchestrator_factory()

        def event_stream() -> Iterator[str]:
            for event in orchestrator.ingest(
                ingest_request.channel_handle, ingest_request.max_videos
            ):
                yield encode_event(event)

        return StreamingResponse(
            event_stream(),
            media_type=MEDIA_TYPE,
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    @app.post("/api/youtube/save-public")
    async def save_public(request: Request):
        body = await _json_body(request) or {}
        data, filename = body.get("data"), body.get("filename")
        if not data or not filename:
            return JSONResponse({"error": "data and filename required"}, status_code=400)
        name = safe_filename(str(filename))
        try:
            public_path.mkdir(parents=True, exist_ok=True)
            (public_path / name).write_text(
                json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as exc:
            logger.exception("Failed to save public dataset %s", name)
            return JSONResponse({"error": str(exc)}, status_code=500)
        return {"ok": True, "path": f"/{name}"}

    return app


def main() -> None:
    """Main entry point used by `python3 server.py`."""
    logger.info("Starting channel analytics API server...")
    app = build_app()
    uvicorn.run(app, host=API_SERVER_BIND, port=API_SERVER_PORT)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
