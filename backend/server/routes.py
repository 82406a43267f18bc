"""
Route registration for the scan API.

Responsibilities:
- Define HTTP endpoints
- Translate request bodies into scan inputs
- Map scan/history errors to HTTP status codes
- Pull dependencies from app.state

Authentication is resolved upstream: the fronting auth layer forwards the
signed-in user's id in X-User-Id. A missing header means "not logged in".
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header, HTTPException, Query

from audio.wav import InvalidParameter
from constants import AUDIO_FAILED_MESSAGE, DESCRIPTION_FAILED_MESSAGE
from history.base import HistoryStore, PersistenceWriteFailed
from observability.logger import log_event
from orchestrator.errors import AudioGenerationFailed, DescriptionUnavailable
from orchestrator.models import GeoLocation, SceneDescriptionRequest, SceneImage
from orchestrator.scan import ScanOrchestrator
from protocol.data_uri import InvalidDataUri

from server.schemas import (
    DescribeIn,
    DescribeOut,
    ScanIn,
    ScanOut,
    SpeechIn,
    SpeechOut,
)


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""

    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    # ------------------------------------------------------------------
    # Scan
    # ------------------------------------------------------------------

    @app.post("/api/v1/scan")
    async def scan( # pyright: ignore[reportUnusedFunction]
        body: ScanIn,
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, Any]:
        orchestrator: ScanOrchestrator = app.state.orchestrator

        try:
            location = None
            if body.latitude is not None and body.longitude is not None:
                location = GeoLocation(latitude=body.latitude, longitude=body.longitude)
            request = SceneDescriptionRequest(
                image=SceneImage.from_data_uri(body.photo_data_uri),
                location=location,
                voice=body.voice,
            )
        except (InvalidDataUri, InvalidParameter) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        try:
            result = await orchestrator.scan(request, user_id=x_user_id or None)
        except DescriptionUnavailable as exc:
            raise HTTPException(status_code=502, detail=DESCRIPTION_FAILED_MESSAGE) from exc

        return ScanOut(
            scan_id=result.scan_id,
            scene_description=result.scene_description,
            tts_audio_data_uri=result.tts_audio_data_uri,
            location=result.location,
        ).model_dump(by_alias=True, exclude_none=True)

    @app.post("/api/v1/describe")
    async def describe(body: DescribeIn) -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        orchestrator: ScanOrchestrator = app.state.orchestrator

        try:
            image = SceneImage.from_data_uri(body.photo_data_uri)
        except InvalidDataUri as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        try:
            result = await orchestrator.describe(image)
        except DescriptionUnavailable as exc:
            log_event({
                "event_type": "DESCRIBE_FAILED",
                "reason": str(exc),
            })
            raise HTTPException(status_code=502, detail=DESCRIPTION_FAILED_MESSAGE) from exc

        return DescribeOut(
            scene_description=result.description_text,
        ).model_dump(by_alias=True)

    @app.post("/api/v1/speech")
    async def speech(body: SpeechIn) -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        orchestrator: ScanOrchestrator = app.state.orchestrator

        try:
            audio_uri = await orchestrator.speak(body.text, body.voice)
        except InvalidParameter as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except AudioGenerationFailed as exc:
            log_event({
                "event_type": "SPEECH_FAILED",
                "voice": body.voice,
                "reason": str(exc),
            })
            raise HTTPException(status_code=502, detail=AUDIO_FAILED_MESSAGE) from exc

        return SpeechOut(tts_audio_data_uri=audio_uri).model_dump(by_alias=True)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @app.get("/api/v1/history")
    async def list_history( # pyright: ignore[reportUnusedFunction]
        limit: int | None = Query(default=None, ge=1, le=100),
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, Any]:
        user_id = _require_user(x_user_id)
        store: HistoryStore = app.state.history
        effective_limit = limit or app.state.config.history_limit

        try:
            entries = await store.list_recent(user_id, effective_limit)
        except PersistenceWriteFailed as exc:
            raise HTTPException(status_code=503, detail="History is unavailable.") from exc

        return {"entries": [e.to_json() for e in entries]}

    @app.delete("/api/v1/history")
    async def clear_history( # pyright: ignore[reportUnusedFunction]
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, Any]:
        user_id = _require_user(x_user_id)
        store: HistoryStore = app.state.history

        try:
            await store.clear(user_id)
        except PersistenceWriteFailed as exc:
            raise HTTPException(status_code=503, detail="History is unavailable.") from exc

        log_event({"event_type": "HISTORY_CLEARED", "user_id": user_id})
        return {"status": "cleared"}

    @app.delete("/api/v1/history/{entry_id}")
    async def delete_history_entry( # pyright: ignore[reportUnusedFunction]
        entry_id: str,
        x_user_id: str | None = Header(default=None),
    ) -> dict[str, Any]:
        user_id = _require_user(x_user_id)
        store: HistoryStore = app.state.history

        try:
            deleted = await store.delete(user_id, entry_id)
        except PersistenceWriteFailed as exc:
            raise HTTPException(status_code=503, detail="History is unavailable.") from exc

        if not deleted:
            raise HTTPException(status_code=404, detail="History entry not found.")
        return {"status": "deleted", "id": entry_id}


def _require_user(x_user_id: str | None) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="You must be logged in to view scan history.")
    return x_user_id
