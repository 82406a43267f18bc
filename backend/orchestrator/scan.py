"""
Scan orchestrator.

Sequences one scene description call and one speech synthesis call into a
single scan:

    IDLE -> DESCRIBING_SCENE -> SYNTHESIZING_SPEECH -> ENCODING -> COMPLETE
                 |
                 +-> FAILED

Failure policy:
- Description failures (exception or empty text) fail the scan with
  DescriptionUnavailable. No speech call is made.
- Speech failures (exception, empty audio, or PCM the encoder rejects) are
  logged and the scan completes with tts_audio_data_uri == "".
- History writes are scheduled after completion and never awaited by the
  scan; their failures are logged only.

No retries. No cancellation of in-flight provider calls. No shared mutable
state between scans apart from the set of pending history writes.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable
from uuid import uuid4

from adapters.description.base import DescriptionAdapter
from adapters.description.prompts import location_instruction
from adapters.tts.base import SpeechAdapter
from audio.wav import InvalidParameter, RawAudio, encode_raw_audio
from history.base import HistoryEntry, HistoryStore
from observability.logger import log_event
from observability.metrics import timed
from orchestrator.enums.state import ScanState
from orchestrator.enums.voice import VoiceSelector
from orchestrator.errors import AudioGenerationFailed, DescriptionUnavailable
from orchestrator.models import (
    SceneDescriptionRequest,
    SceneDescriptionResult,
    SceneImage,
    ScanResult,
)
from protocol.data_uri import wav_data_uri


# ------------------------------------------------------------------
# State machine
# ------------------------------------------------------------------

_ALLOWED_TRANSITIONS: dict[ScanState, frozenset[ScanState]] = {
    ScanState.IDLE: frozenset({ScanState.DESCRIBING_SCENE}),
    ScanState.DESCRIBING_SCENE: frozenset({ScanState.SYNTHESIZING_SPEECH, ScanState.FAILED}),
    # Straight to COMPLETE when synthesis fails (empty audio)
    ScanState.SYNTHESIZING_SPEECH: frozenset({ScanState.ENCODING, ScanState.COMPLETE}),
    ScanState.ENCODING: frozenset({ScanState.COMPLETE}),
    ScanState.COMPLETE: frozenset(),
    ScanState.FAILED: frozenset(),
}


class IllegalScanTransition(RuntimeError):
    """Raised on a transition not present in the allowed table (a bug)."""


class ScanRun:
    """Lifecycle tracker for a single scan. Not shared between scans."""

    def __init__(self, scan_id: str) -> None:
        self.scan_id = scan_id
        self.state = ScanState.IDLE
        self.history: list[ScanState] = [ScanState.IDLE]

    def advance(self, new_state: ScanState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self.state]:
            raise IllegalScanTransition(f"{self.state.value} -> {new_state.value}")

        log_event({
            "event_type": "SCAN_STATE",
            "scan_id": self.scan_id,
            "from": self.state.value,
            "to": new_state.value,
        })
        self.state = new_state
        self.history.append(new_state)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _new_scan_id() -> str:
    return f"scan_{uuid4().hex[:12]}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ------------------------------------------------------------------
# ScanOrchestrator
# ------------------------------------------------------------------

class ScanOrchestrator:
    """
    One orchestrator per process; one ScanRun per scan() call.

    Collaborators are injected so tests can use deterministic stand-ins.
    """

    def __init__(
        self,
        *,
        description: DescriptionAdapter,
        speech: SpeechAdapter,
        history: HistoryStore | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._description = description
        self._speech = speech
        self._history = history
        self._clock = clock

        # Fire-and-forget history writes, kept referenced until done
        self._pending_writes: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def scan(
        self,
        request: SceneDescriptionRequest,
        *,
        user_id: str | None = None,
    ) -> ScanResult:
        """
        Run one scan.

        Args:
            request: Image, optional location, voice selector.
            user_id: Authenticated user, or None. History is only written
                for a non-null user_id and a configured store.

        Raises:
            DescriptionUnavailable if no description could be produced.
        """
        run = ScanRun(_new_scan_id())
        run.advance(ScanState.DESCRIBING_SCENE)

        instructions = None
        if request.location is not None:
            instructions = location_instruction(
                request.location.latitude, request.location.longitude
            )

        try:
            described = await self._describe(
                request.image, instructions=instructions, scan_id=run.scan_id
            )
        except DescriptionUnavailable as exc:
            run.advance(ScanState.FAILED)
            log_event({
                "event_type": "SCAN_FAILED",
                "scan_id": run.scan_id,
                "reason": str(exc),
            })
            raise

        run.advance(ScanState.SYNTHESIZING_SPEECH)
        voice_id = self._speech.voice_for(request.voice)

        audio_uri = ""
        try:
            raw = await self._synthesize(
                described.description_text, voice_id=voice_id, scan_id=run.scan_id
            )
            run.advance(ScanState.ENCODING)
            audio_uri = self._encode(raw)
        except AudioGenerationFailed as exc:
            log_event({
                "event_type": "AUDIO_GENERATION_FAILED",
                "scan_id": run.scan_id,
                "voice": voice_id,
                "reason": str(exc),
            })

        run.advance(ScanState.COMPLETE)
        log_event({
            "event_type": "SCAN_COMPLETE",
            "scan_id": run.scan_id,
            "has_audio": bool(audio_uri),
            "has_location": described.location_label is not None,
        })

        result = ScanResult(
            scan_id=run.scan_id,
            scene_description=described.description_text,
            tts_audio_data_uri=audio_uri,
            location=described.location_label,
        )

        if user_id:
            self._schedule_history_append(user_id, request.image, result)

        return result

    async def describe(self, image: SceneImage) -> SceneDescriptionResult:
        """
        Description only: no location, no speech, no history.

        Raises:
            DescriptionUnavailable
        """
        return await self._describe(image, instructions=None, scan_id=None)

    async def speak(self, text: str, voice: VoiceSelector | str = VoiceSelector.FEMALE) -> str:
        """
        Synthesize text into a WAV data URI.

        Unlike scan(), speech failures are the caller's to handle.

        Raises:
            InvalidParameter for empty text or an unknown voice.
            AudioGenerationFailed if synthesis or encoding fails.
        """
        text = text.strip()
        if not text:
            raise InvalidParameter("text must not be empty")
        try:
            selector = VoiceSelector(voice)
        except ValueError as exc:
            raise InvalidParameter(f"unsupported voice: {voice!r}") from exc

        voice_id = self._speech.voice_for(selector)
        raw = await self._synthesize(text, voice_id=voice_id, scan_id=None)
        return self._encode(raw)

    async def drain(self) -> None:
        """Wait for pending history writes (shutdown, tests)."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _describe(
        self,
        image: SceneImage,
        *,
        instructions: str | None,
        scan_id: str | None,
    ) -> SceneDescriptionResult:
        try:
            with timed("scene_description", scan_id=scan_id) as extra:
                result = await self._description.describe(image, instructions=instructions)
                extra["chars"] = len(result.description_text)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise DescriptionUnavailable(
                f"description service failed: {type(exc).__name__}: {exc}"
            ) from exc

        text = result.description_text.strip()
        if not text:
            raise DescriptionUnavailable("description service returned no text")

        return SceneDescriptionResult(
            description_text=text,
            location_label=result.location_label or None,
        )

    async def _synthesize(
        self,
        text: str,
        *,
        voice_id: str,
        scan_id: str | None,
    ) -> RawAudio:
        try:
            with timed("speech_synthesis", scan_id=scan_id, details={"voice": voice_id}) as extra:
                raw = await self._speech.synthesize(text, voice=voice_id)
                extra["pcm_bytes"] = len(raw.pcm_bytes)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise AudioGenerationFailed(
                f"speech service failed: {type(exc).__name__}: {exc}"
            ) from exc

        if not raw.pcm_bytes:
            raise AudioGenerationFailed("speech service returned no audio")
        return raw

    @staticmethod
    def _encode(raw: RawAudio) -> str:
        try:
            return wav_data_uri(encode_raw_audio(raw))
        except InvalidParameter as exc:
            raise AudioGenerationFailed(f"cannot encode speech audio: {exc}") from exc

    # ------------------------------------------------------------------
    # History (fire-and-forget)
    # ------------------------------------------------------------------

    def _schedule_history_append(
        self,
        user_id: str,
        image: SceneImage,
        result: ScanResult,
    ) -> None:
        if self._history is None:
            return

        task = asyncio.create_task(self._append_history(user_id, image, result))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _append_history(
        self,
        user_id: str,
        image: SceneImage,
        result: ScanResult,
    ) -> None:
        """
        Never raises: persistence failures must not reach the scan caller.

        The entry is built here, inside the guarded block, so a failing clock
        or image re-encode is logged like any other write failure.
        """
        assert self._history is not None
        try:
            entry = HistoryEntry(
                image_url=image.to_data_uri(),
                description=result.scene_description,
                timestamp=self._clock().isoformat(),
                location=result.location,
            )
            entry_id = await self._history.append(user_id, entry)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "event_type": "HISTORY_APPEND_FAILED",
                "scan_id": result.scan_id,
                "user_id": user_id,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            return

        log_event({
            "event_type": "HISTORY_APPENDED",
            "scan_id": result.scan_id,
            "user_id": user_id,
            "entry_id": entry_id,
        })
