"""
Speechmatics TTS adapter.

Implements one-shot synthesis using the Speechmatics async TTS API.

Role in the system:
- Performs one TTS synthesis call per text.
- Reads the RAW_PCM_16000 body in provider-sized chunks.
- Returns the whole payload as RawAudio (PCM16 mono 16kHz).

Architectural constraints:
- No retries, timers, or backpressure logic live in this adapter.
- No WAV encoding; the orchestrator encodes using the reported parameters.
"""
from __future__ import annotations

from typing import ClassVar, Mapping

from speechmatics.tts import AsyncClient, OutputFormat, Voice # pyright: ignore[reportMissingTypeStubs] # pylint: disable=no-name-in-module, import-error

from adapters.tts.base import SpeechAdapter, trim_partial_sample
from audio.wav import RawAudio
from constants import (
    PROVIDER_CHUNK_SIZE,
    SPEECHMATICS_SAMPLE_RATE_HZ,
    TTS_CHANNELS,
    TTS_SAMPLE_WIDTH_BYTES,
)
from orchestrator.enums.voice import VoiceSelector


class SpeechmaticsSpeechAdapter(SpeechAdapter):
    """
    Speechmatics one-shot TTS adapter.

    A fresh AsyncClient is opened per call; nothing is shared between scans.
    """

    VOICES: ClassVar[Mapping[VoiceSelector, str]] = {
        VoiceSelector.FEMALE: "sarah",
        VoiceSelector.MALE: "theo",
    }

    _VOICE_ENUM: dict[str, Voice] = {
        "sarah": Voice.SARAH,
        "theo": Voice.THEO,
    }

    def __init__(self, *, api_key: str) -> None:
        self._api_key = api_key

    async def synthesize(self, text: str, *, voice: str) -> RawAudio:
        chunks: list[bytes] = []

        async with AsyncClient(api_key=self._api_key) as client:
            async with await client.generate(
                text=text,
                voice=self._resolve_voice(voice),
                output_format=OutputFormat.RAW_PCM_16000,
            ) as response:
                async for chunk in response.content.iter_chunked(PROVIDER_CHUNK_SIZE):
                    chunks.append(chunk)

        pcm = b"".join(chunks)

        return RawAudio(
            pcm_bytes=trim_partial_sample(pcm, TTS_CHANNELS * TTS_SAMPLE_WIDTH_BYTES),
            channels=TTS_CHANNELS,
            sample_rate_hz=SPEECHMATICS_SAMPLE_RATE_HZ,
            sample_width_bytes=TTS_SAMPLE_WIDTH_BYTES,
        )

    @classmethod
    def _resolve_voice(cls, voice: str) -> Voice:
        """
        Convert a provider voice id string to the Speechmatics Voice enum.

        Defaults to SARAH if unknown.
        """
        return cls._VOICE_ENUM.get(voice.lower(), Voice.SARAH)
