"""
OpenAI TTS adapter.

Uses audio.speech.create with response_format="pcm", which returns raw
PCM16 little-endian mono at 24kHz with no container.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping

from adapters.tts.base import SpeechAdapter, trim_partial_sample
from audio.wav import RawAudio
from constants import TTS_CHANNELS, TTS_SAMPLE_RATE_HZ, TTS_SAMPLE_WIDTH_BYTES
from orchestrator.enums.voice import VoiceSelector


class OpenAISpeechAdapter(SpeechAdapter):
    """OpenAI text-to-speech, raw PCM output."""

    VOICES: ClassVar[Mapping[VoiceSelector, str]] = {
        VoiceSelector.FEMALE: "nova",
        VoiceSelector.MALE: "onyx",
    }

    def __init__(
        self,
        *,
        client: Any,  # Type: openai.AsyncOpenAI
        model: str,
    ) -> None:
        self._client = client
        self._model = model

    async def synthesize(self, text: str, *, voice: str) -> RawAudio:
        response = await self._client.audio.speech.create(
            model=self._model,
            voice=voice,
            input=text,
            response_format="pcm",
        )
        pcm = response.content

        return RawAudio(
            pcm_bytes=trim_partial_sample(pcm, TTS_CHANNELS * TTS_SAMPLE_WIDTH_BYTES),
            channels=TTS_CHANNELS,
            sample_rate_hz=TTS_SAMPLE_RATE_HZ,
            sample_width_bytes=TTS_SAMPLE_WIDTH_BYTES,
        )
