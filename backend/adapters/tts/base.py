"""
Speech adapter contract (v1).

This module defines the *interface only*: no WAV encoding, no fallback
policy, no retries or timers.

Key invariants:
- The adapter returns complete raw PCM for the whole text (no streaming,
  no partial state).
- The adapter reports the PCM parameters it produced; the orchestrator
  encodes with exactly those.
- Voice mapping is a static two-entry table per provider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Mapping

from audio.wav import RawAudio
from orchestrator.enums.voice import VoiceSelector


class SpeechAdapter(ABC):
    """
    Abstract interface for one-shot text-to-speech.

    Implementations are responsible for:
    - Calling the TTS provider with text + provider voice id
    - Returning PCM16 audio as RawAudio with accurate parameters
    - Trimming a dangling partial sample from the provider payload

    Non-responsibilities:
    - No WAV/data URI encoding
    - No decision on whether a failure is fatal
    """

    # Provider voice ids for the two supported selectors.
    VOICES: ClassVar[Mapping[VoiceSelector, str]]

    @classmethod
    def voice_for(cls, selector: VoiceSelector) -> str:
        """Provider voice id for a selector. Always the same value per selector."""
        return cls.VOICES[VoiceSelector(selector)]

    @abstractmethod
    async def synthesize(self, text: str, *, voice: str) -> RawAudio:
        """
        Synthesize text into raw PCM.

        Args:
            text: Non-empty text to speak.
            voice: Provider voice id (from VOICES).

        Contract:
        - Returns RawAudio whose pcm_bytes is a whole number of samples.
        - May raise on transport/provider errors.
        - Must NOT retry internally.
        """
        raise NotImplementedError


def trim_partial_sample(pcm: bytes, block_align: int) -> bytes:
    """Drop trailing bytes that do not form a whole sample frame."""
    extra = len(pcm) % block_align
    return pcm[: len(pcm) - extra] if extra else pcm
