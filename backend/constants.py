"""
CONSTANTS
---------
Single source of truth for behavioral constants of the scan pipeline.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Deployment-specific values (keys, model names) live in config.py instead.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Synthesized audio defaults (PCM16 mono @ 24kHz)
# =============================================================================
# Used whenever the speech provider does not report its own parameters.

TTS_SAMPLE_RATE_HZ: Final[int] = 24_000
TTS_CHANNELS: Final[int] = 1
TTS_SAMPLE_WIDTH_BYTES: Final[int] = 2  # PCM16 (signed 16-bit)

# Speechmatics RAW_PCM_16000 output
SPEECHMATICS_SAMPLE_RATE_HZ: Final[int] = 16_000
PROVIDER_CHUNK_SIZE: Final[int] = 4096

# =============================================================================
# WAV container (RIFF, canonical 44-byte header)
# =============================================================================

WAV_FORMAT_PCM: Final[int] = 1
WAV_FMT_CHUNK_SIZE: Final[int] = 16
WAV_HEADER_BYTES: Final[int] = 44

# =============================================================================
# Data URIs
# =============================================================================

WAV_MIME_TYPE: Final[str] = "audio/wav"
WAV_DATA_URI_PREFIX: Final[str] = f"data:{WAV_MIME_TYPE};base64,"
IMAGE_MIME_PREFIX: Final[str] = "image/"

# =============================================================================
# History
# =============================================================================

MAX_HISTORY_ITEMS: Final[int] = 10

# =============================================================================
# User-facing messages
# =============================================================================

DESCRIPTION_FAILED_MESSAGE: Final[str] = (
    "Could not get a description for the scene. Please try again."
)
AUDIO_FAILED_MESSAGE: Final[str] = "Could not generate audio description."
