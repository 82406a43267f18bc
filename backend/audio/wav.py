"""
WAV container encoding for raw PCM (pure).

Purpose:
- Wrap a raw linear-PCM buffer returned by a speech provider in a canonical
  RIFF/WAVE header so any standard player can decode it.
- Parse the same canonical layout back (used for inspection and tests).

Layout (all integers little-endian):

    0   "RIFF"
    4   u32  riff size (36 + data length)
    8   "WAVE"
    12  "fmt "
    16  u32  fmt chunk size (16)
    20  u16  format tag (1 = linear PCM)
    22  u16  channel count
    24  u32  sample rate
    28  u32  byte rate   = sample_rate * channels * sample_width
    32  u16  block align = channels * sample_width
    34  u16  bits per sample
    36  "data"
    40  u32  data length
    44  PCM payload (unmodified)

Design:
- Pure functions only (no IO, no clocks).
- Invalid parameters fail fast instead of producing a corrupt header.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from constants import (
    TTS_CHANNELS,
    TTS_SAMPLE_RATE_HZ,
    TTS_SAMPLE_WIDTH_BYTES,
    WAV_FMT_CHUNK_SIZE,
    WAV_FORMAT_PCM,
    WAV_HEADER_BYTES,
)


# -------------------------
# Exceptions
# -------------------------

class InvalidParameter(ValueError):
    """
    Raised when audio parameters cannot describe a valid PCM stream.

    Zero channels, a non-positive sample rate, a zero sample width, values
    that overflow the header's u16/u32 fields, or a payload that does not
    split into whole sample frames.
    """


class InvalidWavData(ValueError):
    """Raised when a byte buffer is not a canonical PCM WAV file."""


# -------------------------
# Data
# -------------------------

@dataclass(frozen=True)
class RawAudio:
    """
    Raw PCM audio as produced by a speech provider.

    Transient: consumed by encode_wav() right after synthesis.
    """
    pcm_bytes: bytes
    channels: int = TTS_CHANNELS
    sample_rate_hz: int = TTS_SAMPLE_RATE_HZ
    sample_width_bytes: int = TTS_SAMPLE_WIDTH_BYTES

    @property
    def bits_per_sample(self) -> int:
        return self.sample_width_bytes * 8


_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")

# Header field limits
_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFF_FFFF


def _validate(channels: int, sample_rate_hz: int, sample_width_bytes: int) -> int:
    """Return block alignment, raising InvalidParameter on bad values."""
    if not 1 <= channels <= _U16_MAX:
        raise InvalidParameter(f"channels must be in 1..{_U16_MAX} (got {channels})")
    if not 0 < sample_rate_hz <= _U32_MAX:
        raise InvalidParameter(
            f"sample_rate_hz must be in 1..{_U32_MAX} (got {sample_rate_hz})"
        )
    if not 1 <= sample_width_bytes * 8 <= _U16_MAX:
        raise InvalidParameter(
            f"sample_width_bytes must be in 1..{_U16_MAX // 8} (got {sample_width_bytes})"
        )

    block_align = channels * sample_width_bytes
    if block_align > _U16_MAX:
        raise InvalidParameter(f"block align {block_align} does not fit the header")
    if sample_rate_hz * block_align > _U32_MAX:
        raise InvalidParameter(
            f"byte rate {sample_rate_hz * block_align} does not fit the header"
        )
    return block_align


# -------------------------
# Encode
# -------------------------

def encode_wav(
    pcm_bytes: bytes,
    *,
    channels: int = TTS_CHANNELS,
    sample_rate_hz: int = TTS_SAMPLE_RATE_HZ,
    sample_width_bytes: int = TTS_SAMPLE_WIDTH_BYTES,
) -> bytes:
    """
    Prefix raw PCM with a 44-byte WAV header.

    Args:
        pcm_bytes:
            Raw PCM payload. May be empty (header-only file).
        channels:
            Interleaved channel count.
        sample_rate_hz:
            Samples per second per channel.
        sample_width_bytes:
            Bytes per sample (2 for PCM16). bits_per_sample = width * 8.

    Returns:
        Header followed by pcm_bytes, unmodified.

    Raises:
        InvalidParameter if parameters are invalid or the payload is not a
        whole number of sample frames.
    """
    block_align = _validate(channels, sample_rate_hz, sample_width_bytes)

    data_len = len(pcm_bytes)
    if data_len % block_align != 0:
        raise InvalidParameter(
            f"PCM length {data_len} is not a multiple of block align {block_align}"
        )
    if WAV_HEADER_BYTES - 8 + data_len > _U32_MAX:
        raise InvalidParameter(f"PCM length {data_len} exceeds the WAV size limit")

    header = _HEADER.pack(
        b"RIFF",
        WAV_HEADER_BYTES - 8 + data_len,
        b"WAVE",
        b"fmt ",
        WAV_FMT_CHUNK_SIZE,
        WAV_FORMAT_PCM,
        channels,
        sample_rate_hz,
        sample_rate_hz * block_align,
        block_align,
        sample_width_bytes * 8,
        b"data",
        data_len,
    )
    return header + bytes(pcm_bytes)


def encode_raw_audio(audio: RawAudio) -> bytes:
    """encode_wav() for a RawAudio value."""
    return encode_wav(
        audio.pcm_bytes,
        channels=audio.channels,
        sample_rate_hz=audio.sample_rate_hz,
        sample_width_bytes=audio.sample_width_bytes,
    )


# -------------------------
# Decode
# -------------------------

@dataclass(frozen=True)
class WavHeader:
    """Fields of a canonical PCM WAV header."""
    channels: int
    sample_rate_hz: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_length: int


def read_wav_header(data: bytes) -> WavHeader:
    """
    Parse the canonical 44-byte header.

    Raises:
        InvalidWavData if the buffer is truncated or not linear PCM.
    """
    if len(data) < WAV_HEADER_BYTES:
        raise InvalidWavData(f"WAV buffer too short: {len(data)} bytes")

    (
        riff, _riff_size, wave, fmt, fmt_size, fmt_tag,
        channels, rate, byte_rate, block_align, bits,
        data_id, data_len,
    ) = _HEADER.unpack_from(data, 0)

    if riff != b"RIFF" or wave != b"WAVE":
        raise InvalidWavData("missing RIFF/WAVE magic")
    if fmt != b"fmt " or fmt_size != WAV_FMT_CHUNK_SIZE:
        raise InvalidWavData("unexpected fmt chunk")
    if fmt_tag != WAV_FORMAT_PCM:
        raise InvalidWavData(f"unsupported format tag {fmt_tag}")
    if data_id != b"data":
        raise InvalidWavData("missing data chunk")

    return WavHeader(
        channels=channels,
        sample_rate_hz=rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits,
        data_length=data_len,
    )


def decode_wav(data: bytes) -> RawAudio:
    """
    Inverse of encode_wav() for canonical files.

    Raises:
        InvalidWavData if the declared data length does not match the payload.
    """
    header = read_wav_header(data)
    payload = data[WAV_HEADER_BYTES:]
    if len(payload) != header.data_length:
        raise InvalidWavData(
            f"data length {header.data_length} != payload {len(payload)}"
        )

    return RawAudio(
        pcm_bytes=payload,
        channels=header.channels,
        sample_rate_hz=header.sample_rate_hz,
        sample_width_bytes=header.bits_per_sample // 8,
    )
