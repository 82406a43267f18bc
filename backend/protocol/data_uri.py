"""
Data URI helpers for binary payloads crossing the HTTP boundary.

Format:
    data:<mime>;base64,<payload>

Inbound:  captured photos (canvas.toDataURL("image/jpeg")).
Outbound: encoded WAV audio for the browser <audio> element.

Usage example:

    mime_type, jpeg = parse_data_uri(body.photo_data_uri)
    uri = wav_data_uri(encode_wav(pcm))
"""

from __future__ import annotations

import base64
import binascii

from constants import WAV_DATA_URI_PREFIX


# -------------------------
# Exceptions
# -------------------------

class InvalidDataUri(ValueError):
    """
    Raised when a string is not a base64 data URI.

    Covers a missing "data:" scheme, a missing ";base64" marker, an empty
    MIME type, and undecodable payloads.
    """


# -------------------------
# Parse / build
# -------------------------

def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """
    Split a base64 data URI into (mime_type, payload_bytes).
    """
    if not uri.startswith("data:"):
        raise InvalidDataUri("missing 'data:' scheme")

    header, sep, encoded = uri[5:].partition(",")
    if not sep:
        raise InvalidDataUri("missing ',' separator")

    # header is "<mime>[;param...];base64"
    params = header.split(";")
    if params[-1].strip().lower() != "base64":
        raise InvalidDataUri("only base64 data URIs are supported")

    mime_type = params[0].strip().lower()
    if not mime_type:
        raise InvalidDataUri("missing MIME type")

    try:
        payload = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidDataUri(f"invalid base64 payload: {exc}") from exc

    return mime_type, payload


def build_data_uri(mime_type: str, payload: bytes) -> str:
    """Encode payload as data:<mime_type>;base64,<...>."""
    return f"data:{mime_type};base64," + base64.b64encode(payload).decode("ascii")


def wav_data_uri(wav_bytes: bytes) -> str:
    """
    data:audio/wav;base64,<wav_bytes>.

    This is the only wire format the browser player accepts.
    """
    return WAV_DATA_URI_PREFIX + base64.b64encode(wav_bytes).decode("ascii")
