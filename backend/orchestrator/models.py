"""
Scan request/result data (v1).

Rules:
- Values are immutable and constructed fresh per scan.
- No behavior beyond validation and format conversion.
"""

from __future__ import annotations

from dataclasses import dataclass

from audio.wav import InvalidParameter
from constants import IMAGE_MIME_PREFIX
from orchestrator.enums.voice import VoiceSelector
from protocol.data_uri import InvalidDataUri, build_data_uri, parse_data_uri


@dataclass(frozen=True)
class SceneImage:
    """Encoded still frame captured from the camera."""
    data: bytes
    mime_type: str = "image/jpeg"

    @classmethod
    def from_data_uri(cls, uri: str) -> SceneImage:
        """
        Build from a browser capture (data:image/...;base64,...).

        Raises:
            InvalidDataUri if the URI is malformed, not an image, or empty.
        """
        mime_type, payload = parse_data_uri(uri)
        if not mime_type.startswith(IMAGE_MIME_PREFIX):
            raise InvalidDataUri(f"expected an image MIME type, got {mime_type!r}")
        if not payload:
            raise InvalidDataUri("image payload is empty")
        return cls(data=payload, mime_type=mime_type)

    def to_data_uri(self) -> str:
        return build_data_uri(self.mime_type, self.data)


@dataclass(frozen=True)
class GeoLocation:
    """Caller position in floating-point degrees."""
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidParameter(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidParameter(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class SceneDescriptionRequest:
    """Input to one scan."""
    image: SceneImage
    location: GeoLocation | None = None
    voice: VoiceSelector = VoiceSelector.FEMALE

    def __post_init__(self) -> None:
        # Accept plain strings from callers, reject anything outside the enum.
        try:
            voice = VoiceSelector(self.voice)
        except ValueError as exc:
            raise InvalidParameter(f"unsupported voice: {self.voice!r}") from exc
        object.__setattr__(self, "voice", voice)


@dataclass(frozen=True)
class SceneDescriptionResult:
    """What the description service returned."""
    description_text: str
    location_label: str | None = None


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of a successful scan.

    tts_audio_data_uri is "" when speech synthesis failed.
    """
    scan_id: str
    scene_description: str
    tts_audio_data_uri: str
    location: str | None = None
