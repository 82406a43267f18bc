# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring

import base64
import json
from typing import Any, Callable, ClassVar, Mapping

import pytest

from adapters.description.base import DescriptionAdapter
from adapters.tts.base import SpeechAdapter
from audio.wav import RawAudio
from history.base import HistoryEntry, HistoryStore, PersistenceWriteFailed
from history.memory import InMemoryHistoryStore
from observability import logger
from orchestrator.enums.voice import VoiceSelector
from orchestrator.models import SceneDescriptionResult, SceneImage


FAKE_JPEG = b"\xff\xd8\xff\xe0" + b"fake-jpeg-body" + b"\xff\xd9"
FAKE_JPEG_URI = "data:image/jpeg;base64," + base64.b64encode(FAKE_JPEG).decode("ascii")


# ---------------------------------------------------------------------
# Deterministic collaborators
# ---------------------------------------------------------------------

class FakeDescription(DescriptionAdapter):
    def __init__(
        self,
        text: str = "A quiet street at dusk.",
        location: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.text = text
        self.location = location
        self.error = error
        self.calls: list[tuple[SceneImage, str | None]] = []

    async def describe(
        self,
        image: SceneImage,
        *,
        instructions: str | None = None,
    ) -> SceneDescriptionResult:
        self.calls.append((image, instructions))
        if self.error is not None:
            raise self.error
        return SceneDescriptionResult(description_text=self.text, location_label=self.location)


class FakeSpeech(SpeechAdapter):
    VOICES: ClassVar[Mapping[VoiceSelector, str]] = {
        VoiceSelector.FEMALE: "fake-female",
        VoiceSelector.MALE: "fake-male",
    }

    def __init__(
        self,
        pcm: bytes = b"\x01\x02" * 1000,
        sample_rate_hz: int = 24_000,
        error: Exception | None = None,
    ) -> None:
        self.pcm = pcm
        self.sample_rate_hz = sample_rate_hz
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def synthesize(self, text: str, *, voice: str) -> RawAudio:
        self.calls.append((text, voice))
        if self.error is not None:
            raise self.error
        return RawAudio(pcm_bytes=self.pcm, sample_rate_hz=self.sample_rate_hz)


class FailingHistoryStore(HistoryStore):
    async def append(self, user_id: str, entry: HistoryEntry) -> str:
        raise PersistenceWriteFailed("database offline")

    async def list_recent(self, user_id: str, limit: int) -> list[HistoryEntry]:
        raise PersistenceWriteFailed("database offline")

    async def delete(self, user_id: str, entry_id: str) -> bool:
        raise PersistenceWriteFailed("database offline")

    async def clear(self, user_id: str) -> None:
        raise PersistenceWriteFailed("database offline")


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def events(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    """Every JSONL event emitted during the test, decoded."""
    captured: list[dict[str, Any]] = []

    def fake_print(line: str) -> None:
        captured.append(json.loads(line))

    monkeypatch.setattr(logger, "_print", fake_print)
    monkeypatch.setattr(logger, "_enabled", True)
    return captured


@pytest.fixture
def fake_description() -> Callable[..., FakeDescription]:
    return FakeDescription


@pytest.fixture
def fake_speech() -> Callable[..., FakeSpeech]:
    return FakeSpeech


@pytest.fixture
def memory_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def failing_store() -> FailingHistoryStore:
    return FailingHistoryStore()


@pytest.fixture
def scene_image() -> SceneImage:
    return SceneImage(data=FAKE_JPEG, mime_type="image/jpeg")


@pytest.fixture
def jpeg_data_uri() -> str:
    return FAKE_JPEG_URI
