# pylint: disable=missing-module-docstring,missing-function-docstring,missing-class-docstring

import json
from types import SimpleNamespace
from typing import Any

import pytest

from adapters.description.openai_vision import OpenAIVisionDescriptionAdapter
from adapters.description.prompts import location_instruction
from adapters.tts.base import trim_partial_sample
from adapters.tts.openai_speech import OpenAISpeechAdapter
from adapters.tts.speechmatics import SpeechmaticsSpeechAdapter
from orchestrator.enums.voice import VoiceSelector


# ---------------------------------------------------------------------
# Vendor client doubles (OpenAI response shapes)
# ---------------------------------------------------------------------

class FakeCompletions:
    def __init__(self, content: str | None) -> None:
        self._content = content
        self.kwargs: dict[str, Any] = {}

    async def create(self, **kwargs: Any) -> Any:
        self.kwargs = kwargs
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeSpeechEndpoint:
    def __init__(self, pcm: bytes) -> None:
        self._pcm = pcm
        self.kwargs: dict[str, Any] = {}

    async def create(self, **kwargs: Any) -> Any:
        self.kwargs = kwargs
        return SimpleNamespace(content=self._pcm)


def make_openai_client(*, content: str | None = None, pcm: bytes = b"") -> Any:
    return SimpleNamespace(
        chat=SimpleNamespace(completions=FakeCompletions(content)),
        audio=SimpleNamespace(speech=FakeSpeechEndpoint(pcm)),
    )


# ---------------------------------------------------------------------
# Description adapter
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_vision_adapter_parses_json_reply(scene_image, jpeg_data_uri):
    client = make_openai_client(content=json.dumps({
        "sceneDescription": " A jeepney parked by a sari-sari store. ",
        "location": "Kamuning, Quezon City, Metro Manila",
    }))
    adapter = OpenAIVisionDescriptionAdapter(client=client, model="gpt-4o-mini")

    result = await adapter.describe(scene_image, instructions=location_instruction(14.63, 121.03))

    assert result.description_text == "A jeepney parked by a sari-sari store."
    assert result.location_label == "Kamuning, Quezon City, Metro Manila"

    kwargs = client.chat.completions.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["response_format"] == {"type": "json_object"}
    user_content = kwargs["messages"][1]["content"]
    assert "latitude: 14.63" in user_content[0]["text"]
    assert user_content[1] == {"type": "image_url", "image_url": {"url": jpeg_data_uri}}


@pytest.mark.asyncio
async def test_vision_adapter_null_location(scene_image):
    client = make_openai_client(content='{"sceneDescription": "A hallway.", "location": null}')
    adapter = OpenAIVisionDescriptionAdapter(client=client, model="m")

    result = await adapter.describe(scene_image)

    assert result.description_text == "A hallway."
    assert result.location_label is None
    assert "latitude" not in client.chat.completions.kwargs["messages"][1]["content"][0]["text"]


@pytest.mark.asyncio
async def test_vision_adapter_falls_back_to_plain_text(scene_image):
    client = make_openai_client(content="A staircase going down.")
    adapter = OpenAIVisionDescriptionAdapter(client=client, model="m")

    result = await adapter.describe(scene_image)

    assert result.description_text == "A staircase going down."


@pytest.mark.parametrize("content", [None, "", '{"location": "x"}', "[1, 2]"])
@pytest.mark.asyncio
async def test_vision_adapter_returns_empty_text_for_unusable_reply(scene_image, content):
    adapter = OpenAIVisionDescriptionAdapter(client=make_openai_client(content=content), model="m")

    result = await adapter.describe(scene_image)

    assert result.description_text == ""


# ---------------------------------------------------------------------
# Speech adapters
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_openai_speech_requests_raw_pcm():
    client = make_openai_client(pcm=b"\x01\x00" * 100 + b"\x07")
    adapter = OpenAISpeechAdapter(client=client, model="gpt-4o-mini-tts")

    audio = await adapter.synthesize("Hello.", voice="nova")

    assert client.audio.speech.kwargs == {
        "model": "gpt-4o-mini-tts",
        "voice": "nova",
        "input": "Hello.",
        "response_format": "pcm",
    }
    # dangling odd byte trimmed
    assert audio.pcm_bytes == b"\x01\x00" * 100
    assert (audio.channels, audio.sample_rate_hz, audio.bits_per_sample) == (1, 24_000, 16)


@pytest.mark.parametrize(
    "adapter_cls, female, male",
    [
        (OpenAISpeechAdapter, "nova", "onyx"),
        (SpeechmaticsSpeechAdapter, "sarah", "theo"),
    ],
)
def test_voice_tables_are_fixed(adapter_cls, female, male):
    assert adapter_cls.voice_for(VoiceSelector.FEMALE) == female
    assert adapter_cls.voice_for("female") == female
    assert adapter_cls.voice_for(VoiceSelector.MALE) == male
    assert set(adapter_cls.VOICES) == {VoiceSelector.MALE, VoiceSelector.FEMALE}


def test_voice_for_rejects_unknown_selector():
    with pytest.raises(ValueError):
        OpenAISpeechAdapter.voice_for("robot")


def test_trim_partial_sample():
    assert trim_partial_sample(b"\x00" * 5, 2) == b"\x00" * 4
    assert trim_partial_sample(b"\x00" * 4, 2) == b"\x00" * 4
    assert trim_partial_sample(b"", 2) == b""
