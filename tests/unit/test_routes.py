# pylint: disable=missing-module-docstring,missing-function-docstring

import base64
from typing import Any

import pytest
from fastapi.testclient import TestClient

from config import AppConfig
from constants import AUDIO_FAILED_MESSAGE, DESCRIPTION_FAILED_MESSAGE, WAV_DATA_URI_PREFIX
from orchestrator.scan import ScanOrchestrator
from server.app import create_app


def make_config(**overrides: Any) -> AppConfig:
    values: dict[str, Any] = {
        "env": "test",
        "log_level": "INFO",
        "cors_allow_origins": ("*",),
        "openai_api_key": None,
        "description_model": "gpt-4o-mini",
        "enable_json_logs": True,
        "tts_provider": "openai",
        "openai_tts_model": "gpt-4o-mini-tts",
        "speechmatics_api_key": None,
        "history_backend": "memory",
        "history_db_path": "./data/history.sqlite",
        "history_limit": 10,
    }
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture
def wire(fake_description, fake_speech, memory_store, events):
    """Build an app around fakes; returns (client factory, orchestrator)."""

    def build(description=None, speech=None, history=None):
        orchestrator = ScanOrchestrator(
            description=description or fake_description(),
            speech=speech or fake_speech(),
            history=history or memory_store,
        )
        app = create_app(make_config(), orchestrator=orchestrator, history=history or memory_store)
        return TestClient(app), orchestrator

    return build


USER = {"X-User-Id": "user-123"}


def test_health(wire):
    client, _ = wire()
    with client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_scan_returns_description_and_audio(wire, jpeg_data_uri):
    client, _ = wire()
    with client:
        response = client.post("/api/v1/scan", json={"photoDataUri": jpeg_data_uri})

    assert response.status_code == 200
    body = response.json()
    assert body["scanId"].startswith("scan_")
    assert body["sceneDescription"] == "A quiet street at dusk."
    assert body["ttsAudioDataUri"].startswith(WAV_DATA_URI_PREFIX)
    wav = base64.b64decode(body["ttsAudioDataUri"][len(WAV_DATA_URI_PREFIX):])
    assert wav[:4] == b"RIFF"
    assert "location" not in body


def test_scan_with_coordinates_returns_location(wire, fake_description, jpeg_data_uri):
    description = fake_description(location="Poblacion, Makati City, Metro Manila")
    client, _ = wire(description=description)
    with client:
        response = client.post(
            "/api/v1/scan",
            json={"photoDataUri": jpeg_data_uri, "latitude": 14.56, "longitude": 121.02},
        )

    assert response.status_code == 200
    assert response.json()["location"] == "Poblacion, Makati City, Metro Manila"
    _, instructions = description.calls[0]
    assert "14.56" in instructions


def test_scan_with_failed_speech_still_succeeds(wire, fake_speech, jpeg_data_uri):
    client, _ = wire(speech=fake_speech(error=RuntimeError("tts down")))
    with client:
        response = client.post("/api/v1/scan", json={"photoDataUri": jpeg_data_uri})

    assert response.status_code == 200
    assert response.json()["ttsAudioDataUri"] == ""


def test_scan_description_failure_is_502(wire, fake_description, jpeg_data_uri):
    client, _ = wire(description=fake_description(error=RuntimeError("vision down")))
    with client:
        response = client.post("/api/v1/scan", json={"photoDataUri": jpeg_data_uri})

    assert response.status_code == 502
    assert response.json()["detail"] == DESCRIPTION_FAILED_MESSAGE


@pytest.mark.parametrize(
    "body",
    [
        {"photoDataUri": "not-a-data-uri"},
        {"photoDataUri": "data:audio/wav;base64,UklGRg=="},
        {"photoDataUri": "data:image/jpeg;base64,AAAA", "voice": "robot"},
        {"photoDataUri": "data:image/jpeg;base64,AAAA", "latitude": 14.5},
        {"photoDataUri": "data:image/jpeg;base64,AAAA", "latitude": 120.0, "longitude": 0.0},
        {},
    ],
)
def test_scan_rejects_invalid_input(wire, body):
    client, _ = wire()
    with client:
        response = client.post("/api/v1/scan", json=body)

    assert response.status_code == 422


def test_scan_by_signed_in_user_lands_in_history(wire, jpeg_data_uri):
    client, orchestrator = wire()
    with client:
        scan = client.post("/api/v1/scan", json={"photoDataUri": jpeg_data_uri}, headers=USER)
        client.portal.call(orchestrator.drain)
        history = client.get("/api/v1/history", headers=USER)
        other = client.get("/api/v1/history", headers={"X-User-Id": "someone-else"})

    assert scan.status_code == 200
    (entry,) = history.json()["entries"]
    assert entry["description"] == "A quiet street at dusk."
    assert entry["imageUrl"] == jpeg_data_uri
    assert entry["id"].startswith("hist_")
    assert other.json() == {"entries": []}


def test_anonymous_scan_is_not_recorded(wire, memory_store, jpeg_data_uri):
    client, orchestrator = wire()
    with client:
        client.post("/api/v1/scan", json={"photoDataUri": jpeg_data_uri})
        client.portal.call(orchestrator.drain)
        history = client.get("/api/v1/history", headers=USER)

    assert history.json() == {"entries": []}
    assert orchestrator.pending_writes == 0


def test_history_requires_user(wire):
    client, _ = wire()
    with client:
        listing = client.get("/api/v1/history")
        clearing = client.delete("/api/v1/history")
        deleting = client.delete("/api/v1/history/hist_1")

    assert listing.status_code == 401
    assert clearing.status_code == 401
    assert deleting.status_code == 401


def test_history_clear_and_delete(wire, jpeg_data_uri):
    client, orchestrator = wire()
    with client:
        for _ in range(3):
            client.post("/api/v1/scan", json={"photoDataUri": jpeg_data_uri}, headers=USER)
        client.portal.call(orchestrator.drain)

        entries = client.get("/api/v1/history", params={"limit": 2}, headers=USER).json()["entries"]
        assert len(entries) == 2

        deleted = client.delete(f"/api/v1/history/{entries[0]['id']}", headers=USER)
        missing = client.delete(f"/api/v1/history/{entries[0]['id']}", headers=USER)
        assert deleted.json() == {"status": "deleted", "id": entries[0]["id"]}
        assert missing.status_code == 404

        cleared = client.delete("/api/v1/history", headers=USER)
        after = client.get("/api/v1/history", headers=USER)

    assert cleared.json() == {"status": "cleared"}
    assert after.json() == {"entries": []}


def test_history_backend_failure_is_503(wire, failing_store):
    client, _ = wire(history=failing_store)
    with client:
        response = client.get("/api/v1/history", headers=USER)

    assert response.status_code == 503


def test_describe_endpoint(wire, jpeg_data_uri):
    client, _ = wire()
    with client:
        response = client.post("/api/v1/describe", json={"photoDataUri": jpeg_data_uri})

    assert response.status_code == 200
    assert response.json() == {"sceneDescription": "A quiet street at dusk."}


def test_speech_endpoint(wire, fake_speech):
    speech = fake_speech()
    client, _ = wire(speech=speech)
    with client:
        response = client.post("/api/v1/speech", json={"text": " Hello there. ", "voice": "male"})

    assert response.status_code == 200
    assert response.json()["ttsAudioDataUri"].startswith(WAV_DATA_URI_PREFIX)
    assert speech.calls == [("Hello there.", "fake-male")]


def test_speech_failure_is_502(wire, fake_speech):
    client, _ = wire(speech=fake_speech(error=RuntimeError("tts down")))
    with client:
        response = client.post("/api/v1/speech", json={"text": "Hello."})

    assert response.status_code == 502
    assert response.json()["detail"] == AUDIO_FAILED_MESSAGE


def test_speech_blank_text_is_422(wire):
    client, _ = wire()
    with client:
        response = client.post("/api/v1/speech", json={"text": "   "})

    assert response.status_code == 422
