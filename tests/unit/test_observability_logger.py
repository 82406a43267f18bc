# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from typing import Any

import pytest

from observability import logger
from observability.metrics import timed


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    lines: list[str] = []
    monkeypatch.setattr(logger, "_print", lines.append)
    monkeypatch.setattr(logger, "_enabled", True)
    return lines


def test_log_event_emits_valid_jsonl(captured: list[str]) -> None:
    """
    - log_event emits exactly one JSONL line
    - caller fields are preserved as-is
    - ts_ms is filled in when missing
    """
    payload: dict[str, Any] = {
        "event_type": "TEST",
        "value": 123,
    }

    logger.log_event(payload)

    assert len(captured) == 1
    decoded = json.loads(captured[0])
    assert decoded["event_type"] == "TEST"
    assert decoded["value"] == 123
    assert isinstance(decoded["ts_ms"], int)
    # Caller's mapping is not mutated
    assert "ts_ms" not in payload


def test_log_event_keeps_caller_timestamp(captured: list[str]) -> None:
    logger.log_event({"event_type": "TEST", "ts_ms": 42})

    assert json.loads(captured[0])["ts_ms"] == 42


def test_log_event_never_raises_on_unserializable_values(captured: list[str]) -> None:
    logger.log_event({"event_type": "TEST", "pcm": b"\x00\x01"})

    decoded = json.loads(captured[0])
    assert decoded["event_type"] == "LOGGER_SERIALIZATION_ERROR"
    assert "pcm" in decoded["original_event_repr"]


def test_disabled_logger_emits_nothing(captured: list[str]) -> None:
    logger.configure(enabled=False)
    try:
        logger.log_event({"event_type": "TEST"})
    finally:
        logger.configure(enabled=True)

    assert captured == []


def test_timed_emits_one_metric_with_details(captured: list[str]) -> None:
    with timed("speech_synthesis", scan_id="scan_1", details={"voice": "nova"}) as extra:
        extra["pcm_bytes"] = 2000

    (line,) = captured
    decoded = json.loads(line)
    assert decoded["event_type"] == "METRIC_TIMER"
    assert decoded["metric"] == "speech_synthesis"
    assert decoded["scan_id"] == "scan_1"
    assert decoded["outcome"] == "ok"
    assert decoded["details"] == {"voice": "nova", "pcm_bytes": 2000}
    assert decoded["value_ms"] >= 0


def test_timed_emits_metric_when_block_raises(captured: list[str]) -> None:
    with pytest.raises(RuntimeError):
        with timed("scene_description"):
            raise RuntimeError("boom")

    (line,) = captured
    assert json.loads(line)["outcome"] == "error"
