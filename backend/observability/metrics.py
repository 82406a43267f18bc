"""
Timing helpers for provider calls.

Responsibilities:
- Measure durations using monotonic time
- Emit one METRIC_TIMER event per measurement via observability.logger
- Never aggregate

Durations use monotonic time; event timestamps (ts_ms) use wall-clock time.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from observability.logger import log_event


@contextmanager
def timed(
    name: str,
    *,
    scan_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Measure the enclosed block and emit a METRIC_TIMER event.

    The yielded dict is merged into the event's details, so callers can
    attach facts learned inside the block (byte counts, outcome).

    Guarantees:
    - Metric is emitted exactly once, also when the block raises
    - Exceptions are never suppressed

    Usage:
        with timed("speech_synthesis", scan_id=scan_id) as extra:
            audio = await adapter.synthesize(text, voice=voice)
            extra["pcm_bytes"] = len(audio.pcm_bytes)
    """
    extra: dict[str, Any] = dict(details or {})
    start_ns = time.monotonic_ns()
    outcome = "ok"
    try:
        yield extra
    except BaseException:
        outcome = "error"
        raise
    finally:
        log_event({
            "event_type": "METRIC_TIMER",
            "metric": name,
            "value_ms": (time.monotonic_ns() - start_ns) // 1_000_000,
            "scan_id": scan_id,
            "outcome": outcome,
            "details": extra,
        })
