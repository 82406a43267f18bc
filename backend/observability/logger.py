"""
JSONL event logger.

- One JSON object per line on stdout
- No buffering, no batching
- Every event carries ts_ms and event_type
- Logging never raises into the caller
"""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Mapping, Callable


# ------------------------------------------------------------------
# Explicit output sink (patchable in tests)
# ------------------------------------------------------------------

def _stdout_print(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()

_print: Callable[[str], None] = _stdout_print

# Toggled once at startup from AppConfig.enable_json_logs
_enabled: bool = True


def configure(*, enabled: bool) -> None:
    """Enable or silence event output for this process."""
    global _enabled  # pylint: disable=global-statement
    _enabled = enabled


def now_ms() -> int:
    """Wall-clock milliseconds, used for event timestamps."""
    return time.time_ns() // 1_000_000


def log_event(event: Mapping[str, Any]) -> None:
    """
    Write a single JSONL event.

    The caller supplies event_type plus any correlation ids (scan_id,
    user_id). ts_ms is filled in when missing.

    Values that json cannot encode (bytes, enums without str mixin) degrade
    to a LOGGER_SERIALIZATION_ERROR line instead of raising.
    """
    if not _enabled:
        return

    payload: dict[str, Any] = dict(event)
    payload.setdefault("ts_ms", now_ms())

    try:
        line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        fallback: dict[str, Any] = {
            "ts_ms": payload.get("ts_ms"),
            "event_type": "LOGGER_SERIALIZATION_ERROR",
            "error": str(e),
            "original_event_repr": repr(event),
        }
        line = json.dumps(fallback, ensure_ascii=False, separators=(",", ":"))

    _print(line)
