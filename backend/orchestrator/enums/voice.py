"""
User-facing voice selector.

Rules:
- Exactly two values; provider voice ids are mapped by each speech adapter.
- Unknown values are rejected, never defaulted.
"""

from __future__ import annotations

from enum import Enum


class VoiceSelector(str, Enum):
    """Preferred voice for the spoken description."""

    MALE = "male"
    FEMALE = "female"
