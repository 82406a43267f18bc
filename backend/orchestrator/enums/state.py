"""
Per-scan state enumeration.

Rules:
- This enum defines ONLY the lifecycle states of one scan request.
- Allowed transitions are defined by the orchestrator, not here.
"""

from __future__ import annotations

from enum import Enum


class ScanState(str, Enum):
    """
    Lifecycle of a single scan.

    IDLE -> DESCRIBING_SCENE -> SYNTHESIZING_SPEECH -> ENCODING -> COMPLETE

    FAILED is terminal and reachable from DESCRIBING_SCENE only: speech
    failures degrade to an empty audio result instead of failing the scan.
    """

    IDLE = "IDLE"
    DESCRIBING_SCENE = "DESCRIBING_SCENE"
    SYNTHESIZING_SPEECH = "SYNTHESIZING_SPEECH"
    ENCODING = "ENCODING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"
