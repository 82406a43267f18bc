"""
Scan failure taxonomy.

- DescriptionUnavailable: the description step produced no usable text.
  Always fatal for the scan; the caller shows a retry affordance.
- AudioGenerationFailed: speech synthesis failed. Inside a scan this is
  downgraded to an empty ttsAudioDataUri and only logged; it is raised by
  the standalone speak operation.

Parameter errors (InvalidParameter) and persistence errors
(PersistenceWriteFailed) are defined next to the code that raises them.
"""

from __future__ import annotations


class ScanError(Exception):
    """Base class for scan pipeline failures."""


class DescriptionUnavailable(ScanError):
    """The description service returned no usable text (or failed)."""


class AudioGenerationFailed(ScanError):
    """The speech service failed or returned no audio."""
