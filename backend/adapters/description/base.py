"""
Description adapter contract (v1).

Purpose:
- Define the interface for one-shot scene description by a hosted
  vision-language model.
- Keep retries, fallbacks, and scan lifecycle decisions OUT of the adapter.

Rules:
- This file contains NO logic.
- No retries.
- No knowledge of speech, history, or HTTP.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orchestrator.models import SceneDescriptionResult, SceneImage


class DescriptionAdapter(ABC):
    """
    Abstract base class for scene description providers.

    The adapter is a *dumb pipe*:
    image + instructions -> vendor -> description text (+ place label).
    """

    @abstractmethod
    async def describe(
        self,
        image: SceneImage,
        *,
        instructions: str | None = None,
    ) -> SceneDescriptionResult:
        """
        Describe a single still frame.

        Args:
            image:
                Encoded camera frame.
            instructions:
                Extra free-text instructions added to the base prompt
                (e.g. resolve coordinates to a place label), or None.

        Contract:
        - Returns the provider's text as-is (stripped). An empty
          description_text is a valid return; the caller decides.
        - location_label is None unless the provider resolved one.
        - May raise on transport/provider errors.
        - Must NOT retry internally.
        """
        raise NotImplementedError
