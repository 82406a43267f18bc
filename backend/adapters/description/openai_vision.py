"""
OpenAI vision description adapter.

Role in the system:
- Sends one camera frame (as an image_url data URI) plus the scene prompt to
  the chat completions API.
- Requests a JSON object {"sceneDescription": str, "location": str | null}.
- Returns the parsed SceneDescriptionResult.

Architectural constraints:
- No retries, no timers; the vendor client's timeout applies as-is.
- An unparseable or empty reply is returned as an empty description; the
  orchestrator decides that this fails the scan.
"""

from __future__ import annotations

import json
from typing import Any

from adapters.description.base import DescriptionAdapter
from adapters.description.prompts import SCENE_SYSTEM_PROMPT_V1, SCENE_USER_PROMPT_V1
from observability.logger import log_event
from orchestrator.models import SceneDescriptionResult, SceneImage


class OpenAIVisionDescriptionAdapter(DescriptionAdapter):
    """
    Scene description via an OpenAI multimodal chat model.

    One adapter instance serves many concurrent scans; it holds no per-scan
    state.
    """

    def __init__(
        self,
        *,
        client: Any,  # Type: openai.AsyncOpenAI
        model: str,
        system_prompt: str = SCENE_SYSTEM_PROMPT_V1,
    ) -> None:
        self._client = client
        self._model = model
        self._system_prompt = system_prompt

    async def describe(
        self,
        image: SceneImage,
        *,
        instructions: str | None = None,
    ) -> SceneDescriptionResult:
        user_text = SCENE_USER_PROMPT_V1
        if instructions:
            user_text = f"{instructions}\n{user_text}"

        completion = await self._client.chat.completions.create(
            model=self._model,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": self._system_prompt.strip()},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": user_text},
                        {"type": "image_url", "image_url": {"url": image.to_data_uri()}},
                    ],
                },
            ],
        )

        return self._parse(self._extract_content(completion))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_content(completion: Any) -> str:
        """Message text of the first choice (OpenAI format)."""
        try:
            return completion.choices[0].message.content or ""
        except (AttributeError, IndexError):
            return ""

    @staticmethod
    def _parse(content: str) -> SceneDescriptionResult:
        """
        Parse the model's JSON reply.

        Non-JSON replies are treated as a bare description, so a model that
        ignores the output format still yields usable text.
        """
        content = content.strip()
        if not content:
            return SceneDescriptionResult(description_text="")

        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            log_event({
                "event_type": "DESCRIPTION_NON_JSON_REPLY",
                "char_count": len(content),
            })
            return SceneDescriptionResult(description_text=content)

        if not isinstance(data, dict):
            return SceneDescriptionResult(description_text="")

        description = data.get("sceneDescription")
        location = data.get("location")

        return SceneDescriptionResult(
            description_text=description.strip() if isinstance(description, str) else "",
            location_label=(location.strip() or None) if isinstance(location, str) else None,
        )
