"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No orchestration logic
- No behavioral constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import MAX_HISTORY_ITEMS


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.environ.get(name)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup and passed to create_app().
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str
    log_level: str
    cors_allow_origins: tuple[str, ...]

    # ------------------------------------------------------------------
    # Scene description
    # ------------------------------------------------------------------

    openai_api_key: str | None
    description_model: str

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool

    # ------------------------------------------------------------------
    # TTS
    # ------------------------------------------------------------------

    tts_provider: str
    openai_tts_model: str
    speechmatics_api_key: str | None

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    history_backend: str
    history_db_path: str
    history_limit: int

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Missing keys fall back to development defaults; provider keys are
        checked when the app is built, not here.
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            cors_allow_origins=_env_list("CORS_ALLOW_ORIGINS", ("*",)),

            openai_api_key=os.environ.get("OPENAI_API_KEY"),
            description_model=os.environ.get("DESCRIPTION_MODEL", "gpt-4o-mini"),

            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",

            tts_provider=os.environ.get("TTS_PROVIDER", "openai").lower(),
            openai_tts_model=os.environ.get("OPENAI_TTS_MODEL", "gpt-4o-mini-tts"),
            speechmatics_api_key=os.environ.get("SPEECHMATICS_API_KEY"),

            history_backend=os.environ.get("HISTORY_BACKEND", "memory").lower(),
            history_db_path=os.environ.get("HISTORY_DB_PATH", "./data/history.sqlite"),
            history_limit=_env_int("HISTORY_LIMIT", MAX_HISTORY_ITEMS),
        )
