"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Build shared collaborators once per process (OpenAI client, adapters,
  history store, orchestrator)
- Register routes
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from adapters.description.openai_vision import OpenAIVisionDescriptionAdapter
from adapters.tts.base import SpeechAdapter
from adapters.tts.openai_speech import OpenAISpeechAdapter
from adapters.tts.speechmatics import SpeechmaticsSpeechAdapter
from config import AppConfig
from history.base import HistoryStore
from history.memory import InMemoryHistoryStore
from history.sqlite import SqliteHistoryStore
from observability import logger
from orchestrator.scan import ScanOrchestrator

from server.routes import register_routes


def create_app(
    config: AppConfig | None = None,
    *,
    orchestrator: ScanOrchestrator | None = None,
    history: HistoryStore | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    orchestrator/history may be injected (tests); otherwise they are built
    from config.
    """
    config = config or AppConfig.load_from_env()
    logger.configure(enabled=config.enable_json_logs)

    if history is None:
        history = build_history_store(config)
    if orchestrator is None:
        orchestrator = build_orchestrator(config, history=history)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        # Let in-flight history writes land before the process exits
        await orchestrator.drain()

    app = FastAPI(title="AuraVis API", lifespan=lifespan)

    app.state.config = config
    app.state.history = history
    app.state.orchestrator = orchestrator

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    register_routes(app)

    return app


def build_history_store(config: AppConfig) -> HistoryStore:
    """Select the history backend named by HISTORY_BACKEND."""
    if config.history_backend == "sqlite":
        # Each operation opens its own connection; an in-memory database would
        # be a new empty one every time. Use HISTORY_BACKEND=memory instead.
        if config.history_db_path.strip() in ("", ":memory:"):
            raise RuntimeError("HISTORY_DB_PATH must name a file for the sqlite backend")
        return SqliteHistoryStore(db_path=config.history_db_path)
    if config.history_backend == "memory":
        return InMemoryHistoryStore()
    raise RuntimeError(f"Unsupported HISTORY_BACKEND: {config.history_backend!r}")


def build_speech_adapter(config: AppConfig, client: AsyncOpenAI) -> SpeechAdapter:
    """Select the TTS provider named by TTS_PROVIDER."""
    if config.tts_provider == "openai":
        return OpenAISpeechAdapter(client=client, model=config.openai_tts_model)

    if config.tts_provider == "speechmatics":
        if not config.speechmatics_api_key:
            raise RuntimeError("SPEECHMATICS_API_KEY environment variable not set")
        return SpeechmaticsSpeechAdapter(api_key=config.speechmatics_api_key)

    raise RuntimeError(f"Unsupported TTS_PROVIDER: {config.tts_provider!r}")


def build_orchestrator(config: AppConfig, *, history: HistoryStore) -> ScanOrchestrator:
    """Wire provider adapters around ONE OpenAI client per process."""
    if not config.openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable not set")

    client = AsyncOpenAI(api_key=config.openai_api_key)

    return ScanOrchestrator(
        description=OpenAIVisionDescriptionAdapter(
            client=client,
            model=config.description_model,
        ),
        speech=build_speech_adapter(config, client),
        history=history,
    )
