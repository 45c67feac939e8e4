"""Shared test utilities and fixtures for roadmap-chat tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from types import SimpleNamespace

from fastapi import FastAPI
import punq
import pytest

from roadmap_chat.agents.engine import Channel, EngineItem, GENERATION_STAGE, ModelEngine
from roadmap_chat.agents.orchestrator import GenerationOrchestrator
from roadmap_chat.api.router import api_router
from roadmap_chat.api.routers.health import router as health_router
from roadmap_chat.api.schemas.chat import ChatMessage
from roadmap_chat.core.settings import Settings
from roadmap_chat.services.stream_emitter import ServerEventEmitter, StreamConfig


def primary(text: object, stage: str | None = GENERATION_STAGE) -> EngineItem:
    metadata = {"langgraph_node": stage} if stage is not None else {}
    return EngineItem(channel=Channel.PRIMARY, payload=(SimpleNamespace(content=text), metadata))


def secondary(text: object, stage: str = GENERATION_STAGE) -> EngineItem:
    return EngineItem(channel=Channel.SECONDARY, payload={stage: {"messages": [SimpleNamespace(content=text)]}})


class FakeEngine:
    """Scripted engine that replays items and optionally fails afterwards."""

    generation_stage = GENERATION_STAGE

    def __init__(self, items: list[EngineItem], *, fail_with: Exception | None = None) -> None:
        self._items = items
        self._fail_with = fail_with
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    async def astream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[EngineItem]:
        self.calls.append(list(messages))
        try:
            for item in self._items:
                yield item
            if self._fail_with is not None:
                raise self._fail_with
        finally:
            self.closed = True


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, OPENROUTER_API_KEY="test-key")


def build_test_container(settings: Settings, engine: ModelEngine) -> punq.Container:
    """Create a punq container wired like production but around a fake engine."""

    container = punq.Container()
    container.register(Settings, instance=settings)
    container.register(StreamConfig, instance=StreamConfig())
    container.register(ModelEngine, instance=engine)
    container.register(ServerEventEmitter, factory=ServerEventEmitter, scope=punq.Scope.singleton)
    container.register(GenerationOrchestrator, factory=GenerationOrchestrator, scope=punq.Scope.singleton)
    return container


def build_test_app(container: punq.Container) -> FastAPI:
    app = FastAPI()
    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")
    app.state.container = container
    return app
