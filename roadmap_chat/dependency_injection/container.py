from __future__ import annotations

import punq

from roadmap_chat.agents.engine import ModelEngine
from roadmap_chat.agents.factory import build_chat_engine
from roadmap_chat.agents.orchestrator import GenerationOrchestrator
from roadmap_chat.core.settings import Settings
from roadmap_chat.services.stream_emitter import ServerEventEmitter, StreamConfig


def build_container(settings: Settings) -> punq.Container:
    container = punq.Container()
    container.register(Settings, instance=settings)
    container.register(StreamConfig, instance=StreamConfig())

    # The engine is built on first resolve so a missing API key surfaces per request as a 503.
    container.register(ModelEngine, factory=lambda: build_chat_engine(settings), scope=punq.Scope.singleton)
    container.register(ServerEventEmitter, factory=ServerEventEmitter, scope=punq.Scope.singleton)
    container.register(GenerationOrchestrator, factory=GenerationOrchestrator, scope=punq.Scope.singleton)

    return container
