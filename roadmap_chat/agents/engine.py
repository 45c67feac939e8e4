from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Protocol

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langgraph.graph import END, START, MessagesState, StateGraph

from roadmap_chat.api.schemas.chat import ChatMessage

logger = logging.getLogger(__name__)

GENERATION_STAGE = "generate"


class Channel(str, Enum):
    """Progress channel an engine item arrived on."""

    PRIMARY = "messages"
    SECONDARY = "updates"


@dataclass(frozen=True)
class EngineItem:
    channel: Channel
    payload: Any


class ModelEngine(Protocol):
    """Contract for engines that expose one generation as an interleaving of two channels.

    Primary payloads are ``(message_chunk, metadata)`` pairs where
    ``metadata["langgraph_node"]`` names the stage that produced the chunk.
    Secondary payloads map stage names to ``{"messages": [...]}`` snapshots.
    """

    generation_stage: str

    def astream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[EngineItem]:
        """Stream tagged progress items for one generation in arrival order."""


def to_langchain_messages(messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    converted: list[BaseMessage] = []
    for message in messages:
        if message.role == "system":
            converted.append(SystemMessage(content=message.content))
        elif message.role == "assistant":
            converted.append(AIMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


class LangGraphChatEngine:
    """Single-stage LangGraph graph (``START -> generate -> END``) around one chat model."""

    generation_stage = GENERATION_STAGE

    def __init__(self, *, model: BaseChatModel, system_prompt: str = "", compiled_graph: Any | None = None) -> None:
        self._system_prompt = system_prompt.strip()
        self._graph = compiled_graph if compiled_graph is not None else self._build_graph(model)

    @staticmethod
    def _build_graph(model: BaseChatModel) -> Any:
        async def generate(state: MessagesState) -> dict[str, list[BaseMessage]]:
            response = await model.ainvoke(state["messages"])
            return {"messages": [response]}

        builder = StateGraph(MessagesState)
        builder.add_node(GENERATION_STAGE, generate)
        builder.add_edge(START, GENERATION_STAGE)
        builder.add_edge(GENERATION_STAGE, END)
        return builder.compile()

    async def astream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[EngineItem]:
        graph_messages = to_langchain_messages(messages)
        if self._system_prompt:
            graph_messages.insert(0, SystemMessage(content=self._system_prompt))

        logger.debug("starting generation", extra={"messages_count": len(graph_messages)})
        graph_stream = self._graph.astream(
            {"messages": graph_messages},
            stream_mode=[Channel.PRIMARY.value, Channel.SECONDARY.value],
        )
        async with aclosing(graph_stream) as updates:
            async for mode, payload in updates:
                if mode == Channel.PRIMARY.value:
                    yield EngineItem(channel=Channel.PRIMARY, payload=payload)
                elif mode == Channel.SECONDARY.value:
                    yield EngineItem(channel=Channel.SECONDARY, payload=payload)
