from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing
import logging
from typing import Any

from roadmap_chat.agents.content import message_text
from roadmap_chat.agents.engine import Channel, ModelEngine
from roadmap_chat.api.schemas.chat import ChatMessage
from roadmap_chat.core.errors import InvalidConversationError
from roadmap_chat.services.chat_stream import STREAM_FAILURE_MESSAGE, DoneEvent, ErrorEvent, StreamEvent, TokenEvent

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Drives one generation and exposes it as an ordered stream-event sequence."""

    def __init__(self, engine: ModelEngine) -> None:
        self._engine = engine

    def stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[StreamEvent]:
        """Validate the conversation up front, then return the lazy event stream."""

        if isinstance(messages, (str, bytes)) or not isinstance(messages, Sequence) or not messages:
            raise InvalidConversationError()
        return self._generate(tuple(messages))

    async def _generate(self, messages: tuple[ChatMessage, ...]) -> AsyncIterator[StreamEvent]:
        streamed_content = ""
        fallback_content = ""

        try:
            async with aclosing(self._engine.astream(messages)) as items:
                async for item in items:
                    if item.channel is Channel.PRIMARY:
                        token = self._extract_token(item.payload)
                        if not token:
                            continue
                        streamed_content += token
                        yield TokenEvent(content=token)
                    elif item.channel is Channel.SECONDARY:
                        candidate = self._extract_fallback(item.payload)
                        if candidate:
                            fallback_content = candidate
        except Exception:
            logger.exception(
                "generation failed",
                extra={"streamed_length": len(streamed_content), "messages_count": len(messages)},
            )
            yield ErrorEvent(message=STREAM_FAILURE_MESSAGE)
            return

        if not streamed_content and fallback_content:
            logger.info("primary channel was empty; emitting fallback content", extra={"fallback_length": len(fallback_content)})
            yield TokenEvent(content=fallback_content)

        yield DoneEvent()

    def _extract_token(self, payload: Any) -> str:
        if not isinstance(payload, (tuple, list)) or len(payload) != 2:
            return ""
        chunk, metadata = payload
        stage = metadata.get("langgraph_node") if isinstance(metadata, dict) else None
        if stage and stage != self._engine.generation_stage:
            return ""
        return message_text(chunk)

    def _extract_fallback(self, payload: Any) -> str:
        """Latest non-empty text from a stage-keyed snapshot, or an empty string."""

        if not isinstance(payload, dict):
            return ""

        for stage_update in payload.values():
            if not isinstance(stage_update, dict):
                continue
            stage_messages = stage_update.get("messages")
            if not isinstance(stage_messages, list) or not stage_messages:
                continue
            text = message_text(stage_messages[-1])
            if text:
                return text
        return ""
