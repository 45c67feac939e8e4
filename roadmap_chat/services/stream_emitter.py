from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import aclosing
from dataclasses import dataclass, field
from types import MappingProxyType
import logging

from fastapi.responses import StreamingResponse

from roadmap_chat.services.chat_stream import STREAM_FAILURE_MESSAGE, ErrorEvent, StreamEvent, encode_frame, is_terminal

logger = logging.getLogger(__name__)

_DEFAULT_STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@dataclass(frozen=True)
class StreamConfig:
    """Response settings that keep proxies from buffering or rewriting the event stream."""

    media_type: str = "text/event-stream; charset=utf-8"
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(_DEFAULT_STREAM_HEADERS)))


class ServerEventEmitter:
    """Writes an ordered stream-event sequence onto a streaming HTTP response body."""

    def __init__(self, config: StreamConfig) -> None:
        self._config = config

    async def frames(self, events: AsyncIterator[StreamEvent]) -> AsyncIterator[bytes]:
        """Encode events one at a time, stopping after the first terminal event.

        If the event source fails without producing a terminal event, a generic
        error frame is written so the body never ends without one.
        """

        terminated = False
        async with aclosing(events) as source:
            try:
                async for event in source:
                    yield encode_frame(event)
                    if is_terminal(event):
                        terminated = True
                        break
            except Exception:
                logger.exception("event source failed while streaming")
                yield encode_frame(ErrorEvent(message=STREAM_FAILURE_MESSAGE))
                return

        if not terminated:
            logger.warning("event source ended without a terminal event")
            yield encode_frame(ErrorEvent(message=STREAM_FAILURE_MESSAGE))

    def stream_response(self, events: AsyncIterator[StreamEvent]) -> StreamingResponse:
        return StreamingResponse(
            self.frames(events),
            status_code=200,
            media_type=self._config.media_type,
            headers=dict(self._config.headers),
        )
