from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
import logging

import httpx

from roadmap_chat.api.schemas.chat import ChatMessage
from roadmap_chat.client.results import ChatResultError, StreamChatResult
from roadmap_chat.client.stream_reader import ChatStreamReader, TokenCallback
from roadmap_chat.core.settings import Settings
from roadmap_chat.services.request_envelope import encode_request_envelope

logger = logging.getLogger(__name__)

REQUEST_REJECTED_MESSAGE = "Sorry, I couldn't process your request right now. Please try again."
TRANSPORT_FAILURE_MESSAGE = "Something went wrong. Please try again."

_CANCELLED = object()


class ChatStreamClient:
    """HTTP client for the chat relay's streaming endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        encode_payload: bool = True,
        timeout_seconds: float = 60.0,
        chat_path: str = "/api/chat",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)
        self._encode_payload = encode_payload
        self._chat_path = chat_path

    @classmethod
    def from_settings(cls, settings: Settings) -> ChatStreamClient:
        return cls(
            settings.client_base_url,
            encode_payload=settings.encode_request_payload,
            timeout_seconds=settings.client_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def stream_chat_response(
        self,
        messages: Sequence[ChatMessage],
        *,
        cancel_event: asyncio.Event | None = None,
        on_token: TokenCallback | None = None,
    ) -> StreamChatResult:
        """Send a conversation and stream the answer, calling ``on_token(token, full_content)`` per token.

        Setting ``cancel_event`` stops reading at the next chunk boundary and
        returns the partial answer as an aborted result.
        """

        reader = ChatStreamReader(on_token=on_token)
        if cancel_event is not None and cancel_event.is_set():
            return reader.abort()

        body, content_type = encode_request_envelope(messages, encoded=self._encode_payload)
        try:
            async with self._client.stream(
                "POST",
                self._chat_path,
                content=body,
                headers={"Content-Type": content_type},
            ) as response:
                if not response.is_success:
                    logger.warning("chat request rejected", extra={"status_code": response.status_code})
                    return ChatResultError(content="", message=REQUEST_REJECTED_MESSAGE)

                chunks = response.aiter_bytes()
                while True:
                    chunk = await self._next_chunk(chunks, cancel_event)
                    if chunk is _CANCELLED:
                        logger.debug("chat stream cancelled", extra={"content_length": len(reader.content)})
                        return reader.abort()
                    if chunk is None:
                        break
                    reader.feed(chunk)
        except httpx.HTTPError:
            logger.warning("chat stream transport failure", exc_info=True)
            return ChatResultError(content="", message=TRANSPORT_FAILURE_MESSAGE)

        reader.finish()
        return reader.result()

    async def _next_chunk(self, chunks: AsyncIterator[bytes], cancel_event: asyncio.Event | None) -> bytes | object | None:
        """Next body chunk, ``None`` at end of stream, or ``_CANCELLED`` once the event is set."""

        if cancel_event is None:
            return await anext(chunks, None)
        if cancel_event.is_set():
            return _CANCELLED

        read_task = asyncio.ensure_future(anext(chunks, None))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({read_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            read_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if cancel_event.is_set():
            if not read_task.done():
                read_task.cancel()
            await asyncio.gather(read_task, return_exceptions=True)
            return _CANCELLED
        return read_task.result()
