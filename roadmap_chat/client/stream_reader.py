from __future__ import annotations

import codecs
from collections.abc import Callable
from enum import Enum
import logging

from roadmap_chat.client.results import ChatResultAborted, ChatResultError, ChatResultOk, StreamChatResult
from roadmap_chat.services.chat_stream import StreamEvent, decode_frame, is_terminal, split_frames

logger = logging.getLogger(__name__)

NO_CONTENT_MESSAGE = "No response received. Please try again."
STREAM_ERROR_FALLBACK_MESSAGE = "Something went wrong. Please try again."

TokenCallback = Callable[[str, str], None]


class ReaderState(str, Enum):
    IDLE = "idle"
    READING = "reading"
    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


class ChatStreamReader:
    """Incremental decoder for an event-stream body delivered in arbitrary byte chunks.

    Bytes are decoded with an incremental UTF-8 decoder and buffered until a
    frame delimiter arrives, so neither a frame boundary nor a multi-byte
    character needs to line up with a chunk boundary. Frames that do not decode
    are skipped. Nothing is dispatched after the first terminal event.
    """

    def __init__(self, on_token: TokenCallback | None = None) -> None:
        self._on_token = on_token
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._terminated = False
        self.state = ReaderState.IDLE
        self.content = ""
        self.error_message: str | None = None

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        """Consume one chunk and return the events it completed, in order."""

        self.state = ReaderState.READING
        self._buffer += self._decoder.decode(chunk)
        frames, self._buffer = split_frames(self._buffer.replace("\r\n", "\n"))
        return self._dispatch_frames(frames)

    def finish(self) -> list[StreamEvent]:
        """Flush the decoder and treat any leftover text as a final frame."""

        remainder = (self._buffer + self._decoder.decode(b"", final=True)).replace("\r\n", "\n")
        self._buffer = ""
        frames, tail = split_frames(remainder)
        if tail.strip():
            frames.append(tail)
        return self._dispatch_frames(frames)

    def abort(self) -> ChatResultAborted:
        self.state = ReaderState.ABORTED
        return ChatResultAborted(content=self.content)

    def result(self) -> StreamChatResult:
        if self.error_message is not None:
            self.state = ReaderState.FAILED
            return ChatResultError(content=self.content, message=self.error_message)

        if not self.content.strip():
            self.state = ReaderState.FAILED
            return ChatResultError(content=self.content, message=NO_CONTENT_MESSAGE)

        self.state = ReaderState.COMPLETED
        return ChatResultOk(content=self.content)

    def _dispatch_frames(self, frames: list[str]) -> list[StreamEvent]:
        dispatched: list[StreamEvent] = []
        for frame in frames:
            if self._terminated:
                break
            event = decode_frame(frame)
            if event is None:
                continue
            self._dispatch(event)
            dispatched.append(event)
        return dispatched

    def _dispatch(self, event: StreamEvent) -> None:
        if event.type == "token":
            self.content += event.content
            if self._on_token is not None:
                self._on_token(event.content, self.content)
        elif event.type == "error":
            self.error_message = event.message or STREAM_ERROR_FALLBACK_MESSAGE
            logger.debug("stream reported an error event")

        if is_terminal(event):
            self._terminated = True
