"""Stream events and the frame codec shared by the server emitter and the client reader.

A frame is ``data: <base64(utf-8 json)>`` followed by a blank line. Base64 keeps
model text containing newlines from ever producing a frame delimiter.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"
_DATA_PREFIX = "data:"

STREAM_FAILURE_MESSAGE = "Something went wrong while streaming the response."


class TokenEvent(BaseModel):
    type: Literal["token"] = "token"
    content: str


class DoneEvent(BaseModel):
    type: Literal["done"] = "done"


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str = ""


StreamEvent = Annotated[TokenEvent | DoneEvent | ErrorEvent, Field(discriminator="type")]

_stream_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


def is_terminal(event: StreamEvent) -> bool:
    return event.type in ("done", "error")


def encode_frame(event: StreamEvent) -> bytes:
    payload = base64.b64encode(event.model_dump_json().encode("utf-8")).decode("ascii")
    return f"{_DATA_PREFIX} {payload}{FRAME_DELIMITER}".encode("ascii")


def decode_frame(raw_frame: str) -> StreamEvent | None:
    """Decode one frame, returning ``None`` for anything that is not a valid event.

    Lines other than ``data:`` lines (keep-alive comments, ``event:`` fields) are
    ignored and multi-line data is concatenated before decoding.
    """

    data = "".join(
        line[len(_DATA_PREFIX):].lstrip()
        for line in raw_frame.split("\n")
        if line.startswith(_DATA_PREFIX)
    )
    if not data:
        return None

    try:
        decoded = base64.b64decode(data, validate=True)
        return _stream_event_adapter.validate_json(decoded)
    except (binascii.Error, ValueError, ValidationError):
        logger.debug("discarding malformed frame", extra={"frame_length": len(raw_frame)})
        return None


def split_frames(buffer: str) -> tuple[list[str], str]:
    """Split complete frames off ``buffer``; the trailing partial frame is returned as remainder."""

    *frames, remainder = buffer.split(FRAME_DELIMITER)
    return frames, remainder
