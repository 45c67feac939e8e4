"""Unit tests for writing stream events onto the response body."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from roadmap_chat.services.chat_stream import STREAM_FAILURE_MESSAGE, DoneEvent, ErrorEvent, TokenEvent, decode_frame, encode_frame
from roadmap_chat.services.stream_emitter import ServerEventEmitter, StreamConfig


async def _events(*events, fail_with: Exception | None = None) -> AsyncIterator:
    for event in events:
        yield event
    if fail_with is not None:
        raise fail_with


async def _collect(frames: AsyncIterator[bytes]) -> list[bytes]:
    return [frame async for frame in frames]


@pytest.mark.asyncio
async def test_frames_are_written_one_per_event_in_order() -> None:
    emitter = ServerEventEmitter(StreamConfig())

    frames = await _collect(emitter.frames(_events(TokenEvent(content="a"), TokenEvent(content="b"), DoneEvent())))

    assert frames == [
        encode_frame(TokenEvent(content="a")),
        encode_frame(TokenEvent(content="b")),
        encode_frame(DoneEvent()),
    ]


@pytest.mark.asyncio
async def test_nothing_is_written_after_a_terminal_event() -> None:
    emitter = ServerEventEmitter(StreamConfig())

    frames = await _collect(
        emitter.frames(_events(TokenEvent(content="a"), ErrorEvent(message="x"), TokenEvent(content="late"), DoneEvent()))
    )

    assert [decode_frame(frame.decode()) for frame in frames] == [TokenEvent(content="a"), ErrorEvent(message="x")]


@pytest.mark.asyncio
async def test_source_failure_writes_generic_error_frame() -> None:
    emitter = ServerEventEmitter(StreamConfig())

    frames = await _collect(emitter.frames(_events(TokenEvent(content="a"), fail_with=RuntimeError("internal"))))

    assert [decode_frame(frame.decode()) for frame in frames] == [
        TokenEvent(content="a"),
        ErrorEvent(message=STREAM_FAILURE_MESSAGE),
    ]


@pytest.mark.asyncio
async def test_source_ending_without_terminal_event_gets_error_frame() -> None:
    emitter = ServerEventEmitter(StreamConfig())

    frames = await _collect(emitter.frames(_events(TokenEvent(content="a"))))

    assert decode_frame(frames[-1].decode()) == ErrorEvent(message=STREAM_FAILURE_MESSAGE)


def test_stream_response_uses_configured_headers() -> None:
    config = StreamConfig(media_type="text/event-stream", headers={"Cache-Control": "no-cache, no-transform", "X-Accel-Buffering": "no"})

    response = ServerEventEmitter(config).stream_response(_events(DoneEvent()))

    assert response.status_code == 200
    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache, no-transform"
    assert response.headers["x-accel-buffering"] == "no"
