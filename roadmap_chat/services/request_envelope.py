from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from roadmap_chat.api.schemas.chat import ChatMessage, ChatRequest
from roadmap_chat.core.errors import InvalidConversationError, InvalidPayloadError

JSON_CONTENT_TYPE = "application/json"
ENCODED_CONTENT_TYPE = "text/plain"


def encode_request_envelope(messages: Sequence[ChatMessage], *, encoded: bool) -> tuple[bytes, str]:
    """Build the POST body and its content type for a chat request."""

    body = ChatRequest.model_construct(messages=list(messages)).model_dump_json().encode("utf-8")
    if not encoded:
        return body, JSON_CONTENT_TYPE
    return base64.b64encode(body), ENCODED_CONTENT_TYPE


def _is_plain_json(content_type: str | None) -> bool:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type == JSON_CONTENT_TYPE


def decode_request_envelope(body: bytes, content_type: str | None) -> ChatRequest:
    if _is_plain_json(content_type):
        raw_json = body
        payload_error = InvalidPayloadError("Invalid payload format. Expected JSON.")
    else:
        payload_error = InvalidPayloadError()
        try:
            raw_json = base64.b64decode(body.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise payload_error from exc

    try:
        payload: Any = json.loads(raw_json)
    except ValueError as exc:
        raise payload_error from exc

    messages = payload.get("messages") if isinstance(payload, dict) else None
    if not isinstance(messages, list) or not messages:
        raise InvalidConversationError()

    try:
        return ChatRequest.model_validate({"messages": messages})
    except ValidationError as exc:
        raise InvalidConversationError() from exc
