"""Normalization of model message content into plain text.

Chat models report content either as a string or as a list of parts, where a
part is a string or a block carrying a ``text`` field (dict or object). Content
is parsed into one of two explicit variants once and rendered to text from
there; anything unrecognized contributes no text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class PartList:
    parts: tuple[str, ...]


MessageContent = TextContent | PartList


def _part_text(part: Any) -> str:
    if isinstance(part, str):
        return part
    if isinstance(part, dict):
        text = part.get("text")
    else:
        text = getattr(part, "text", None)
    return text if isinstance(text, str) else ""


def parse_content(raw: Any) -> MessageContent | None:
    if isinstance(raw, str):
        return TextContent(raw)
    if isinstance(raw, (list, tuple)):
        return PartList(tuple(_part_text(part) for part in raw))
    return None


def content_text(content: MessageContent | None) -> str:
    if isinstance(content, TextContent):
        return content.text
    if isinstance(content, PartList):
        return "".join(content.parts)
    return ""


def message_text(message: Any) -> str:
    """Text of a message or message chunk, read from its ``content`` attribute or key."""

    if message is None:
        return ""
    raw = message.get("content") if isinstance(message, dict) else getattr(message, "content", None)
    return content_text(parse_content(raw))
