from roadmap_chat.client.chat_client import ChatStreamClient
from roadmap_chat.client.results import ChatResultAborted, ChatResultError, ChatResultOk, StreamChatResult
from roadmap_chat.client.stream_reader import ChatStreamReader

__all__ = [
    "ChatResultAborted",
    "ChatResultError",
    "ChatResultOk",
    "ChatStreamClient",
    "ChatStreamReader",
    "StreamChatResult",
]
