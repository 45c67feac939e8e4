from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ChatRequestError(Exception):
    """Request rejected before any stream was opened."""

    status_code: int
    message: str


class InvalidPayloadError(ChatRequestError):
    def __init__(self, message: str = "Invalid payload format. Expected Base64.") -> None:
        super().__init__(status_code=400, message=message)


class InvalidConversationError(ChatRequestError):
    def __init__(self, message: str = "Invalid request. Please try again.") -> None:
        super().__init__(status_code=400, message=message)


class ModelNotConfiguredError(ChatRequestError):
    def __init__(
        self,
        message: str = "The assistant is not configured yet. Please contact the administrator.",
    ) -> None:
        super().__init__(status_code=503, message=message)
