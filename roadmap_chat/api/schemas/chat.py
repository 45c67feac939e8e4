from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"] = Field(..., description="Speaker of the message")
    content: str = Field(..., description="Plain message text")


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Ordered conversation turns; the last one is usually the user's question",
    )


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Generic, user-facing failure message")
