from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ChatResultOk(BaseModel):
    status: Literal["ok"] = "ok"
    content: str


class ChatResultAborted(BaseModel):
    status: Literal["aborted"] = "aborted"
    content: str = Field(..., description="Text accumulated before cancellation")


class ChatResultError(BaseModel):
    status: Literal["error"] = "error"
    content: str = Field(..., description="Text accumulated before the failure, possibly empty")
    message: str = Field(..., description="Generic, user-facing failure message")


StreamChatResult = Annotated[ChatResultOk | ChatResultAborted | ChatResultError, Field(discriminator="status")]
