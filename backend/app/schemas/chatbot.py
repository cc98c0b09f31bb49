"""Assistant chat schemas."""
from typing import Literal

from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    """One earlier message in the conversation."""

    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=4000)

    class Config:
        extra = "forbid"


class ChatRequest(BaseModel):
    """Message for the assistant plus recent conversation."""

    message: str = Field(..., min_length=1, max_length=2000)
    conversation_history: list[ChatTurn] = Field(default_factory=list, alias="conversationHistory")

    class Config:
        extra = "forbid"
        populate_by_name = True


class ChatResponse(BaseModel):
    reply: str
    suggestions: list[str]
