from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

__all__ = ["ChatMessage", "ChatRole", "DiseasePrediction"]

ChatRole = Literal["user", "bot"]


class ChatMessage(BaseModel):
    """One turn of a user's conversation with the assistant."""

    id: int
    user_id: str
    role: ChatRole
    text: str
    created_at: datetime


class DiseasePrediction(BaseModel):
    """Structured answer to "what could these symptoms be?"."""

    possible_diseases: str = Field(
        description="A list of possible diseases based on the symptoms provided."
    )
    confidence_level: Literal["low", "medium", "high"] = Field(
        description="The confidence level of the prediction."
    )
    next_steps: str = Field(
        description="Recommended next steps, such as consulting a doctor or further tests."
    )
