"""Conversation models read by the scheduler.

The scheduler never owns message content; it only reads the list supplied
by the caller.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageSender(str, Enum):
    """Author of a chat message."""

    USER = "user"
    AI = "ai"
    SYSTEM = "system"


class ChatMessage(BaseModel):
    """A single message (one turn) in a conversation."""

    id: str = Field(..., description="Unique message identifier")
    sender: MessageSender = Field(..., description="Who wrote the message")
    text: str = Field(default="", description="Message content")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the message was appended",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the remote timeline service."""
        return {
            "id": self.id,
            "sender": self.sender.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }


class Conversation(BaseModel):
    """A conversation and its ordered message list."""

    conversation_id: str = Field(..., description="Conversation identifier")
    messages: list[ChatMessage] = Field(
        default_factory=list,
        description="Messages in append order; list position is the message index",
    )
