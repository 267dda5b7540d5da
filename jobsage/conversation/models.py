import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Sender = Literal["user", "assistant"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def _as_utc(value: datetime) -> datetime:
    # Snapshots written by older clients may carry naive timestamps
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    content: str
    sender: Sender
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class Conversation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    messages: list[Message] = Field(min_length=1)  # Append-only, chronological
    last_updated: datetime = Field(alias="lastUpdated")

    @field_validator("last_updated")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def has_user_message(self) -> bool:
        return any(m.sender == "user" for m in self.messages)


class ConversationSummary(BaseModel):
    """Lightweight metadata for the conversation list."""

    id: str
    title: str
    message_count: int = 0
    preview: str = ""  # First ~80 chars of first user message
    last_updated: datetime

    @classmethod
    def from_conversation(cls, conv: Conversation) -> "ConversationSummary":
        preview = ""
        for m in conv.messages:
            if m.sender == "user":
                preview = m.content[:80]
                break
        return cls(
            id=conv.id,
            title=conv.title,
            message_count=len(conv.messages),
            preview=preview,
            last_updated=conv.last_updated,
        )
