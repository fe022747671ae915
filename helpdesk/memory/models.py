import datetime
import uuid
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from .db import Base

SENDER_USER = "user"
SENDER_AI = "ai"
SENDERS = (SENDER_USER, SENDER_AI)


def _utcnow() -> datetime.datetime:
    # Stored naive; SQLite has no timezone support.
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _new_conversation_id() -> str:
    return str(uuid.uuid4())


class Conversation(Base):
    """A chat session grouping an ordered sequence of messages.

    Attributes
    ----------
    id
        Opaque UUID string handed to the client as ``sessionId``.
    created_at
        Timestamp (UTC) when the conversation was opened.
    """

    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=_new_conversation_id)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Message(Base):
    """ORM model representing a single chat turn (either user or ai).

    Attributes
    ----------
    id
        Auto-increment primary key; also the tie-break for equal timestamps.
    conversation_id
        Owning conversation. Enforced as a foreign key.
    sender
        "user" or "ai".
    text
        The natural-language message.
    timestamp
        Timestamp (UTC) when the message was stored.
    """

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(
        String(36), ForeignKey("conversations.id"), index=True, nullable=False
    )
    sender = Column(String(8), nullable=False)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=_utcnow, nullable=False, index=True)

    def to_dict(self) -> Dict[str, Any]:
        """Serialised shape used by the HTTP API and the prompt builder."""
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "sender": self.sender,
            "text": self.text,
            "timestamp": self.timestamp,
        }
