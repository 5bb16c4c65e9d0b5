"""Conversation and message models.

These tables are owned by the CRM; the sentiment service only reads them.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from .base import BaseModel, TimestampMixin


def _new_id() -> str:
    return str(uuid.uuid4())


class Conversation(BaseModel, TimestampMixin):
    """A messaging conversation with a lead or customer."""

    __tablename__ = "conversations"

    conversation_id = Column(String(36), primary_key=True, default=_new_id)
    lead_id = Column(String(36), nullable=True)
    integrations_id = Column(String(36), nullable=True)  # WhatsApp instance, etc.

    # Relationships
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
        cascade="all, delete-orphan",
    )


class Message(BaseModel):
    """A single message in a conversation."""

    __tablename__ = "messages"

    message_id = Column(String(36), primary_key=True, default=_new_id)
    conversation_id = Column(
        String(36),
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Sender and body
    sender_participant_id = Column(String(36), nullable=True)
    content = Column(Text, nullable=True)
    media_type = Column(String(50), nullable=True)  # image, audio, document
    is_read = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.current_timestamp(), nullable=False)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
