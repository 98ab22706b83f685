from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text

from .base import BaseModel, utcnow
from .types import new_id


class ChatMessage(BaseModel):
    __tablename__ = "chat_messages"
    __table_args__ = (Index("ix_chat_messages_leg_created", "leg_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=new_id)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    sender_role = Column(String(16), nullable=False)
    message = Column(Text, nullable=False)


class ChatRead(BaseModel):
    """Per-user, per-leg read marker."""

    __tablename__ = "chat_reads"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="CASCADE"), primary_key=True)
    last_read_at = Column(DateTime, nullable=False, default=utcnow)
