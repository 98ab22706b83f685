from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text
import enum

from .base import BaseModel, utcnow
from .types import ValueEnum, new_id


class NotificationType(str, enum.Enum):
    CLIENT_SELECTION = "client_selection"
    HOLD_EXPIRING = "hold_expiring"
    CHAT_MESSAGE = "chat_message"
    DOCUMENT_UPLOADED = "document_uploaded"
    BUDGET_UPDATED = "budget_updated"


class NotificationSeverity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class NotificationEvent(BaseModel):
    """Immutable event row; read state lives in NotificationRead."""

    __tablename__ = "notification_events"
    __table_args__ = (Index("ix_notification_events_artist_created", "artist_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=new_id)
    type = Column(ValueEnum(NotificationType, name="notification_type"), nullable=False)
    severity = Column(
        ValueEnum(NotificationSeverity, name="notification_severity"),
        nullable=False,
        default=NotificationSeverity.INFO,
    )
    artist_id = Column(String(36), ForeignKey("artists.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="CASCADE"), nullable=True)
    actor_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=True)


class NotificationRead(BaseModel):
    __tablename__ = "notification_reads"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    event_id = Column(String(36), ForeignKey("notification_events.id", ondelete="CASCADE"), primary_key=True)
    read_at = Column(DateTime, nullable=False, default=utcnow)
