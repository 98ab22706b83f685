from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..models.notification import NotificationSeverity, NotificationType


class NotificationCreate(BaseModel):
    type: NotificationType
    severity: NotificationSeverity = NotificationSeverity.INFO
    artist_id: str
    project_id: Optional[str] = None
    leg_id: Optional[str] = None
    title: str
    body: Optional[str] = None


class NotificationResponse(BaseModel):
    id: str
    type: NotificationType
    severity: NotificationSeverity
    artist_id: str
    project_id: Optional[str] = None
    leg_id: Optional[str] = None
    actor_user_id: Optional[str] = None
    title: str
    body: Optional[str] = None
    created_at: datetime
    is_read: bool = False

    model_config = {"from_attributes": True}
