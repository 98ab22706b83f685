from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ChatMessageCreate(BaseModel):
    message: str


class ChatMessageResponse(BaseModel):
    id: str
    leg_id: str
    user_id: Optional[str] = None
    sender_role: str
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}
