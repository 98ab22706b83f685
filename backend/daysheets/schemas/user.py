from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List

from ..models.user import UserRole, UserStatus


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole
    status: UserStatus
    artist_ids: List[str] = []

    model_config = {"from_attributes": True}


class InviteCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    role: UserRole
    artist_ids: List[str] = []


class InviteResponse(BaseModel):
    id: str
    email: str
    role: UserRole
    artist_ids: List[str]
    token: str
    expires_at: datetime

    model_config = {"from_attributes": True}


class InviteAccept(BaseModel):
    # Presence is checked in the service so a missing field answers 400
    token: Optional[str] = None
    password: Optional[str] = None
    fullName: Optional[str] = None
