from sqlalchemy import Column, DateTime, ForeignKey, JSON, String

from .base import BaseModel
from .types import ValueEnum, new_id
from .user import UserRole


class Invite(BaseModel):
    __tablename__ = "invites"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, nullable=False, index=True)
    role = Column(ValueEnum(UserRole, name="invite_role"), nullable=False)
    artist_ids = Column(JSON, nullable=False, default=list)
    token = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
