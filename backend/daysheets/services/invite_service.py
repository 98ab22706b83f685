"""Invitation tokens for onboarding clients and agents."""

import logging
import secrets
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.policies import Principal, authorize
from ..crud import crud_invite, crud_user
from ..models import Invite, User, UserRole, UserStatus
from ..models.base import utcnow
from ..utils.auth import get_password_hash, normalize_email
from ..utils.errors import PersistenceError, ValidationError
from ..utils.ids import ensure_uuid

logger = logging.getLogger(__name__)

INVITABLE_ROLES = (UserRole.CLIENT, UserRole.AGENT)
MIN_PASSWORD_LENGTH = 8


def create_invite(
    db: Session,
    principal: Optional[Principal],
    email: str,
    role: str,
    artist_ids: Optional[List[str]] = None,
) -> Invite:
    principal = authorize(principal, "invites.create")
    email = normalize_email(email or "")
    if "@" not in email:
        raise ValidationError("A valid email is required", {"email": "invalid"})
    try:
        role = UserRole(role)
    except ValueError:
        raise ValidationError("Invalid role", {"role": "must be client or agent"})
    if role not in INVITABLE_ROLES:
        raise ValidationError("Invalid role", {"role": "must be client or agent"})
    artist_ids = [ensure_uuid(a, "artist_ids") for a in (artist_ids or [])]
    if role == UserRole.CLIENT and not artist_ids:
        raise ValidationError("Client invites need at least one artist", {"artist_ids": "required"})

    try:
        invite = crud_invite.create_invite(
            db,
            email=email,
            role=role,
            artist_ids=artist_ids,
            token=secrets.token_hex(32),
            expires_at=utcnow() + timedelta(days=settings.INVITE_TTL_DAYS),
            created_by=principal.user_id,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(invite)
    logger.info("Invite created for %s as %s", email, role.value)
    return invite


def _open_invite(db: Session, token: Optional[str]) -> Invite:
    invite = crud_invite.get_open_invite(db, token, utcnow()) if token else None
    if invite is None:
        raise ValidationError("Invalid or expired invite")
    return invite


def validate_invite(db: Session, token: Optional[str]) -> dict:
    invite = _open_invite(db, token)
    return {
        "email": invite.email,
        "role": invite.role,
        "expiresAt": invite.expires_at,
        "isValid": True,
    }


def accept_invite(
    db: Session,
    token: Optional[str],
    password: Optional[str],
    full_name: Optional[str],
) -> dict:
    """Create or activate the invited user and attach their artists.

    Artist assignments are added one savepoint at a time so a single bad
    artist id does not cost the whole acceptance.
    """
    full_name = (full_name or "").strip()
    if not token or not password or not full_name:
        raise ValidationError("Token, password, and full name are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", {"password": "too short"}
        )
    invite = _open_invite(db, token)

    try:
        user = crud_user.get_user_by_email(db, invite.email)
        if user is None:
            user = User(email=invite.email)
            db.add(user)
        user.full_name = full_name
        user.hashed_password = get_password_hash(password)
        user.role = invite.role
        user.status = UserStatus.ACTIVE
        user.is_active = True
        db.flush()

        if invite.role == UserRole.CLIENT:
            for artist_id in invite.artist_ids or []:
                if crud_user.has_artist_assignment(db, user.id, artist_id):
                    continue
                try:
                    with db.begin_nested():
                        crud_user.add_artist_assignment(db, user.id, artist_id, created_by=invite.created_by)
                except SQLAlchemyError as exc:
                    logger.warning("Skipping artist %s for invite %s: %s", artist_id, invite.id, exc)

        invite.accepted_at = utcnow()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Invite acceptance failed for %s: %s", invite.email, exc, exc_info=True)
        raise PersistenceError("Failed to accept invite") from exc
    logger.info("Invite accepted by %s", user.email)
    return {"success": True, "role": user.role, "userId": user.id}
