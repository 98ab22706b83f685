from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .. import models


def create_invite(db: Session, **fields) -> models.Invite:
    invite = models.Invite(**fields)
    db.add(invite)
    db.flush()
    return invite


def get_open_invite(db: Session, token: str, now: datetime) -> Optional[models.Invite]:
    """Invite matching ``token`` that is neither accepted nor expired."""
    return (
        db.query(models.Invite)
        .filter(
            models.Invite.token == token,
            models.Invite.accepted_at.is_(None),
            models.Invite.expires_at > now,
        )
        .first()
    )
