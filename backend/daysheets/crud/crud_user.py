from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models
from ..utils.auth import normalize_email


def get_user(db: Session, user_id: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return (
        db.query(models.User)
        .filter(func.lower(models.User.email) == normalize_email(email))
        .first()
    )


def get_artist_ids_for_user(db: Session, user_id: str) -> List[str]:
    rows = (
        db.query(models.ArtistAssignment.artist_id)
        .filter(models.ArtistAssignment.user_id == user_id)
        .all()
    )
    return [r[0] for r in rows]


def has_artist_assignment(db: Session, user_id: str, artist_id: str) -> bool:
    return (
        db.query(models.ArtistAssignment.id)
        .filter(
            models.ArtistAssignment.user_id == user_id,
            models.ArtistAssignment.artist_id == artist_id,
        )
        .first()
        is not None
    )


def add_artist_assignment(
    db: Session, user_id: str, artist_id: str, created_by: Optional[str] = None
) -> models.ArtistAssignment:
    assignment = models.ArtistAssignment(user_id=user_id, artist_id=artist_id, created_by=created_by)
    db.add(assignment)
    db.flush()
    return assignment
