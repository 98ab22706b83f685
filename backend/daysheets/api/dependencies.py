from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.policies import Principal
from ..crud import crud_user
from ..database import get_db
from ..models import User
from .auth import oauth2_scheme, user_from_token


def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    request: Request = None,
) -> Optional[User]:
    """Return the authenticated user or ``None`` without raising."""
    jwt_token = token or (request.cookies.get("access_token") if request else None)
    return user_from_token(db, jwt_token)


def get_principal(
    user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """Session context handed to services; ``None`` when unauthenticated.

    Services decide whether anonymous access is an error, so a missing
    session answers 401 through the same path as every other domain error.
    """
    if user is None:
        return None
    artist_ids = frozenset() if user.role.is_staff else frozenset(crud_user.get_artist_ids_for_user(db, user.id))
    return Principal(
        user_id=user.id,
        email=user.email,
        role=user.role,
        full_name=user.full_name,
        artist_ids=artist_ids,
    )
