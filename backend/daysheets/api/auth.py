# backend/daysheets/api/auth.py

import logging
from datetime import datetime, timedelta
from typing import Optional

import redis
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud import crud_user
from ..database import get_db
from ..models import User
from ..schemas.user import Token, UserResponse
from ..utils.auth import normalize_email, verify_password
from ..utils.redis_cache import get_redis_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Login rate limiting mirrors the per-email / per-IP counters kept in Redis.
@router.post("/login", response_model=Token)
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    ip = request.client.host if request.client else "unknown"
    email = normalize_email(form_data.username)
    user_key = f"login_fail:user:{email}"
    ip_key = f"login_fail:ip:{ip}"
    client = get_redis_client()
    try:
        user_attempts = int(client.get(user_key) or 0)
        ip_attempts = int(client.get(ip_key) or 0)
    except redis.exceptions.RedisError as exc:
        logger.warning("Redis unavailable for login tracking: %s", exc)
        user_attempts = ip_attempts = 0
    if user_attempts >= settings.MAX_LOGIN_ATTEMPTS or ip_attempts >= settings.MAX_LOGIN_ATTEMPTS:
        logger.info("Login locked out for %s from %s", email, ip)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Try again later.",
        )

    user = crud_user.get_user_by_email(db, email)
    if not user or not user.hashed_password or not verify_password(form_data.password, user.hashed_password):
        try:
            for key in (user_key, ip_key):
                client.setex(key, settings.LOGIN_ATTEMPT_WINDOW, (user_attempts if key == user_key else ip_attempts) + 1)
        except redis.exceptions.RedisError as exc:
            logger.warning("Could not update login attempt counters: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")

    try:
        client.delete(user_key)
        client.delete(ip_key)
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not reset login counters: %s", exc)

    return {"access_token": create_access_token({"sub": user.id}), "token_type": "bearer"}


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    request: Request = None,
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    # Prefer Authorization header; fall back to access_token cookie if missing
    jwt_token = token
    if not jwt_token and request is not None:
        jwt_token = request.cookies.get("access_token")
    user = user_from_token(db, jwt_token)
    if user is None:
        raise credentials_exception
    return user


def user_from_token(db: Session, jwt_token: Optional[str]) -> Optional[User]:
    """Resolve a bearer token to an active user, or None."""
    if not jwt_token:
        return None
    try:
        payload = jwt.decode(jwt_token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    user = crud_user.get_user(db, user_id)
    if user is None or not user.is_active:
        return None
    return user


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Return details for the authenticated user."""
    data = UserResponse.model_validate(current_user)
    data.artist_ids = crud_user.get_artist_ids_for_user(db, current_user.id)
    return data
