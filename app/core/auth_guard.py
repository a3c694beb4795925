from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.db.models.user import User

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 30


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Issues a signed token whose subject is the user id. Used by the identity provider and tests."""
    issued_at = datetime.utcnow()
    expire = issued_at + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    return jwt.encode(
        {"sub": user_id, "iat": issued_at, "exp": expire},
        settings.SECRET_KEY,
        algorithm=ALGORITHM
    )


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def _read_token(request: Request) -> Optional[str]:
    # API clients send a bearer header, the web front end sends the cookie
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return request.cookies.get("access_token")


def get_current_user_from_request(request: Request) -> Optional[str]:
    """
    Helper to extract the acting user id from the token without touching the database.
    Returns None if the token is missing or invalid.
    """
    token = _read_token(request)
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    return payload.get("sub")


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user_id = get_current_user_from_request(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")

    return user
