import hashlib
import hmac
import secrets
from datetime import timedelta
from typing import Optional
from fastapi import Depends, Header, HTTPException
from sqlmodel import Session
from videoai.core.config import settings
from videoai.core.db import get_session
from videoai.core.formatting import as_utc, utc_now
from videoai.models import User, AuthToken

PBKDF2_ITERATIONS = 200_000

def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}${digest.hex()}"

def verify_password(password: str, stored: str) -> bool:
    salt, _ = stored.split("$", 1)
    return hmac.compare_digest(hash_password(password, salt), stored)

def issue_token(session: Session, user: User) -> AuthToken:
    token = AuthToken(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=utc_now() + timedelta(hours=settings.TOKEN_TTL_HOURS)
    )
    session.add(token)
    session.commit()
    session.refresh(token)
    return token

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None

def get_current_user(
    authorization: Optional[str] = Header(default=None),
    session: Session = Depends(get_session)
) -> User:
    """resolve the bearer token on the request to its user"""
    token_value = bearer_token(authorization)
    if not token_value:
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = session.get(AuthToken, token_value)
    if not token or as_utc(token.expires_at) <= utc_now():
        raise HTTPException(status_code=401, detail="Session expired, please log in again")

    user = session.get(User, token.user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
