from __future__ import annotations

"""
security.py

Bearer JWT handling.

Tokens are issued by the hosted auth provider (HS256, shared secret) with the
user id in `sub`. create_access_token() mints the same shape for local
development and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, TypedDict

from jose import JWTError, jwt

from velohub.core.config import settings


class TokenPayload(TypedDict):
    sub: str
    exp: int  # UNIX timestamp
    iat: int  # UNIX timestamp
    type: str


# =========================
# JWT creation
# =========================

def create_access_token(subject: str, *, expires_minutes: Optional[int] = None) -> str:
    """
    Args:
        subject: user_id (string)

    Returns:
        encoded JWT
    """
    if not subject:
        raise ValueError("Subject cannot be empty")

    now = datetime.now(timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES

    payload: TokenPayload = {
        "sub": subject,
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),
        "iat": int(now.timestamp()),
        "type": "access",
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# =========================
# JWT verification
# =========================

def decode_access_token(token: str) -> Optional[str]:
    """
    Returns:
        user_id (sub), or None when the token is missing, expired or forged
    """
    if not token:
        return None

    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            key=settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None

    token_type = payload.get("type")
    if token_type is not None and token_type != "access":
        return None

    return subject
