from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from velohub.core.security import decode_access_token
from velohub.db.session import get_db
from velohub.models.user import User

# auto_error=False so every auth failure goes through _unauthorized (401 + WWW-Authenticate)
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@dataclass(frozen=True)
class StoreContext:
    """Tenant context of one request, passed explicitly to handlers."""

    store_id: UUID
    user_id: UUID
    role: str

    @property
    def is_owner(self) -> bool:
        return self.role == "owner"


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Authentication dependency (single source of truth).
    - Extract Bearer token
    - Verify JWT via core.security.decode_access_token
    - Load User by UUID
    """
    if creds is None or not creds.credentials:
        raise _unauthorized("Not authenticated")

    subject = decode_access_token(creds.credentials)
    if not subject:
        raise _unauthorized("Invalid token")

    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token") from None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("User not found")

    return user


def get_store_context(user: User = Depends(get_current_user)) -> StoreContext:
    return StoreContext(store_id=user.store_id, user_id=user.id, role=user.role)
