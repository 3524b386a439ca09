import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

# auto_error is off so a missing header gets our own 401 message
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Access token required")

    payload = verify_jwt_token(credentials.credentials)
    if not payload or "userId" not in payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = db.query(User).filter(User.id == payload["userId"]).first()
    if not user or not user.is_active:
        logger.warning(f"🔒 Token presented for missing or inactive user {payload.get('userId')}")
        raise HTTPException(status_code=401, detail="Invalid token or user inactive")

    return user


def require_roles(*roles: str):
    """
    Dependency factory restricting an endpoint to the given roles.

    Example usage:
        @router.delete("/{id}")
        async def delete_thing(current_user: User = Depends(require_roles("ADMIN"))):
            ...
    """

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"🚫 User {current_user.id} ({current_user.role}) denied, requires one of {roles}"
            )
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return current_user

    return role_checker
