"""
Password hashing, JWT handling and credential generation
"""

import logging
import secrets
import string
from datetime import timedelta
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import JWT_ALGORITHM, JWT_EXPIRE_HOURS, SECRET_KEY
from .models import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password_bcrypt(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False


def generate_random_password(length: int = 8) -> str:
    """
    Generate a temporary password for a new staff account.

    The password always contains at least one lowercase letter, one uppercase
    letter and one digit, the remaining characters are drawn from all three sets.
    """
    if length < 3:
        raise ValueError("Password length must be at least 3")

    alphabet = string.ascii_letters + string.digits
    chars = [
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.digits),
    ]
    chars.extend(secrets.choice(alphabet) for _ in range(length - 3))

    # Shuffle so the guaranteed characters are not always in front
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


# ============================================================================
# JWT TOKENS
# ============================================================================


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT token

    Args:
        data: Data to encode in the token
        expires_delta: Token expiration time (default JWT_EXPIRE_HOURS)
    """
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(hours=JWT_EXPIRE_HOURS))
    to_encode.update({"exp": expire})
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def create_access_token(user) -> str:
    """Token issued at login, carries the user's id, phone and role"""
    return create_jwt_token({"userId": user.id, "phone": user.phone, "role": user.role})


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


def mask_phone(phone: Optional[str], visible_digits: int = 4) -> str:
    """Phone number with all but the last digits hidden, for logs"""
    if not phone:
        return ""
    hidden = max(0, len(phone) - visible_digits)
    return "*" * hidden + phone[hidden:]
