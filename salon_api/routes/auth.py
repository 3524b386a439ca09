import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_roles
from ..config import LOGIN_RATE_LIMIT, LOGIN_RATE_WINDOW_SECONDS
from ..database import get_db
from ..domain.staff.schemas import build_staff_response, check_role
from ..models import ROLE_ADMIN, ROLE_STAFF, User
from ..rate_limiter import create_rate_limiter
from ..security_utils import (
    create_access_token,
    generate_random_password,
    hash_password_bcrypt,
    verify_password_bcrypt,
)
from ..services.notification_service import deliver_credentials
from ..shared.responses import paginated, success
from ..shared.validators import validate_email, validate_phone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Rate limiters
rate_limit_login = create_rate_limiter(
    limit=LOGIN_RATE_LIMIT,
    window_seconds=LOGIN_RATE_WINDOW_SECONDS,
    key_prefix="login",
)


class LoginRequest(BaseModel):
    phone: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str
    email: Optional[str] = None
    role: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v) if v else None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        # Unknown roles fall back to STAFF
        try:
            return check_role(v) or ROLE_STAFF
        except ValueError:
            return ROLE_STAFF


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v) if v else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return validate_email(v) if v else v


class UserUpdate(ProfileUpdate):
    role: Optional[str] = None
    isActive: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return check_role(v)


class ChangePasswordRequest(BaseModel):
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=6)
    confirmPassword: Optional[str] = None


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _check_contact_available(
    db: Session, phone: Optional[str], email: Optional[str], exclude_id: Optional[int] = None
) -> None:
    """Phone and email are unique among active users"""
    if phone:
        query = db.query(User).filter(User.phone == phone, User.is_active.is_(True))
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=400, detail="User with this phone number already exists")
    if email:
        query = db.query(User).filter(User.email == email, User.is_active.is_(True))
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        if query.first():
            raise HTTPException(status_code=400, detail="User with this email already exists")


def _apply_updates(user: User, data: ProfileUpdate) -> None:
    if data.name:
        user.name = data.name.strip()
    if data.email is not None:
        user.email = data.email or None
    if data.phone:
        user.phone = data.phone


# ============================================================================
# LOGIN / REGISTRATION
# ============================================================================


@router.post("/login")
async def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_login),
):
    """Exchange phone and password for a 24 hour access token"""
    phone = data.phone.replace(" ", "").replace("-", "")
    user = (
        db.query(User)
        .filter(User.phone == phone, User.is_active.is_(True))
        .order_by(User.id.desc())
        .first()
    )

    if not user or not verify_password_bcrypt(data.password, user.password_hash):
        logger.warning(f"🔒 Failed login attempt for phone ending {phone[-4:]}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info(f"✅ User {user.id} logged in")
    return success(
        {
            "token": create_access_token(user),
            "user": {"id": user.id, "name": user.name, "phone": user.phone, "role": user.role},
        }
    )


@router.post("/register", status_code=201)
async def register(
    data: RegisterRequest,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    """Create a staff account and send the login details by email or SMS"""
    _check_contact_available(db, data.phone, data.email)

    password = data.password or generate_random_password(8)
    user = User(
        name=data.name.strip(),
        email=data.email,
        phone=data.phone,
        role=data.role or ROLE_STAFF,
        password_hash=hash_password_bcrypt(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"👤 User {user.id} registered by {current_user.id} with role {user.role}")

    delivery = await deliver_credentials(user.name, user.phone, user.email, password)
    if delivery["sent"]:
        message = f"User registered successfully. Login credentials sent by {delivery['channel']}."
    else:
        message = "User registered successfully. Please contact admin for login credentials."

    return success(
        {"user": build_staff_response(user), "credentialsSent": delivery["sent"]},
        message=message,
    )


# ============================================================================
# OWN PROFILE
# ============================================================================


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return success(build_staff_response(current_user))


@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_contact_available(db, data.phone, data.email, exclude_id=current_user.id)
    _apply_updates(current_user, data)
    db.commit()
    db.refresh(current_user)
    return success(build_staff_response(current_user), message="Profile updated successfully")


@router.put("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.confirmPassword is not None and data.confirmPassword != data.newPassword:
        raise HTTPException(status_code=400, detail="New password and confirmation do not match")
    if not verify_password_bcrypt(data.currentPassword, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    current_user.password_hash = hash_password_bcrypt(data.newPassword)
    db.commit()
    logger.info(f"🔑 User {current_user.id} changed their password")
    return success(message="Password changed successfully")


# ============================================================================
# USER ADMINISTRATION
# ============================================================================


@router.get("/users")
async def get_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    query = db.query(User)
    if search:
        term = f"%{search}%"
        query = query.filter(or_(User.name.ilike(term), User.email.ilike(term), User.phone.ilike(term)))
    if role:
        query = query.filter(User.role == role.upper())

    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return paginated([build_staff_response(u) for u in users], page, limit, total)


@router.get("/users/{user_id}")
async def get_user(
    user_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    return success(build_staff_response(_get_user_or_404(db, user_id)))


@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    user = _get_user_or_404(db, user_id)
    phone, email = data.phone, data.email
    if data.isActive and not user.is_active:
        phone, email = data.phone or user.phone, data.email or user.email
    _check_contact_available(db, phone, email, exclude_id=user.id)

    _apply_updates(user, data)
    if data.role:
        user.role = data.role
    if data.isActive is not None:
        user.is_active = data.isActive
    db.commit()
    db.refresh(user)
    return success(build_staff_response(user), message="User updated successfully")


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    """Deactivate a user, their sales history stays intact"""
    user = _get_user_or_404(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    user.is_active = False
    db.commit()
    logger.info(f"🗑️ User {user.id} deactivated by {current_user.id}")
    return success(message="User deactivated successfully")


@router.post("/users/{user_id}/reset-password")
async def reset_user_password(
    user_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    db: Session = Depends(get_db),
):
    """Generate a new password and send it to the user"""
    user = _get_user_or_404(db, user_id)
    password = generate_random_password(8)
    user.password_hash = hash_password_bcrypt(password)
    db.commit()
    logger.info(f"🔑 Password reset for user {user.id} by {current_user.id}")

    delivery = await deliver_credentials(user.name, user.phone, user.email, password, reset=True)
    return success(
        {"credentialsSent": delivery["sent"], "channel": delivery["channel"]},
        message="Password reset successfully",
    )
