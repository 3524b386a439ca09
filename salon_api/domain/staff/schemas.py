"""Staff schemas - Pydantic models for staff accounts"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import USER_ROLES
from ...shared.validators import validate_email, validate_phone


def check_role(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    role = v.strip().upper()
    if role not in USER_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
    return role


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    isActive: Optional[bool] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v:
            return validate_email(v)
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return check_role(v)


class StaffResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: str
    role: str
    isActive: bool
    createdAt: datetime


def build_staff_response(user) -> StaffResponse:
    return StaffResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        role=user.role,
        isActive=user.is_active,
        createdAt=user.created_at,
    )
