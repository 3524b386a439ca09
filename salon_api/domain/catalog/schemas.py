"""Catalog schemas - salon services on the price list"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import SERVICE_CATEGORIES


def _check_category(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    category = v.strip().upper()
    if category not in SERVICE_CATEGORIES:
        raise ValueError(f"Category must be one of: {', '.join(SERVICE_CATEGORIES)}")
    return category


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str
    description: str = Field(..., min_length=1)
    singlePrice: float = Field(..., ge=0)
    combinedPrice: Optional[float] = Field(None, ge=0)
    childPrice: Optional[float] = Field(None, ge=0)
    childCombinedPrice: Optional[float] = Field(None, ge=0)
    duration: int = Field(..., gt=0)
    isComboEligible: bool = False

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    singlePrice: Optional[float] = Field(None, ge=0)
    combinedPrice: Optional[float] = Field(None, ge=0)
    childPrice: Optional[float] = Field(None, ge=0)
    childCombinedPrice: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, gt=0)
    isComboEligible: Optional[bool] = None
    isActive: Optional[bool] = None

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)


class ServiceResponse(BaseModel):
    id: int
    name: str
    category: str
    description: str
    singlePrice: float
    combinedPrice: Optional[float] = None
    childPrice: Optional[float] = None
    childCombinedPrice: Optional[float] = None
    duration: int
    isComboEligible: bool
    isActive: bool
    createdAt: datetime


def build_service_response(service) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        name=service.name,
        category=service.category,
        description=service.description,
        singlePrice=service.single_price,
        combinedPrice=service.combined_price,
        childPrice=service.child_price,
        childCombinedPrice=service.child_combined_price,
        duration=service.duration,
        isComboEligible=service.is_combo_eligible,
        isActive=service.is_active,
        createdAt=service.created_at,
    )
