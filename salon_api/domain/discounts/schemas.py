"""Discount rule schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import DISCOUNT_TYPES


def _check_type(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    discount_type = v.strip().upper()
    if discount_type not in DISCOUNT_TYPES:
        raise ValueError(f"Type must be one of: {', '.join(DISCOUNT_TYPES)}")
    return discount_type


class DiscountRuleCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: str
    value: float = Field(..., ge=0)
    isPercentage: bool = True
    description: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    minAmount: Optional[float] = Field(None, ge=0)
    maxDiscount: Optional[float] = Field(None, ge=0)
    applyToAllServices: bool = False
    serviceIds: list[int] = []

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _check_type(v)


class DiscountRuleUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    value: Optional[float] = Field(None, ge=0)
    isPercentage: Optional[bool] = None
    description: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    minAmount: Optional[float] = Field(None, ge=0)
    maxDiscount: Optional[float] = Field(None, ge=0)
    applyToAllServices: Optional[bool] = None
    serviceIds: Optional[list[int]] = None
    isActive: Optional[bool] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _check_type(v)


class DiscountNotify(BaseModel):
    customerIds: list[int] = []
    message: str = ""


class RuleService(BaseModel):
    id: int
    name: str


class DiscountRuleResponse(BaseModel):
    id: int
    name: str
    type: str
    value: float
    isPercentage: bool
    description: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    minAmount: Optional[float] = None
    maxDiscount: Optional[float] = None
    applyToAllServices: bool
    isActive: bool
    createdAt: datetime
    services: list[RuleService] = []


def build_discount_response(rule) -> DiscountRuleResponse:
    return DiscountRuleResponse(
        id=rule.id,
        name=rule.name,
        type=rule.type,
        value=rule.value,
        isPercentage=rule.is_percentage,
        description=rule.description,
        startDate=rule.start_date,
        endDate=rule.end_date,
        minAmount=rule.min_amount,
        maxDiscount=rule.max_discount,
        applyToAllServices=rule.apply_to_all_services,
        isActive=rule.is_active,
        createdAt=rule.created_at,
        services=[RuleService(id=s.id, name=s.name) for s in rule.services],
    )
