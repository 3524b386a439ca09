"""Customer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_phone


class CustomerBase(BaseModel):
    @field_validator("phone", check_fields=False)
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email", check_fields=False)
    @classmethod
    def validate_email(cls, v):
        if v:
            return validate_email(v)
        return None

    @field_validator("gender", check_fields=False)
    @classmethod
    def normalize_gender(cls, v):
        if v:
            return v.strip().upper()
        return v


class CustomerCreate(CustomerBase):
    """Schema for registering a new customer"""

    fullName: str = Field(..., min_length=1)
    gender: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    district: str = Field(..., min_length=1)
    province: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: Optional[str] = None
    birthDay: int = Field(..., ge=1, le=31)
    birthMonth: int = Field(..., ge=1, le=12)
    birthYear: Optional[int] = Field(None, ge=1900)


class CustomerUpdate(CustomerBase):
    fullName: Optional[str] = None
    gender: Optional[str] = None
    location: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    birthDay: Optional[int] = Field(None, ge=1, le=31)
    birthMonth: Optional[int] = Field(None, ge=1, le=12)
    birthYear: Optional[int] = Field(None, ge=1900)
    isActive: Optional[bool] = None


class RecentSale(BaseModel):
    id: int
    finalAmount: float
    saleDate: datetime


class DiscountUsage(BaseModel):
    ruleName: str
    type: str
    discountAmount: float
    usedAt: datetime


class CustomerResponse(BaseModel):
    """Schema for customer response"""

    id: int
    fullName: str
    gender: str
    location: str
    district: str
    province: str
    phone: str
    email: Optional[str] = None
    birthDay: int
    birthMonth: int
    birthYear: Optional[int] = None
    saleCount: int
    loyaltyPoints: int
    totalSpent: float
    lastSale: Optional[datetime] = None
    isActive: bool
    createdAt: datetime
    totalVisits: Optional[int] = None
    recentSales: Optional[list[RecentSale]] = None
    discounts: Optional[list[DiscountUsage]] = None


def build_customer_response(customer, recent_sales: Optional[int] = None) -> CustomerResponse:
    """Shape a Customer row; ``recent_sales`` adds that many of the latest sales and the discount history"""
    recent = usage = None
    if recent_sales:
        recent = [
            RecentSale(id=s.id, finalAmount=s.final_amount, saleDate=s.sale_date)
            for s in customer.sales[:recent_sales]
        ]
        usage = [
            DiscountUsage(
                ruleName=d.discount_rule.name,
                type=d.discount_rule.type,
                discountAmount=d.discount_amount,
                usedAt=d.used_at,
            )
            for d in sorted(customer.discounts, key=lambda d: d.used_at, reverse=True)
        ]
    return CustomerResponse(
        id=customer.id,
        fullName=customer.full_name,
        gender=customer.gender,
        location=customer.location,
        district=customer.district,
        province=customer.province,
        phone=customer.phone,
        email=customer.email,
        birthDay=customer.birth_day,
        birthMonth=customer.birth_month,
        birthYear=customer.birth_year,
        saleCount=customer.sale_count,
        loyaltyPoints=customer.loyalty_points,
        totalSpent=customer.total_spent,
        lastSale=customer.last_sale,
        isActive=customer.is_active,
        createdAt=customer.created_at,
        totalVisits=customer.sale_count if recent_sales else None,
        recentSales=recent,
        discounts=usage,
    )
