"""Product schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    quantity: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    isActive: Optional[bool] = None


class StockIncrease(BaseModel):
    quantity: int


class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    quantity: int
    isActive: bool
    createdAt: datetime
    totalRevenue: Optional[float] = None


def build_product_response(product, total_revenue: Optional[float] = None) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        quantity=product.quantity,
        isActive=product.is_active,
        createdAt=product.created_at,
        totalRevenue=total_revenue,
    )
