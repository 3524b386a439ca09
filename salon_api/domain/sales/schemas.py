"""Sale domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SaleServiceItem(BaseModel):
    serviceId: int
    quantity: int = Field(1, ge=1)
    isChild: bool = False
    addShampoo: bool = False


class SaleProductItem(BaseModel):
    productId: int
    quantity: int = Field(1, ge=1)


class SalePaymentItem(BaseModel):
    method: str
    amount: float = Field(..., ge=0)


class SaleCreate(BaseModel):
    """Schema for recording a sale.

    Services come either as detailed ``services`` items or as plain
    ``serviceIds`` with shampoo options per id (falling back to ``addShampoo``).
    """

    customerId: Optional[int] = None
    services: Optional[list[SaleServiceItem]] = None
    serviceIds: Optional[list[int]] = None
    serviceShampooOptions: Optional[dict[int, bool]] = None
    addShampoo: bool = False
    products: Optional[list[SaleProductItem]] = None
    staffIds: list[int] = []
    customStaffNames: list[str] = []
    paymentMethod: Optional[str] = "CASH"
    payments: Optional[list[SalePaymentItem]] = None
    notes: Optional[str] = None
    ownShampooDiscount: bool = False
    manualDiscountAmount: float = 0
    manualDiscountReason: Optional[str] = None
    manualIncrementAmount: float = 0
    manualIncrementReason: Optional[str] = None


class SaleUpdate(BaseModel):
    services: Optional[list[SaleServiceItem]] = None
    serviceIds: Optional[list[int]] = None
    serviceShampooOptions: Optional[dict[int, bool]] = None
    addShampoo: bool = False
    staffIds: Optional[list[int]] = None
    customStaffNames: Optional[list[str]] = None
    paymentMethod: Optional[str] = None
    payments: Optional[list[SalePaymentItem]] = None
    notes: Optional[str] = None
    isCompleted: Optional[bool] = None
    ownShampooDiscount: Optional[bool] = None


class SaleCustomerSummary(BaseModel):
    id: int
    fullName: str
    phone: str
    email: Optional[str] = None


class SaleServiceLine(BaseModel):
    id: int
    serviceId: int
    serviceName: str
    category: str
    quantity: int
    unitPrice: float
    totalPrice: float
    isChild: bool
    isCombined: bool
    addShampoo: bool


class SaleProductLine(BaseModel):
    id: int
    productId: int
    productName: str
    quantity: int
    unitPrice: float
    totalPrice: float


class SaleStaffEntry(BaseModel):
    id: int
    staffId: Optional[int] = None
    name: str
    isCustom: bool


class SalePaymentEntry(BaseModel):
    id: int
    paymentMethod: str
    amount: float


class SaleDiscountEntry(BaseModel):
    id: int
    discountRuleId: int
    name: str
    type: str
    discountAmount: float


class SaleResponse(BaseModel):
    id: int
    customerId: int
    customer: Optional[SaleCustomerSummary] = None
    totalAmount: float
    discountAmount: float
    finalAmount: float
    loyaltyPointsEarned: int
    paymentMethod: str
    ownShampooDiscount: bool
    birthMonthDiscount: bool
    notes: Optional[str] = None
    isCompleted: bool
    saleDate: datetime
    createdAt: datetime
    createdById: Optional[int] = None
    services: list[SaleServiceLine] = []
    products: list[SaleProductLine] = []
    staff: list[SaleStaffEntry] = []
    payments: list[SalePaymentEntry] = []
    discounts: list[SaleDiscountEntry] = []


def build_sale_response(sale, include_customer: bool = True) -> SaleResponse:
    """Shape a Sale with its loaded lines into the API response"""
    customer = sale.customer if include_customer else None
    return SaleResponse(
        id=sale.id,
        customerId=sale.customer_id,
        customer=SaleCustomerSummary(
            id=customer.id,
            fullName=customer.full_name,
            phone=customer.phone,
            email=customer.email,
        )
        if customer
        else None,
        totalAmount=sale.total_amount,
        discountAmount=sale.discount_amount,
        finalAmount=sale.final_amount,
        loyaltyPointsEarned=sale.loyalty_points_earned,
        paymentMethod=sale.payment_method,
        ownShampooDiscount=sale.own_shampoo_discount,
        birthMonthDiscount=sale.birth_month_discount,
        notes=sale.notes,
        isCompleted=sale.is_completed,
        saleDate=sale.sale_date,
        createdAt=sale.created_at,
        createdById=sale.created_by_id,
        services=[
            SaleServiceLine(
                id=line.id,
                serviceId=line.service_id,
                serviceName=line.service.name,
                category=line.service.category,
                quantity=line.quantity,
                unitPrice=line.unit_price,
                totalPrice=line.total_price,
                isChild=line.is_child,
                isCombined=line.is_combined,
                addShampoo=line.add_shampoo,
            )
            for line in sale.services
        ],
        products=[
            SaleProductLine(
                id=line.id,
                productId=line.product_id,
                productName=line.product.name,
                quantity=line.quantity,
                unitPrice=line.unit_price,
                totalPrice=line.total_price,
            )
            for line in sale.products
        ],
        staff=[
            SaleStaffEntry(
                id=link.id,
                staffId=link.staff_id,
                name=link.staff.name if link.staff else (link.custom_name or ""),
                isCustom=link.staff_id is None,
            )
            for link in sale.staff
        ],
        payments=[
            SalePaymentEntry(id=p.id, paymentMethod=p.payment_method, amount=p.amount)
            for p in sale.payments
        ],
        discounts=[
            SaleDiscountEntry(
                id=d.id,
                discountRuleId=d.discount_rule_id,
                name=d.discount_rule.name,
                type=d.discount_rule.type,
                discountAmount=d.discount_amount,
            )
            for d in sale.discounts
        ],
    )
