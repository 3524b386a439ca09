"""Discount router - discount rules and customer campaigns"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, User
from ...shared.responses import success
from .schemas import DiscountNotify, DiscountRuleCreate, DiscountRuleUpdate, build_discount_response
from .service import DiscountService

router = APIRouter(prefix="/discounts", tags=["Discounts"])


def get_discount_service(db: Session = Depends(get_db)) -> DiscountService:
    """Dependency injection for DiscountService"""
    return DiscountService(db)


@router.get("")
async def get_discount_rules(
    current_user: User = Depends(get_current_user),
    service: DiscountService = Depends(get_discount_service),
):
    return success([build_discount_response(rule) for rule in service.get_rules()])


@router.post("", status_code=201)
async def create_discount_rule(
    data: DiscountRuleCreate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: DiscountService = Depends(get_discount_service),
):
    rule = service.create_rule(data)
    return success(build_discount_response(rule), message="Discount rule created successfully")


@router.put("/{rule_id}")
async def update_discount_rule(
    rule_id: int,
    data: DiscountRuleUpdate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: DiscountService = Depends(get_discount_service),
):
    rule = service.update_rule(rule_id, data)
    return success(build_discount_response(rule), message="Discount rule updated successfully")


@router.delete("/{rule_id}", status_code=204)
async def delete_discount_rule(
    rule_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: DiscountService = Depends(get_discount_service),
):
    service.delete_rule(rule_id)
    return Response(status_code=204)


@router.post("/{rule_id}/notify")
async def notify_customers(
    rule_id: int,
    data: DiscountNotify,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: DiscountService = Depends(get_discount_service),
):
    """SMS the selected customers about a discount"""
    result = await service.notify_customers(rule_id, data.customerIds, data.message)
    return success(
        {"stats": result["stats"]},
        message=f"Processed {result['processed']} customers",
    )
