"""Customer router - FastAPI endpoints for customer operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, User
from ...services.whatsapp_service import send_birthday_discount
from ...shared.responses import paginated, success
from .schemas import CustomerCreate, CustomerUpdate, build_customer_response
from .service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


# ============================================================================
# REPORTS
# ============================================================================


@router.get("/top")
async def get_top_customers(
    limit: int = Query(5, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    """Active customers with the most visits"""
    return success([build_customer_response(c) for c in service.get_top_customers(limit)])


@router.get("/{customer_id}/stats")
async def get_customer_stats(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    return success(service.get_customer_stats(customer_id))


@router.get("/{customer_id}/discount-eligibility")
async def get_discount_eligibility(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    return success(service.get_discount_eligibility(customer_id))


@router.post("/{customer_id}/birthday-message")
async def send_birthday_message(
    customer_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: CustomerService = Depends(get_customer_service),
):
    """Send the birthday discount greeting over WhatsApp"""
    customer = service.get_customer(customer_id)
    sent = await send_birthday_discount(customer.phone, customer.full_name.split(" ")[0])
    return success({"sent": sent})


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("")
async def get_customers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    isActive: Optional[bool] = Query(None),
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    """List customers with their latest three sales"""
    customers, total = service.get_customers(page, limit, search, isActive)
    return paginated(
        [build_customer_response(c, recent_sales=3) for c in customers], page, limit, total
    )


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.get_customer(customer_id)
    return success(build_customer_response(customer, recent_sales=10))


@router.post("", status_code=201)
async def create_customer(
    data: CustomerCreate,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.create_customer(data)
    return success(build_customer_response(customer), message="Customer created successfully")


@router.put("/{customer_id}")
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.update_customer(customer_id, data)
    return success(build_customer_response(customer), message="Customer updated successfully")


@router.patch("/{customer_id}/toggle-active")
async def toggle_customer_active(
    customer_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: CustomerService = Depends(get_customer_service),
):
    customer = service.toggle_active(customer_id)
    state = "activated" if customer.is_active else "deactivated"
    return success(build_customer_response(customer), message=f"Customer {state} successfully")


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: CustomerService = Depends(get_customer_service),
):
    result = service.delete_customer(customer_id)
    return success(message=result["message"])
