"""Sale router - FastAPI endpoints for sales"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, User
from ...services.notification_service import send_sale_alert
from ...shared.responses import paginated, success
from .schemas import SaleCreate, SaleUpdate, build_sale_response
from .service import SalesService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["Sales"])


def get_sales_service(db: Session = Depends(get_db)) -> SalesService:
    """Dependency injection for SalesService"""
    return SalesService(db)


# ============================================================================
# REPORTS
# ============================================================================


@router.get("/summary")
async def get_sales_summary(
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: SalesService = Depends(get_sales_service),
):
    """Totals over the selected days (stylists see their own sales only)"""
    return success(service.get_summary(current_user, startDate, endDate))


@router.get("/payment-summary")
async def get_payment_summary(
    date: Optional[str] = Query(None, description="YYYY-MM-DD, defaults to today (UTC)"),
    current_user: User = Depends(get_current_user),
    service: SalesService = Depends(get_sales_service),
):
    """Daily takings per payment method"""
    return success(service.get_payment_summary(date))


@router.get("/customer/{customer_id}")
async def get_customer_sales(
    customer_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: SalesService = Depends(get_sales_service),
):
    sales, total = service.get_customer_sales(customer_id, page, limit)
    return paginated([build_sale_response(s) for s in sales], page, limit, total)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("")
async def get_sales(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    customerId: Optional[int] = Query(None),
    staffId: Optional[int] = Query(None),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: SalesService = Depends(get_sales_service),
):
    """List sales, newest first"""
    sales, total = service.list_sales(
        current_user,
        page=page,
        limit=limit,
        customer_id=customerId,
        staff_id=staffId,
        start_date=startDate,
        end_date=endDate,
        search=search,
    )
    return paginated([build_sale_response(s) for s in sales], page, limit, total)


@router.get("/{sale_id}")
async def get_sale(
    sale_id: int,
    current_user: User = Depends(get_current_user),
    service: SalesService = Depends(get_sales_service),
):
    return success(build_sale_response(service.get_sale(sale_id, current_user)))


@router.post("", status_code=201)
async def create_sale(
    data: SaleCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: SalesService = Depends(get_sales_service),
):
    """Record a sale and send the customer a WhatsApp receipt"""
    sale = service.create_sale(data, current_user)
    customer = sale.customer
    background_tasks.add_task(
        send_sale_alert,
        customer_name=customer.full_name,
        phone=customer.phone,
        amount=sale.final_amount,
        total_spent=customer.total_spent,
        visit_count=customer.sale_count,
    )
    return success(build_sale_response(sale), message="Sale created successfully")


@router.put("/{sale_id}")
async def update_sale(
    sale_id: int,
    data: SaleUpdate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: SalesService = Depends(get_sales_service),
):
    sale = service.update_sale(sale_id, data, current_user)
    return success(build_sale_response(sale), message="Sale updated successfully")


@router.patch("/{sale_id}/complete")
async def complete_sale(
    sale_id: int,
    current_user: User = Depends(get_current_user),
    service: SalesService = Depends(get_sales_service),
):
    sale = service.complete_sale(sale_id, current_user)
    return success(build_sale_response(sale), message="Sale marked as completed")


@router.delete("/{sale_id}")
async def delete_sale(
    sale_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: SalesService = Depends(get_sales_service),
):
    result = service.delete_sale(sale_id)
    return success(message=result["message"])
