"""Dashboard router"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, User
from ...shared.responses import success
from .service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db)


@router.get("/stats")
async def get_dashboard_stats(
    period: str = Query("month", pattern="^(week|month|year)$"),
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: DashboardService = Depends(get_dashboard_service),
):
    return success(service.get_stats(period))


@router.get("/analytics")
async def get_revenue_analytics(
    period: str = Query("month", pattern="^(week|month|quarter|year)$"),
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Revenue by service category and busiest hours"""
    return success(service.get_analytics(period))
