"""Staff router - staff directory and performance"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, User
from ...shared.responses import success
from .schemas import StaffUpdate, build_staff_response
from .service import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


# ============================================================================
# PERFORMANCE
# ============================================================================


@router.get("/performance")
async def get_all_staff_performance(
    period: str = Query("month", pattern="^(today|week|month)$"),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: StaffService = Depends(get_staff_service),
):
    return success(service.get_all_performance(period, startDate, endDate))


@router.get("/{staff_id}/performance")
async def get_staff_performance(
    staff_id: int,
    period: str = Query("month", pattern="^(today|week|month)$"),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
):
    return success(service.get_performance(staff_id, period, startDate, endDate))


# ============================================================================
# DIRECTORY
# ============================================================================


@router.get("")
async def get_staff(
    isActive: Optional[bool] = Query(None),
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
):
    return success([build_staff_response(u) for u in service.get_staff(isActive, role, search)])


@router.get("/{staff_id}")
async def get_staff_member(
    staff_id: int,
    current_user: User = Depends(get_current_user),
    service: StaffService = Depends(get_staff_service),
):
    return success(build_staff_response(service.get_staff_member(staff_id)))


@router.put("/{staff_id}")
async def update_staff_member(
    staff_id: int,
    data: StaffUpdate,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    service: StaffService = Depends(get_staff_service),
):
    user = service.update_staff(staff_id, data)
    return success(build_staff_response(user), message="Staff member updated successfully")
