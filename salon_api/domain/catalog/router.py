"""Catalog router - salon services endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, User
from ...shared.responses import success
from .schemas import ServiceCreate, ServiceUpdate, build_service_response
from .service import CatalogService

router = APIRouter(prefix="/services", tags=["Services"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


@router.get("")
async def get_services(
    category: Optional[str] = Query(None),
    isActive: Optional[bool] = Query(True),
    current_user: User = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    """Price list grouped by category, then name"""
    return success([build_service_response(s) for s in service.get_services(category, isActive)])


@router.get("/{service_id}")
async def get_service(
    service_id: int,
    current_user: User = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return success(build_service_response(service.get_service(service_id)))


@router.post("", status_code=201)
async def create_service(
    data: ServiceCreate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: CatalogService = Depends(get_catalog_service),
):
    created = service.create_service(data)
    return success(build_service_response(created), message="Service created successfully")


@router.put("/{service_id}")
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: CatalogService = Depends(get_catalog_service),
):
    updated = service.update_service(service_id, data)
    return success(build_service_response(updated), message="Service updated successfully")


@router.delete("/{service_id}")
async def delete_service(
    service_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
    service: CatalogService = Depends(get_catalog_service),
):
    result = service.delete_service(service_id)
    return success(message=result["message"])
