"""Product router - retail products and stock"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_roles
from ...database import get_db
from ...models import ROLE_ADMIN, ROLE_MANAGER, User
from ...shared.responses import success
from .schemas import ProductCreate, ProductUpdate, StockIncrease, build_product_response
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Dependency injection for ProductService"""
    return ProductService(db)


@router.get("")
async def get_products(
    isActive: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    """Products with the revenue each has brought in"""
    return success(
        [build_product_response(p, revenue) for p, revenue in service.get_products(isActive, search)]
    )


@router.get("/{product_id}")
async def get_product(
    product_id: int,
    current_user: User = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    product = service.get_product(product_id)
    return success(build_product_response(product, service.get_revenue(product_id)))


@router.post("", status_code=201)
async def create_product(
    data: ProductCreate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: ProductService = Depends(get_product_service),
):
    product = service.create_product(data)
    return success(build_product_response(product, 0), message="Product created successfully")


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    data: ProductUpdate,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: ProductService = Depends(get_product_service),
):
    product = service.update_product(product_id, data)
    return success(build_product_response(product), message="Product updated successfully")


@router.post("/{product_id}/increase-stock")
async def increase_stock(
    product_id: int,
    data: StockIncrease,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: ProductService = Depends(get_product_service),
):
    product = service.increase_stock(product_id, data.quantity)
    return success(build_product_response(product), message="Stock increased successfully")


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    current_user: User = Depends(require_roles(ROLE_ADMIN, ROLE_MANAGER)),
    service: ProductService = Depends(get_product_service),
):
    result = service.delete_product(product_id)
    return success({"deleted": result["deleted"]}, message=result["message"])
