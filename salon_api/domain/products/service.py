"""Product service - stock and catalog of retail products"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository()

    def get_products(
        self, is_active: Optional[bool] = None, search: Optional[str] = None
    ) -> list[tuple[Product, float]]:
        return self.repo.get_products_with_revenue(self.db, is_active, search)

    def get_product(self, product_id: int) -> Product:
        product = self.repo.get_product_by_id(self.db, product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return product

    def get_revenue(self, product_id: int) -> float:
        return self.repo.get_revenue(self.db, product_id)

    def create_product(self, data: ProductCreate) -> Product:
        name = data.name.strip()
        if self.repo.get_active_by_name(self.db, name):
            raise HTTPException(status_code=400, detail="Product with this name already exists")

        return self.repo.create_product(
            self.db,
            name=name,
            description=data.description,
            price=data.price,
            quantity=data.quantity,
        )

    def update_product(self, product_id: int, data: ProductUpdate) -> Product:
        product = self.get_product(product_id)
        name = data.name.strip() if data.name else None

        stays_active = data.isActive or (data.isActive is None and product.is_active)
        if stays_active and self.repo.get_active_by_name(
            self.db, name or product.name, exclude_id=product.id
        ):
            raise HTTPException(status_code=400, detail="Product with this name already exists")

        return self.repo.update_product(
            self.db,
            product,
            name=name,
            description=data.description,
            price=data.price,
            quantity=data.quantity,
            is_active=data.isActive,
        )

    def increase_stock(self, product_id: int, quantity: int) -> Product:
        if quantity is None or quantity <= 0:
            raise HTTPException(status_code=400, detail="Quantity must be greater than 0")

        product = self.get_product(product_id)
        product.quantity += quantity
        self.db.commit()
        self.db.refresh(product)
        logger.info(f"📦 Stock for '{product.name}' increased by {quantity} to {product.quantity}")
        return product

    def delete_product(self, product_id: int) -> dict:
        """Delete a product that was never sold, otherwise deactivate it"""
        product = self.get_product(product_id)

        if self.repo.has_sales(self.db, product.id):
            self.repo.update_product(self.db, product, is_active=False)
            return {
                "deleted": False,
                "message": "Product has sales records. Product has been deactivated instead of deleted.",
            }

        self.repo.delete_product(self.db, product)
        return {"deleted": True, "message": "Product deleted successfully"}
