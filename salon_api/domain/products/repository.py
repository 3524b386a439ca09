"""Product repository - Database operations for retail products"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Product, SaleProduct


class ProductRepository:
    @staticmethod
    def get_products_with_revenue(
        db: Session, is_active: Optional[bool] = None, search: Optional[str] = None
    ) -> list[tuple[Product, float]]:
        """Products with the summed line totals of everything sold"""
        revenue = func.coalesce(func.sum(SaleProduct.total_price), 0)
        query = (
            db.query(Product, revenue)
            .outerjoin(SaleProduct, SaleProduct.product_id == Product.id)
            .group_by(Product.id)
        )
        if is_active is not None:
            query = query.filter(Product.is_active.is_(is_active))
        if search:
            query = query.filter(Product.name.ilike(f"%{search}%"))
        return [(product, float(total or 0)) for product, total in query.order_by(Product.name).all()]

    @staticmethod
    def get_product_by_id(db: Session, product_id: int) -> Optional[Product]:
        return db.query(Product).filter(Product.id == product_id).first()

    @staticmethod
    def get_revenue(db: Session, product_id: int) -> float:
        total = (
            db.query(func.coalesce(func.sum(SaleProduct.total_price), 0))
            .filter(SaleProduct.product_id == product_id)
            .scalar()
        )
        return float(total or 0)

    @staticmethod
    def has_sales(db: Session, product_id: int) -> bool:
        return db.query(SaleProduct.id).filter(SaleProduct.product_id == product_id).first() is not None

    @staticmethod
    def get_active_by_name(db: Session, name: str, exclude_id: Optional[int] = None) -> Optional[Product]:
        query = db.query(Product).filter(
            func.lower(Product.name) == name.lower(), Product.is_active.is_(True)
        )
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        return query.first()

    @staticmethod
    def create_product(db: Session, **product_data) -> Product:
        product = Product(**product_data)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def update_product(db: Session, product: Product, **updates) -> Product:
        for key, value in updates.items():
            if value is not None and hasattr(product, key):
                setattr(product, key, value)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete_product(db: Session, product: Product) -> None:
        db.delete(product)
        db.commit()
