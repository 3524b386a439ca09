"""Sale repository - Database operations for sales"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, selectinload

from ...models import (
    Customer,
    CustomerDiscount,
    DiscountRule,
    Product,
    Sale,
    SaleDiscount,
    SaleProduct,
    SaleService,
    SaleStaff,
    Service,
)

SALE_LOAD_OPTIONS = (
    selectinload(Sale.customer),
    selectinload(Sale.services).selectinload(SaleService.service),
    selectinload(Sale.products).selectinload(SaleProduct.product),
    selectinload(Sale.staff).selectinload(SaleStaff.staff),
    selectinload(Sale.payments),
    selectinload(Sale.discounts).selectinload(SaleDiscount.discount_rule),
)


class SaleRepository:
    """Repository for sale database operations"""

    @staticmethod
    def base_query(db: Session) -> Query:
        return db.query(Sale).options(*SALE_LOAD_OPTIONS)

    @staticmethod
    def get_sale_by_id(db: Session, sale_id: int) -> Optional[Sale]:
        return SaleRepository.base_query(db).filter(Sale.id == sale_id).first()

    @staticmethod
    def apply_filters(
        query: Query,
        customer_id: Optional[int] = None,
        staff_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        search: Optional[str] = None,
        visible_to_staff_id: Optional[int] = None,
    ) -> Query:
        """Filter a Sale query. ``end`` is exclusive."""
        if customer_id:
            query = query.filter(Sale.customer_id == customer_id)
        if staff_id:
            query = query.filter(Sale.staff.any(SaleStaff.staff_id == staff_id))
        if start:
            query = query.filter(Sale.sale_date >= start)
        if end:
            query = query.filter(Sale.sale_date < end)
        if search:
            query = query.filter(
                Sale.customer.has(Customer.full_name.ilike(f"%{search}%"))
            )
        if visible_to_staff_id:
            # Stylists only see sales they rang up or worked on
            query = query.filter(
                or_(
                    Sale.created_by_id == visible_to_staff_id,
                    Sale.staff.any(SaleStaff.staff_id == visible_to_staff_id),
                )
            )
        return query

    @staticmethod
    def list_sales(db: Session, page: int, limit: int, **filters) -> tuple[list[Sale], int]:
        query = SaleRepository.apply_filters(SaleRepository.base_query(db), **filters)
        total = query.order_by(None).count()
        sales = (
            query.order_by(Sale.sale_date.desc(), Sale.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return sales, total

    @staticmethod
    def summarize(db: Session, **filters) -> tuple[int, float, float]:
        """(count, revenue, discounts) over the filtered sales"""
        query = SaleRepository.apply_filters(
            db.query(
                func.count(Sale.id),
                func.coalesce(func.sum(Sale.final_amount), 0),
                func.coalesce(func.sum(Sale.discount_amount), 0),
            ),
            **filters,
        )
        count, revenue, discounts = query.one()
        return count or 0, float(revenue or 0), float(discounts or 0)

    @staticmethod
    def get_sales_between(db: Session, start: datetime, end: datetime) -> list[Sale]:
        return (
            db.query(Sale)
            .options(selectinload(Sale.payments))
            .filter(Sale.sale_date >= start, Sale.sale_date < end)
            .all()
        )

    # ------------------------------------------------------------------
    # Lookups used while building a sale
    # ------------------------------------------------------------------

    @staticmethod
    def get_customer(db: Session, customer_id: int) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def get_active_services(db: Session, service_ids: list[int]) -> list[Service]:
        if not service_ids:
            return []
        return (
            db.query(Service)
            .filter(Service.id.in_(service_ids), Service.is_active.is_(True))
            .all()
        )

    @staticmethod
    def get_active_products(db: Session, product_ids: list[int]) -> list[Product]:
        if not product_ids:
            return []
        return (
            db.query(Product)
            .filter(Product.id.in_(product_ids), Product.is_active.is_(True))
            .all()
        )

    @staticmethod
    def get_active_rules(db: Session) -> list[DiscountRule]:
        return (
            db.query(DiscountRule)
            .options(selectinload(DiscountRule.services))
            .filter(DiscountRule.is_active.is_(True))
            .all()
        )

    @staticmethod
    def get_rule_by_type(db: Session, discount_type: str) -> Optional[DiscountRule]:
        return (
            db.query(DiscountRule)
            .filter(DiscountRule.type == discount_type, DiscountRule.is_active.is_(True))
            .order_by(DiscountRule.id)
            .first()
        )

    @staticmethod
    def get_rule_by_name(db: Session, name: str) -> Optional[DiscountRule]:
        return db.query(DiscountRule).filter(DiscountRule.name == name).first()

    @staticmethod
    def birthday_discount_used_since(
        db: Session, customer_id: int, since: datetime, exclude_sale_id: Optional[int] = None
    ) -> bool:
        query = (
            db.query(CustomerDiscount)
            .join(DiscountRule, CustomerDiscount.discount_rule_id == DiscountRule.id)
            .filter(
                CustomerDiscount.customer_id == customer_id,
                DiscountRule.type == "BIRTHDAY_MONTH",
                CustomerDiscount.used_at >= since,
            )
        )
        if exclude_sale_id:
            query = query.filter(
                or_(CustomerDiscount.sale_id.is_(None), CustomerDiscount.sale_id != exclude_sale_id)
            )
        return query.first() is not None

    @staticmethod
    def delete_sale(db: Session, sale: Sale) -> None:
        db.delete(sale)
        db.commit()
