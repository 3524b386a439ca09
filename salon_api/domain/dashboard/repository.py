"""Dashboard repository - counts and aggregates for the admin dashboard"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Customer, Sale, SaleService, Service, User


class DashboardRepository:
    @staticmethod
    def count_active_customers(db: Session) -> int:
        return db.query(Customer).filter(Customer.is_active.is_(True)).count()

    @staticmethod
    def count_new_customers(db: Session, start: datetime, end: datetime) -> int:
        return (
            db.query(Customer)
            .filter(Customer.is_active.is_(True), Customer.created_at >= start, Customer.created_at < end)
            .count()
        )

    @staticmethod
    def count_returning_customers(db: Session) -> int:
        return (
            db.query(Customer)
            .filter(Customer.is_active.is_(True), Customer.sale_count > 1)
            .count()
        )

    @staticmethod
    def count_active_services(db: Session) -> int:
        return db.query(Service).filter(Service.is_active.is_(True)).count()

    @staticmethod
    def count_active_staff(db: Session) -> int:
        return db.query(User).filter(User.is_active.is_(True)).count()

    @staticmethod
    def count_sales(db: Session, since: Optional[datetime] = None) -> int:
        query = db.query(Sale)
        if since is not None:
            query = query.filter(Sale.sale_date >= since)
        return query.count()

    @staticmethod
    def revenue_totals(db: Session) -> tuple[float, float]:
        """(sum, average) of final amounts over all sales"""
        total, average = db.query(
            func.coalesce(func.sum(Sale.final_amount), 0),
            func.coalesce(func.avg(Sale.final_amount), 0),
        ).one()
        return float(total or 0), float(average or 0)

    @staticmethod
    def top_services(db: Session, since: datetime, limit: int = 5) -> list[dict]:
        revenue = func.coalesce(func.sum(SaleService.total_price), 0)
        rows = (
            db.query(
                Service.name,
                Service.category,
                func.coalesce(func.sum(SaleService.quantity), 0),
                revenue,
            )
            .join(SaleService, SaleService.service_id == Service.id)
            .join(Sale, Sale.id == SaleService.sale_id)
            .filter(Sale.sale_date >= since)
            .group_by(Service.id, Service.name, Service.category)
            .order_by(revenue.desc())
            .limit(limit)
            .all()
        )
        return [
            {"name": name, "category": category, "count": int(count), "revenue": float(total)}
            for name, category, count, total in rows
        ]

    @staticmethod
    def sale_amounts_since(db: Session, since: datetime) -> list[tuple[datetime, float]]:
        return [
            (sale_date, float(amount or 0))
            for sale_date, amount in db.query(Sale.sale_date, Sale.final_amount)
            .filter(Sale.sale_date >= since)
            .all()
        ]

    @staticmethod
    def service_lines_since(db: Session, since: datetime) -> list[tuple[str, int, float, int]]:
        return (
            db.query(Service.category, Service.id, SaleService.total_price, SaleService.quantity)
            .join(SaleService, SaleService.service_id == Service.id)
            .join(Sale, Sale.id == SaleService.sale_id)
            .filter(Sale.sale_date >= since)
            .all()
        )

    @staticmethod
    def recent_customers(db: Session, limit: int = 5) -> list[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.is_active.is_(True))
            .order_by(Customer.last_sale.desc().nullslast(), Customer.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def sixth_sale_candidates(db: Session, sale_counts: tuple, limit: int = 5) -> list[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.is_active.is_(True), Customer.sale_count.in_(sale_counts))
            .order_by(Customer.last_sale.desc().nullslast())
            .limit(limit)
            .all()
        )

    @staticmethod
    def active_customers(db: Session) -> list[Customer]:
        return db.query(Customer).filter(Customer.is_active.is_(True)).all()
