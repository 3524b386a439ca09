"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy import extract, func, or_
from sqlalchemy.orm import Session, selectinload

from ...models import Customer, DiscountRule, Sale


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def get_customers(
        db: Session,
        page: int,
        limit: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> tuple[list[Customer], int]:
        query = db.query(Customer).options(selectinload(Customer.sales))

        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(
                    Customer.full_name.ilike(term),
                    Customer.phone.ilike(term),
                    Customer.email.ilike(term),
                )
            )
        if is_active is not None:
            query = query.filter(Customer.is_active.is_(is_active))

        total = query.order_by(None).count()
        customers = (
            query.order_by(Customer.created_at.desc(), Customer.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return customers, total

    @staticmethod
    def get_customer_by_id(db: Session, customer_id: int) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def get_active_by_phone(
        db: Session, phone: str, exclude_id: Optional[int] = None
    ) -> Optional[Customer]:
        """Active customer using this phone number (uniqueness check)"""
        query = db.query(Customer).filter(Customer.phone == phone, Customer.is_active.is_(True))
        if exclude_id:
            query = query.filter(Customer.id != exclude_id)
        return query.first()

    @staticmethod
    def create_customer(db: Session, **customer_data) -> Customer:
        customer = Customer(**customer_data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        """Update a customer with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(customer, key):
                setattr(customer, key, value)

        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def get_top_customers(db: Session, limit: int) -> list[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.is_active.is_(True))
            .order_by(Customer.sale_count.desc(), Customer.total_spent.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_monthly_visits(db: Session, customer_id: int, year: int) -> dict[int, int]:
        """Sale count per calendar month of ``year``"""
        month = extract("month", Sale.sale_date)
        rows = (
            db.query(month, func.count(Sale.id))
            .filter(Sale.customer_id == customer_id, extract("year", Sale.sale_date) == year)
            .group_by(month)
            .all()
        )
        return {int(m): count for m, count in rows}

    @staticmethod
    def get_current_rules(db: Session) -> list[DiscountRule]:
        return db.query(DiscountRule).filter(DiscountRule.is_active.is_(True)).all()
