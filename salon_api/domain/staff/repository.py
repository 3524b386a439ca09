"""Staff repository - Database operations for staff users and their sales"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from ...models import Sale, SaleService, SaleStaff, User


class StaffRepository:
    @staticmethod
    def get_staff(
        db: Session,
        is_active: Optional[bool] = None,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[User]:
        query = db.query(User)
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))
        if role:
            query = query.filter(User.role == role.upper())
        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(User.name.ilike(term), User.email.ilike(term), User.phone.ilike(term))
            )
        return query.order_by(User.name).all()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_active_by_phone(db: Session, phone: str, exclude_id: Optional[int] = None) -> Optional[User]:
        query = db.query(User).filter(User.phone == phone, User.is_active.is_(True))
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first()

    @staticmethod
    def get_active_by_email(db: Session, email: str, exclude_id: Optional[int] = None) -> Optional[User]:
        query = db.query(User).filter(User.email == email, User.is_active.is_(True))
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first()

    @staticmethod
    def update_user(db: Session, user: User, **updates) -> User:
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_staff_sales(db: Session, staff_id: int, start: datetime, end: datetime) -> list[Sale]:
        """Sales the staff member worked on inside [start, end)"""
        return (
            db.query(Sale)
            .options(
                selectinload(Sale.customer),
                selectinload(Sale.services).selectinload(SaleService.service),
            )
            .filter(
                Sale.staff.any(SaleStaff.staff_id == staff_id),
                Sale.sale_date >= start,
                Sale.sale_date < end,
            )
            .order_by(Sale.sale_date.desc())
            .all()
        )
