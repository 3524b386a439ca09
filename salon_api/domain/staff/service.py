"""Staff service - staff directory and performance reports"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User, utcnow
from ..sales.service import day_range
from . import performance
from .repository import StaffRepository
from .schemas import StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = StaffRepository()

    def get_staff(
        self, is_active: Optional[bool] = None, role: Optional[str] = None, search: Optional[str] = None
    ) -> list[User]:
        return self.repo.get_staff(self.db, is_active, role, search)

    def get_staff_member(self, staff_id: int) -> User:
        user = self.repo.get_user_by_id(self.db, staff_id)
        if not user:
            raise HTTPException(status_code=404, detail="Staff member not found")
        return user

    def update_staff(self, staff_id: int, data: StaffUpdate) -> User:
        user = self.get_staff_member(staff_id)

        phone, email = data.phone, data.email
        if data.isActive and not user.is_active:
            # Reactivating must not create a second active user with the same phone or email
            phone, email = data.phone or user.phone, data.email or user.email

        if phone and self.repo.get_active_by_phone(self.db, phone, exclude_id=user.id):
            raise HTTPException(status_code=400, detail="Phone number already in use by another user")
        if email and self.repo.get_active_by_email(self.db, email, exclude_id=user.id):
            raise HTTPException(status_code=400, detail="Email already in use by another user")

        return self.repo.update_user(
            self.db,
            user,
            name=data.name.strip() if data.name else None,
            email=data.email,
            phone=data.phone,
            role=data.role,
            is_active=data.isActive,
        )

    def _window(self, period: Optional[str], start_date: Optional[str], end_date: Optional[str]):
        start = end = None
        if start_date and end_date:
            start, end = day_range(start_date, end_date)
        return performance.resolve_period(period, utcnow(), start, end)

    def get_performance(
        self,
        staff_id: int,
        period: Optional[str] = "month",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> dict:
        """Sales, revenue, customers and service mix for one staff member"""
        user = self.get_staff_member(staff_id)
        start, end = self._window(period, start_date, end_date)
        sales = self.repo.get_staff_sales(self.db, user.id, start, end)

        return {
            "staff": {"id": user.id, "name": user.name, "role": user.role},
            "period": {"start": start, "end": end},
            "metrics": {
                **performance.summarize_sales(sales),
                "serviceCategories": performance.service_category_breakdown(sales),
            },
            "sales": [
                {
                    "id": sale.id,
                    "customerName": sale.customer.full_name if sale.customer else None,
                    "finalAmount": sale.final_amount,
                    "saleDate": sale.sale_date,
                    "services": [line.service.name for line in sale.services],
                }
                for sale in sales
            ],
            "performanceChart": performance.daily_chart(sales),
        }

    def get_all_performance(
        self,
        period: Optional[str] = "month",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> list[dict]:
        """Headline numbers for every active staff member, best revenue first"""
        start, end = self._window(period, start_date, end_date)
        results = []
        for user in self.repo.get_staff(self.db, is_active=True):
            sales = self.repo.get_staff_sales(self.db, user.id, start, end)
            results.append(
                {
                    "staffId": user.id,
                    "name": user.name,
                    "role": user.role,
                    **performance.summarize_sales(sales),
                }
            )
        results.sort(key=lambda row: row["totalRevenue"], reverse=True)
        return results
