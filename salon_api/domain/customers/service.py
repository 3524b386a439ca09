"""Customer service - Business logic for customer operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import BUILTIN_DISCOUNT_TYPES, Customer, utcnow
from ..sales.pricing import is_birthday_month, is_sixth_visit, rule_is_current
from ..sales.repository import SaleRepository
from .repository import CustomerRepository
from .schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def get_customers(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> tuple[list[Customer], int]:
        return self.repo.get_customers(self.db, page, limit, search, is_active)

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_customer_by_id(self.db, customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def _ensure_phone_available(self, phone: str, exclude_id: Optional[int] = None) -> None:
        if self.repo.get_active_by_phone(self.db, phone, exclude_id):
            raise HTTPException(status_code=400, detail="Customer with this phone number already exists")

    def create_customer(self, data: CustomerCreate) -> Customer:
        logger.info(f"📥 Creating customer {data.fullName}")
        self._ensure_phone_available(data.phone)

        return self.repo.create_customer(
            self.db,
            full_name=data.fullName.strip(),
            gender=data.gender,
            location=data.location,
            district=data.district,
            province=data.province,
            phone=data.phone,
            email=data.email,
            birth_day=data.birthDay,
            birth_month=data.birthMonth,
            birth_year=data.birthYear,
        )

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get_customer(customer_id)

        if data.phone and data.phone != customer.phone:
            self._ensure_phone_available(data.phone, exclude_id=customer.id)

        updates = {
            "full_name": data.fullName.strip() if data.fullName else None,
            "gender": data.gender,
            "location": data.location,
            "district": data.district,
            "province": data.province,
            "phone": data.phone,
            "email": data.email,
            "birth_day": data.birthDay,
            "birth_month": data.birthMonth,
            "birth_year": data.birthYear,
            "is_active": data.isActive,
        }
        if data.isActive and not customer.is_active:
            # Reactivating must not create a second active customer with the same phone
            self._ensure_phone_available(data.phone or customer.phone, exclude_id=customer.id)

        return self.repo.update_customer(self.db, customer, **updates)

    def delete_customer(self, customer_id: int) -> dict:
        """Soft delete: the customer keeps their sales history"""
        customer = self.get_customer(customer_id)
        self.repo.update_customer(self.db, customer, is_active=False)
        logger.info(f"🗑️ Customer {customer_id} deactivated")
        return {"message": "Customer deactivated successfully"}

    def toggle_active(self, customer_id: int) -> Customer:
        customer = self.get_customer(customer_id)
        if not customer.is_active:
            self._ensure_phone_available(customer.phone, exclude_id=customer.id)
        customer.is_active = not customer.is_active
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def get_top_customers(self, limit: int = 5) -> list[Customer]:
        return self.repo.get_top_customers(self.db, limit)

    def get_customer_stats(self, customer_id: int) -> dict:
        customer = self.get_customer(customer_id)
        now = utcnow()
        monthly = self.repo.get_monthly_visits(self.db, customer.id, now.year)
        visits = customer.sale_count or 0

        return {
            "totalVisits": visits,
            "totalSpent": customer.total_spent or 0,
            "loyaltyPoints": customer.loyalty_points or 0,
            "lastVisit": customer.last_sale,
            "averageSpending": (customer.total_spent or 0) / visits if visits else 0,
            "isBirthdayMonth": is_birthday_month(customer, now),
            "isEligibleForSixthVisitDiscount": is_sixth_visit(visits),
            "monthlyVisits": {str(month): monthly.get(month, 0) for month in range(1, 13)},
        }

    def get_discount_eligibility(self, customer_id: int) -> dict:
        """Automatic discounts the customer's next sale would receive"""
        customer = self.get_customer(customer_id)
        now = utcnow()
        visits = customer.sale_count or 0

        sixth_visit = is_sixth_visit(visits)
        birthday_month = is_birthday_month(customer, now)
        birthday_used = SaleRepository.birthday_discount_used_since(
            self.db, customer.id, now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        )
        birthday_eligible = not sixth_visit and birthday_month and visits >= 1 and not birthday_used

        current_rules = [
            {"id": rule.id, "name": rule.name, "type": rule.type}
            for rule in self.repo.get_current_rules(self.db)
            if rule.type not in BUILTIN_DISCOUNT_TYPES and rule_is_current(rule, now)
        ]

        return {
            "customerId": customer.id,
            "saleCount": visits,
            "nextVisitNumber": visits + 1,
            "sixthVisit": {
                "eligible": sixth_visit,
                "visitsUntilEligible": (5 - visits % 6) % 6,
            },
            "birthdayMonth": {
                "eligible": birthday_eligible,
                "isBirthdayMonth": birthday_month,
                "alreadyUsedThisMonth": birthday_used,
            },
            "activeRules": current_rules,
        }
