"""Discount service - configurable discount rules and SMS campaigns"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import DiscountRule
from ...services.notification_service import send_discount_campaign
from .repository import DELETED_MARKER, DiscountRepository
from .schemas import DiscountRuleCreate, DiscountRuleUpdate

logger = logging.getLogger(__name__)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DiscountService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = DiscountRepository()

    def get_rules(self) -> list[DiscountRule]:
        return self.repo.get_rules(self.db)

    def get_rule(self, rule_id: int) -> DiscountRule:
        rule = self.repo.get_rule_by_id(self.db, rule_id)
        if not rule:
            raise HTTPException(status_code=404, detail="Discount not found")
        return rule

    def _check_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        if self.repo.get_rule_by_name(self.db, name, exclude_id):
            raise HTTPException(status_code=400, detail="A discount rule with this name already exists.")

    def create_rule(self, data: DiscountRuleCreate) -> DiscountRule:
        name = data.name.strip()
        self._check_name(name)

        rule = DiscountRule(
            name=name,
            type=data.type,
            value=data.value,
            is_percentage=data.isPercentage,
            description=data.description,
            start_date=_naive_utc(data.startDate),
            end_date=_naive_utc(data.endDate),
            min_amount=data.minAmount,
            max_discount=data.maxDiscount,
            apply_to_all_services=data.applyToAllServices,
        )
        if not data.applyToAllServices:
            rule.services = self.repo.get_services(self.db, data.serviceIds)

        rule = self.repo.save(self.db, rule)
        logger.info(f"🏷️ Discount rule created: {rule.name} ({rule.type})")
        return rule

    def update_rule(self, rule_id: int, data: DiscountRuleUpdate) -> DiscountRule:
        rule = self.get_rule(rule_id)
        updates = data.model_dump(exclude_unset=True)

        if "name" in updates and updates["name"]:
            name = updates["name"].strip()
            self._check_name(name, exclude_id=rule.id)
            rule.name = name

        field_map = {
            "type": "type",
            "value": "value",
            "isPercentage": "is_percentage",
            "description": "description",
            "minAmount": "min_amount",
            "maxDiscount": "max_discount",
            "applyToAllServices": "apply_to_all_services",
            "isActive": "is_active",
        }
        for field, column in field_map.items():
            if field in updates:
                setattr(rule, column, updates[field])
        if "startDate" in updates:
            rule.start_date = _naive_utc(data.startDate)
        if "endDate" in updates:
            rule.end_date = _naive_utc(data.endDate)

        # Service links are replaced, never merged
        if rule.apply_to_all_services:
            rule.services = []
        elif data.serviceIds is not None:
            rule.services = self.repo.get_services(self.db, data.serviceIds)

        return self.repo.save(self.db, rule)

    def delete_rule(self, rule_id: int) -> None:
        """Deactivate and rename so the name can be reused"""
        rule = self.get_rule(rule_id)
        if DELETED_MARKER in rule.name:
            raise HTTPException(status_code=404, detail="Discount not found")
        rule.is_active = False
        rule.name = f"{rule.name}{DELETED_MARKER}{int(time.time() * 1000)}"
        self.repo.save(self.db, rule)
        logger.info(f"🗑️ Discount rule {rule_id} soft deleted")

    async def notify_customers(self, rule_id: int, customer_ids: list[int], message: str) -> dict:
        if not customer_ids:
            raise HTTPException(status_code=400, detail="No customers selected")
        if not message or not message.strip():
            raise HTTPException(status_code=400, detail="Message is required")

        self.get_rule(rule_id)
        customers = self.repo.get_customers(self.db, customer_ids)
        stats = await send_discount_campaign([(c.full_name, c.phone) for c in customers], message)
        return {"processed": len(customers), "stats": stats}
