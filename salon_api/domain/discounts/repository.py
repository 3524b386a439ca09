"""Discount rule repository"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Customer, DiscountRule, Service

DELETED_MARKER = "_deleted_"


class DiscountRepository:
    @staticmethod
    def get_rules(db: Session) -> list[DiscountRule]:
        """Every rule that has not been soft deleted, newest first"""
        return (
            db.query(DiscountRule)
            .options(selectinload(DiscountRule.services))
            .filter(~DiscountRule.name.contains(DELETED_MARKER))
            .order_by(DiscountRule.created_at.desc(), DiscountRule.id.desc())
            .all()
        )

    @staticmethod
    def get_rule_by_id(db: Session, rule_id: int) -> Optional[DiscountRule]:
        return db.query(DiscountRule).filter(DiscountRule.id == rule_id).first()

    @staticmethod
    def get_rule_by_name(db: Session, name: str, exclude_id: Optional[int] = None) -> Optional[DiscountRule]:
        query = db.query(DiscountRule).filter(DiscountRule.name == name)
        if exclude_id:
            query = query.filter(DiscountRule.id != exclude_id)
        return query.first()

    @staticmethod
    def get_services(db: Session, service_ids: list[int]) -> list[Service]:
        if not service_ids:
            return []
        return db.query(Service).filter(Service.id.in_(service_ids)).all()

    @staticmethod
    def get_customers(db: Session, customer_ids: list[int]) -> list[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.id.in_(customer_ids), Customer.phone.isnot(None))
            .all()
        )

    @staticmethod
    def save(db: Session, rule: DiscountRule) -> DiscountRule:
        db.add(rule)
        db.commit()
        db.refresh(rule)
        return rule
