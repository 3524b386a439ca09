"""Sale service - Business logic for recording and reporting sales"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import (
    PAYMENT_METHODS,
    ROLE_STAFF,
    Customer,
    CustomerDiscount,
    DiscountRule,
    Notification,
    Sale,
    SaleDiscount,
    SalePayment,
    SaleProduct,
    SaleService,
    SaleStaff,
    User,
    utcnow,
)
from ...shared.validators import normalize_payment_method
from . import pricing
from .repository import SaleRepository
from .schemas import SaleCreate, SaleUpdate

logger = logging.getLogger(__name__)

# Defaults for built-in rules created the first time they are applied
BUILTIN_RULE_DEFAULTS = {
    "SIXTH_VISIT": (pricing.SIXTH_VISIT_PERCENT, True),
    "BIRTHDAY_MONTH": (pricing.BIRTHDAY_MONTH_PERCENT, True),
    "SERVICE_COMBO": (pricing.SERVICE_COMBO_AMOUNT, False),
    "BRING_OWN_PRODUCT": (pricing.BRING_OWN_PRODUCT_AMOUNT, False),
    "MANUAL_DISCOUNT": (0, False),
}


def parse_date(value: str, field: str = "date") -> datetime:
    """Parse YYYY-MM-DD (or a full ISO timestamp) into a naive datetime"""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid {field}, expected YYYY-MM-DD") from e
    return parsed.replace(tzinfo=None)


def day_range(start_date: Optional[str], end_date: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Turn date filters into [start, end) bounds.

    A start date alone covers that whole day. An end date covers up to the end of that day.
    """
    start = end = None
    if start_date:
        start = parse_date(start_date, "startDate").replace(hour=0, minute=0, second=0, microsecond=0)
    if end_date:
        end = parse_date(end_date, "endDate").replace(
            hour=0, minute=0, second=0, microsecond=0
        ) + timedelta(days=1)
    elif start is not None:
        end = start + timedelta(days=1)
    return start, end


def normalize_service_items(data) -> list[dict]:
    """Accept detailed ``services`` items or plain ``serviceIds`` with shampoo options"""
    if data.services:
        return [
            {
                "service_id": item.serviceId,
                "quantity": item.quantity,
                "is_child": item.isChild,
                "add_shampoo": item.addShampoo,
            }
            for item in data.services
        ]

    options = data.serviceShampooOptions or {}
    return [
        {
            "service_id": service_id,
            "quantity": 1,
            "is_child": False,
            "add_shampoo": options.get(service_id, data.addShampoo),
        }
        for service_id in data.serviceIds or []
    ]


class SalesService:
    """Service layer for sale business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SaleRepository()

    # ========================================================================
    # READ
    # ========================================================================

    def get_sale(self, sale_id: int, user: Optional[User] = None) -> Sale:
        sale = self.repo.get_sale_by_id(self.db, sale_id)
        if not sale:
            raise HTTPException(status_code=404, detail="Sale not found")
        if user is not None and user.role == ROLE_STAFF and not self._worked_on(sale, user):
            raise HTTPException(status_code=404, detail="Sale not found")
        return sale

    @staticmethod
    def _worked_on(sale: Sale, user: User) -> bool:
        return sale.created_by_id == user.id or any(link.staff_id == user.id for link in sale.staff)

    def list_sales(
        self,
        user: User,
        page: int = 1,
        limit: int = 10,
        customer_id: Optional[int] = None,
        staff_id: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Sale], int]:
        start, end = day_range(start_date, end_date)
        return self.repo.list_sales(
            self.db,
            page,
            limit,
            customer_id=customer_id,
            staff_id=staff_id,
            start=start,
            end=end,
            search=search,
            visible_to_staff_id=user.id if user.role == ROLE_STAFF else None,
        )

    def get_customer_sales(self, customer_id: int, page: int = 1, limit: int = 10) -> tuple[list[Sale], int]:
        if not self.repo.get_customer(self.db, customer_id):
            raise HTTPException(status_code=404, detail="Customer not found")
        return self.repo.list_sales(self.db, page, limit, customer_id=customer_id)

    def get_summary(
        self, user: User, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> dict:
        start, end = day_range(start_date, end_date)
        count, revenue, discounts = self.repo.summarize(
            self.db,
            start=start,
            end=end,
            visible_to_staff_id=user.id if user.role == ROLE_STAFF else None,
        )
        return {
            "totalSales": count,
            "totalRevenue": revenue,
            "totalDiscounts": discounts,
            "averageSaleValue": revenue / count if count else 0,
        }

    def get_payment_summary(self, date: Optional[str] = None) -> dict:
        """Takings for one UTC day grouped by payment method"""
        day = parse_date(date) if date else utcnow()
        start = day.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)

        totals = {method: {"method": method, "total": 0.0, "count": 0} for method in PAYMENT_METHODS}

        for sale in self.repo.get_sales_between(self.db, start, end):
            if sale.payments:
                entries = [(p.payment_method, p.amount) for p in sale.payments]
            else:
                # Sales recorded before split payments existed
                entries = [(sale.payment_method, sale.final_amount)]

            for method, amount in entries:
                bucket = totals[normalize_payment_method(method)]
                bucket["total"] += amount or 0
                bucket["count"] += 1

        methods = list(totals.values())
        return {
            "date": start.date().isoformat(),
            "methods": methods,
            "grandTotal": sum(m["total"] for m in methods),
        }

    # ========================================================================
    # CREATE
    # ========================================================================

    def create_sale(self, data: SaleCreate, user: User) -> Sale:
        """Record a sale: price it, apply discounts, take payment and update the customer"""
        service_items = normalize_service_items(data)
        product_items = [
            {"product_id": p.productId, "quantity": p.quantity} for p in data.products or []
        ]

        if not data.customerId or (not service_items and not product_items):
            raise HTTPException(
                status_code=400,
                detail="Customer and at least one service or product are required",
            )

        customer = self.repo.get_customer(self.db, data.customerId)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")

        service_lines = self._price_services(service_items)
        product_lines = self._price_products(product_items)

        now = utcnow()
        total_amount = sum(line["total_price"] for line in service_lines) + sum(
            line["total_price"] for line in product_lines
        )

        birthday_used = self.repo.birthday_discount_used_since(
            self.db, customer.id, now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        )
        discounts = pricing.calculate_discounts(
            customer,
            service_lines,
            total_amount,
            now,
            own_shampoo_discount=data.ownShampooDiscount,
            birthday_discount_used=birthday_used,
            rules=self.repo.get_active_rules(self.db),
            manual_discount=data.manualDiscountAmount,
            manual_discount_reason=data.manualDiscountReason,
        )
        discount_total = sum(d["amount"] for d in discounts)

        increment_reason = (data.manualIncrementReason or "").strip()
        increment = data.manualIncrementAmount if data.manualIncrementAmount > 0 and increment_reason else 0

        final_amount = pricing.calculate_final_amount(total_amount, discount_total, increment)

        try:
            payments = pricing.resolve_payments(
                final_amount,
                [p.model_dump() for p in data.payments] if data.payments else None,
                data.paymentMethod,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        self._validate_staff(data.staffIds)
        points = pricing.loyalty_points_for(final_amount)

        logger.info(
            f"🧾 Recording sale for customer {customer.id}: total={total_amount}, "
            f"discounts={discount_total}, final={final_amount}"
        )

        try:
            sale = Sale(
                customer=customer,
                created_by_id=user.id,
                total_amount=total_amount,
                discount_amount=discount_total,
                increment_amount=increment,
                final_amount=final_amount,
                loyalty_points_earned=points,
                payment_method=payments[0]["payment_method"],
                own_shampoo_discount=data.ownShampooDiscount,
                birth_month_discount=any(d["type"] == "BIRTHDAY_MONTH" for d in discounts),
                notes=pricing.build_sale_notes(data.notes, discounts, increment, increment_reason),
                sale_date=now,
                created_at=now,
            )
            self.db.add(sale)

            self._add_service_lines(sale, service_lines)
            for line in product_lines:
                line["product"].quantity -= line["quantity"]
                sale.products.append(
                    SaleProduct(
                        product=line["product"],
                        quantity=line["quantity"],
                        unit_price=line["unit_price"],
                        total_price=line["total_price"],
                    )
                )
            for payment in payments:
                sale.payments.append(SalePayment(**payment))
            self._add_staff(sale, data.staffIds, data.customStaffNames)
            self._record_discounts(sale, customer, discounts, now)

            customer.sale_count = (customer.sale_count or 0) + 1
            customer.loyalty_points = (customer.loyalty_points or 0) + points
            customer.total_spent = (customer.total_spent or 0) + final_amount
            customer.last_sale = now

            self.db.add(
                Notification(
                    user_id=user.id,
                    type="SALE",
                    title="Sale recorded",
                    message=f"Sale of {pricing.format_amount(final_amount)} recorded for {customer.full_name}",
                )
            )

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record sale for customer {customer.id}: {e}")
            raise

        logger.info(f"✅ Sale {sale.id} recorded ({len(discounts)} discounts, {points} points)")
        return self.get_sale(sale.id)

    def _price_services(self, service_items: list[dict]) -> list[dict]:
        if not service_items:
            return []
        wanted_ids = {item["service_id"] for item in service_items}
        services = self.repo.get_active_services(self.db, list(wanted_ids))
        if len(services) != len(wanted_ids):
            raise HTTPException(status_code=400, detail="One or more services not found or inactive")
        return pricing.price_service_lines(service_items, {s.id: s for s in services})

    def _price_products(self, product_items: list[dict]) -> list[dict]:
        if not product_items:
            return []
        wanted_ids = {item["product_id"] for item in product_items}
        products = {p.id: p for p in self.repo.get_active_products(self.db, list(wanted_ids))}
        if len(products) != len(wanted_ids):
            raise HTTPException(status_code=400, detail="One or more products not found or inactive")

        requested: dict[int, int] = {}
        for item in product_items:
            requested[item["product_id"]] = requested.get(item["product_id"], 0) + item["quantity"]
        for product_id, quantity in requested.items():
            product = products[product_id]
            if product.quantity < quantity:
                raise HTTPException(
                    status_code=400,
                    detail=f"Insufficient stock for {product.name}. Available: {product.quantity}, Requested: {quantity}",
                )

        return [
            {
                "product": products[item["product_id"]],
                "quantity": item["quantity"],
                "unit_price": products[item["product_id"]].price,
                "total_price": products[item["product_id"]].price * item["quantity"],
            }
            for item in product_items
        ]

    @staticmethod
    def _add_service_lines(sale: Sale, service_lines: list[dict]) -> None:
        for line in service_lines:
            sale.services.append(
                SaleService(
                    service=line["service"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    total_price=line["total_price"],
                    is_child=line["is_child"],
                    is_combined=line["is_combined"],
                    add_shampoo=line["add_shampoo"],
                )
            )

    def _validate_staff(self, staff_ids: list[int]) -> None:
        if not staff_ids:
            return
        found = {row.id for row in self.db.query(User.id).filter(User.id.in_(staff_ids)).all()}
        if set(staff_ids) - found:
            raise HTTPException(status_code=400, detail="One or more staff members not found")

    @staticmethod
    def _add_staff(sale: Sale, staff_ids: list[int], custom_names: list[str]) -> None:
        for staff_id in dict.fromkeys(staff_ids):
            sale.staff.append(SaleStaff(staff_id=staff_id))
        for name in custom_names:
            if name and name.strip():
                sale.staff.append(SaleStaff(custom_name=name.strip()))

    def _builtin_rule(self, discount: dict) -> DiscountRule:
        """Active rule for a built-in discount type, created on first use"""
        rule = self.repo.get_rule_by_type(self.db, discount["type"])
        if rule:
            return rule

        value, is_percentage = BUILTIN_RULE_DEFAULTS[discount["type"]]
        name = discount["label"]
        if self.repo.get_rule_by_name(self.db, name):
            name = f"{name} ({discount['type']})"
        rule = DiscountRule(
            name=name,
            type=discount["type"],
            value=value,
            is_percentage=is_percentage,
            description="Created automatically when first applied to a sale",
            apply_to_all_services=True,
        )
        self.db.add(rule)
        self.db.flush()
        logger.info(f"➕ Created discount rule '{name}' for {discount['type']}")
        return rule

    def _record_discounts(self, sale: Sale, customer: Customer, discounts: list[dict], now: datetime) -> None:
        for discount in discounts:
            if discount.get("rule_id"):
                rule = self.db.get(DiscountRule, discount["rule_id"])
            else:
                rule = self._builtin_rule(discount)
            sale.discounts.append(
                SaleDiscount(discount_rule=rule, discount_amount=discount["amount"])
            )
            sale.customer_discounts.append(
                CustomerDiscount(
                    customer=customer,
                    discount_rule=rule,
                    discount_amount=discount["amount"],
                    used_at=now,
                )
            )

    # ========================================================================
    # UPDATE / DELETE
    # ========================================================================

    def update_sale(self, sale_id: int, data: SaleUpdate, user: User) -> Sale:
        """Edit a sale. New services re-price the sale and recompute its discounts."""
        sale = self.get_sale(sale_id)
        customer = sale.customer
        old_final = sale.final_amount
        old_points = sale.loyalty_points_earned

        service_items = normalize_service_items(data) if (data.services or data.serviceIds) else None

        try:
            if data.ownShampooDiscount is not None:
                sale.own_shampoo_discount = data.ownShampooDiscount

            if service_items is not None:
                self._reprice(sale, customer, service_items)

            if data.staffIds is not None or data.customStaffNames is not None:
                self._validate_staff(data.staffIds or [])
                sale.staff.clear()
                self.db.flush()
                self._add_staff(sale, data.staffIds or [], data.customStaffNames or [])

            if data.payments is not None or service_items is not None or data.paymentMethod:
                try:
                    payments = pricing.resolve_payments(
                        sale.final_amount,
                        [p.model_dump() for p in data.payments] if data.payments else None,
                        data.paymentMethod or sale.payment_method,
                    )
                except ValueError as e:
                    raise HTTPException(status_code=400, detail=str(e)) from e
                sale.payments.clear()
                self.db.flush()
                for payment in payments:
                    sale.payments.append(SalePayment(**payment))
                sale.payment_method = payments[0]["payment_method"]

            if data.notes is not None:
                sale.notes = data.notes
            if data.isCompleted is not None:
                sale.is_completed = data.isCompleted

            # Keep the customer's running totals in step with the edited sale
            customer.total_spent = (customer.total_spent or 0) + sale.final_amount - old_final
            customer.loyalty_points = max(
                0, (customer.loyalty_points or 0) + sale.loyalty_points_earned - old_points
            )

            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update sale {sale_id}: {e}")
            raise

        logger.info(f"✏️ Sale {sale_id} updated by user {user.id}")
        self.db.expire_all()
        return self.get_sale(sale_id)

    def _reprice(self, sale: Sale, customer: Customer, service_items: list[dict]) -> None:
        service_lines = self._price_services(service_items)
        product_total = sum(line.total_price for line in sale.products)
        total_amount = sum(line["total_price"] for line in service_lines) + product_total

        # The customer's counters already include this sale
        previous_count = max(0, (customer.sale_count or 0) - 1)
        manual = [d for d in sale.discounts if d.discount_rule.type == "MANUAL_DISCOUNT"]
        month_start = sale.sale_date.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        discounts = pricing.calculate_discounts(
            customer,
            service_lines,
            total_amount,
            sale.sale_date,
            own_shampoo_discount=sale.own_shampoo_discount,
            birthday_discount_used=self.repo.birthday_discount_used_since(
                self.db, customer.id, month_start, exclude_sale_id=sale.id
            ),
            rules=self.repo.get_active_rules(self.db),
            sale_count=previous_count,
        )

        discounts.extend(
            {
                "type": "MANUAL_DISCOUNT",
                "amount": d.discount_amount,
                "label": d.discount_rule.name,
                "rule_id": d.discount_rule_id,
            }
            for d in manual
        )

        sale.services.clear()
        sale.discounts.clear()
        sale.customer_discounts.clear()
        self.db.flush()

        self._add_service_lines(sale, service_lines)
        self._record_discounts(sale, customer, discounts, sale.sale_date)

        discount_total = sum(d["amount"] for d in discounts)
        sale.total_amount = total_amount
        sale.discount_amount = discount_total
        sale.final_amount = pricing.calculate_final_amount(
            total_amount, discount_total, sale.increment_amount or 0
        )
        sale.loyalty_points_earned = pricing.loyalty_points_for(sale.final_amount)
        sale.birth_month_discount = any(d["type"] == "BIRTHDAY_MONTH" for d in discounts)

    def complete_sale(self, sale_id: int, user: Optional[User] = None) -> Sale:
        sale = self.get_sale(sale_id, user)
        sale.is_completed = True
        self.db.commit()
        return self.get_sale(sale_id)

    def delete_sale(self, sale_id: int) -> dict:
        """Delete a sale, returning stock and reversing the customer's counters"""
        sale = self.get_sale(sale_id)
        customer = sale.customer

        for line in sale.products:
            line.product.quantity += line.quantity

        customer.sale_count = max(0, (customer.sale_count or 0) - 1)
        customer.loyalty_points = max(0, (customer.loyalty_points or 0) - sale.loyalty_points_earned)
        customer.total_spent = max(0, (customer.total_spent or 0) - sale.final_amount)
        remaining = (
            self.db.query(Sale.sale_date)
            .filter(Sale.customer_id == customer.id, Sale.id != sale.id)
            .order_by(Sale.sale_date.desc())
            .first()
        )
        customer.last_sale = remaining[0] if remaining else None

        self.repo.delete_sale(self.db, sale)
        logger.info(f"🗑️ Sale {sale_id} deleted")
        return {"message": "Sale deleted successfully"}
