"""Sale pricing - unit prices, automatic discounts, loyalty points and payment splits

Everything here works on already-loaded model objects and plain values so the
rules can be exercised without a database session.
"""

import logging
import math
from datetime import datetime
from typing import Optional

from ...config import CURRENCY
from ...models import BUILTIN_DISCOUNT_TYPES, Customer, DiscountRule, Service
from ...shared.validators import normalize_payment_method

logger = logging.getLogger(__name__)

SIXTH_VISIT_PERCENT = 20
BIRTHDAY_MONTH_PERCENT = 20
SERVICE_COMBO_AMOUNT = 2000
BRING_OWN_PRODUCT_AMOUNT = 1000
AMOUNT_PER_LOYALTY_POINT = 1000
PAYMENT_TOLERANCE = 0.01

DISCOUNT_LABELS = {
    "SIXTH_VISIT": "6th Visit Discount",
    "BIRTHDAY_MONTH": "Birthday Month Discount",
    "SERVICE_COMBO": "Service Combo Discount",
    "BRING_OWN_PRODUCT": "Bring Own Product Discount",
    "MANUAL_DISCOUNT": "Manual Discount",
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"{int(amount)} {CURRENCY}"
    return f"{amount:.2f} {CURRENCY}"


# ============================================================================
# LINE PRICING
# ============================================================================


def service_unit_price(service: Service, is_child: bool = False, add_shampoo: bool = False) -> float:
    """Price of one unit of a service.

    Children pay the child price (or the child price with shampoo), adults the
    single price (or the combined price with shampoo). Missing variant prices
    fall back to the plain single price.
    """
    if is_child:
        if add_shampoo and service.child_combined_price:
            return service.child_combined_price
        return service.child_price or service.single_price

    if add_shampoo and service.combined_price:
        return service.combined_price
    return service.single_price


def price_service_lines(items: list[dict], services_by_id: dict[int, Service]) -> list[dict]:
    """Turn normalized service items into priced lines"""
    lines = []
    for item in items:
        service = services_by_id[item["service_id"]]
        unit_price = service_unit_price(service, item["is_child"], item["add_shampoo"])
        quantity = item["quantity"]
        lines.append(
            {
                "service": service,
                "service_id": service.id,
                "quantity": quantity,
                "unit_price": unit_price,
                "total_price": unit_price * quantity,
                "is_child": item["is_child"],
                "add_shampoo": item["add_shampoo"],
                # Combined pricing actually used for this line
                "is_combined": bool(
                    item["add_shampoo"]
                    and (service.child_combined_price if item["is_child"] else service.combined_price)
                ),
            }
        )
    return lines


# ============================================================================
# DISCOUNTS
# ============================================================================


def is_sixth_visit(sale_count: int) -> bool:
    """True when the customer's next sale is a 6th, 12th, 18th... visit"""
    return (sale_count + 1) % 6 == 0


def is_birthday_month(customer: Customer, now: datetime) -> bool:
    return customer.birth_month == now.month


def rule_is_current(rule: DiscountRule, now: datetime) -> bool:
    """Active rule whose date window (day granularity, both ends inclusive) contains now"""
    if not rule.is_active:
        return False
    if rule.start_date and rule.start_date.date() > now.date():
        return False
    if rule.end_date and rule.end_date.date() < now.date():
        return False
    return True


def rule_discount_amount(rule: DiscountRule, service_lines: list[dict], total_amount: float) -> float:
    """Discount a configurable rule gives for this sale, 0 when it does not apply"""
    if rule.apply_to_all_services:
        eligible = total_amount
    else:
        rule_service_ids = {s.id for s in rule.services}
        eligible = sum(
            line["total_price"] for line in service_lines if line["service_id"] in rule_service_ids
        )

    if eligible <= 0:
        return 0
    if rule.min_amount and eligible < rule.min_amount:
        return 0

    if rule.is_percentage:
        amount = round_half_up(eligible * rule.value / 100)
    else:
        amount = rule.value

    if rule.max_discount and amount > rule.max_discount:
        amount = rule.max_discount

    return min(amount, eligible)


def calculate_discounts(
    customer: Customer,
    service_lines: list[dict],
    total_amount: float,
    now: datetime,
    own_shampoo_discount: bool = False,
    birthday_discount_used: bool = False,
    rules: Optional[list[DiscountRule]] = None,
    manual_discount: float = 0,
    manual_discount_reason: Optional[str] = None,
    sale_count: Optional[int] = None,
) -> list[dict]:
    """
    Work out every discount that applies to a sale.

    Args:
        customer: Customer the sale is for
        service_lines: Priced service lines from price_service_lines
        total_amount: Gross total of services and products
        now: Time of the sale
        own_shampoo_discount: Customer brought their own product
        birthday_discount_used: Birthday discount already granted this month
        rules: Configurable discount rules to consider
        manual_discount: Amount taken off at the till
        manual_discount_reason: Required for the manual discount to count
        sale_count: Sales before this one, defaults to customer.sale_count

    Returns:
        List of {"type", "amount", "label", "rule_id"} dicts in application order
    """
    discounts = []

    if sale_count is None:
        sale_count = customer.sale_count or 0

    sixth_visit = is_sixth_visit(sale_count)
    if sixth_visit:
        discounts.append(
            _discount("SIXTH_VISIT", round_half_up(total_amount * SIXTH_VISIT_PERCENT / 100))
        )

    # Birthday discount needs a returning customer and is never stacked on the 6th visit
    if (
        not sixth_visit
        and is_birthday_month(customer, now)
        and sale_count >= 1
        and not birthday_discount_used
    ):
        discounts.append(
            _discount("BIRTHDAY_MONTH", round_half_up(total_amount * BIRTHDAY_MONTH_PERCENT / 100))
        )

    has_shampoo = any("shampoo" in line["service"].name.lower() for line in service_lines)
    has_other = any("shampoo" not in line["service"].name.lower() for line in service_lines)
    if has_shampoo and has_other and total_amount >= SERVICE_COMBO_AMOUNT:
        discounts.append(_discount("SERVICE_COMBO", SERVICE_COMBO_AMOUNT))

    if own_shampoo_discount and total_amount >= BRING_OWN_PRODUCT_AMOUNT:
        discounts.append(_discount("BRING_OWN_PRODUCT", BRING_OWN_PRODUCT_AMOUNT))

    for rule in rules or []:
        if rule.type in BUILTIN_DISCOUNT_TYPES or not rule_is_current(rule, now):
            continue
        amount = rule_discount_amount(rule, service_lines, total_amount)
        if amount > 0:
            discounts.append(
                {"type": rule.type, "amount": amount, "label": rule.name, "rule_id": rule.id}
            )

    if manual_discount and manual_discount > 0 and (manual_discount_reason or "").strip():
        discounts.append(
            _discount(
                "MANUAL_DISCOUNT",
                manual_discount,
                reason=manual_discount_reason.strip(),
            )
        )

    return discounts


def _discount(discount_type: str, amount: float, reason: Optional[str] = None) -> dict:
    return {
        "type": discount_type,
        "amount": amount,
        "label": DISCOUNT_LABELS[discount_type],
        "rule_id": None,
        "reason": reason,
    }


def calculate_final_amount(total_amount: float, discount_total: float, increment: float = 0) -> float:
    """Amount the customer pays, never negative"""
    return max(0, total_amount - discount_total + increment)


def loyalty_points_for(final_amount: float) -> int:
    """One point per full 1000 paid"""
    return int(final_amount // AMOUNT_PER_LOYALTY_POINT)


def build_sale_notes(
    notes: Optional[str],
    discounts: list[dict],
    increment: float = 0,
    increment_reason: Optional[str] = None,
) -> Optional[str]:
    """Append one bracketed tag per discount and increment to the sale notes"""
    tags = []
    for discount in discounts:
        tag = f"{discount['label']}: {format_amount(discount['amount'])}"
        if discount.get("reason"):
            tag += f" - {discount['reason']}"
        tags.append(f"[{tag}]")

    if increment > 0 and increment_reason:
        tags.append(f"[Manual Increment: {format_amount(increment)} - {increment_reason}]")

    parts = [notes.strip()] if notes and notes.strip() else []
    parts.extend(tags)
    return "\n".join(parts) if parts else None


# ============================================================================
# PAYMENTS
# ============================================================================


def resolve_payments(
    final_amount: float, payments: Optional[list[dict]] = None, payment_method: Optional[str] = None
) -> list[dict]:
    """
    Build the payment rows for a sale.

    A split payment list must add up to the final amount. Without one the whole
    amount is paid with the single payment method (CASH by default).

    Raises:
        ValueError: If the split payments do not add up to the final amount
    """
    if payments:
        resolved = [
            {"payment_method": normalize_payment_method(p.get("method")), "amount": float(p["amount"])}
            for p in payments
        ]
        paid = sum(p["amount"] for p in resolved)
        if abs(paid - final_amount) > PAYMENT_TOLERANCE:
            raise ValueError(
                f"Total payments ({paid:g}) must equal the final amount ({final_amount:g})"
            )
        return resolved

    return [{"payment_method": normalize_payment_method(payment_method), "amount": final_amount}]
