from datetime import datetime
from types import SimpleNamespace

import pytest

from salon_api.domain.sales import pricing

NOW = datetime(2026, 3, 10, 14, 30)


def make_service(id, name, single, combined=None, child=None, child_combined=None, category="HAIR_TREATMENTS"):
    return SimpleNamespace(
        id=id,
        name=name,
        category=category,
        single_price=single,
        combined_price=combined,
        child_price=child,
        child_combined_price=child_combined,
    )


def make_customer(sale_count=0, birth_month=7):
    return SimpleNamespace(sale_count=sale_count, birth_month=birth_month)


def make_rule(**overrides):
    rule = dict(
        id=99,
        name="Women's Day",
        type="HOLIDAY",
        value=10,
        is_percentage=True,
        start_date=None,
        end_date=None,
        min_amount=None,
        max_discount=None,
        apply_to_all_services=True,
        is_active=True,
        services=[],
    )
    rule.update(overrides)
    return SimpleNamespace(**rule)


def lines_for(*services):
    items = [
        {"service_id": s.id, "quantity": 1, "is_child": False, "add_shampoo": False} for s in services
    ]
    return pricing.price_service_lines(items, {s.id: s for s in services})


SHAMPOO = make_service(1, "Shampoo", 7000, child=9000)
PROTEIN = make_service(2, "Protein Treatment", 10000, combined=15000, child=12000, child_combined=17000)
CORNROWS = make_service(3, "Two Lines Cornrows", 7000, combined=12000, category="CORNROWS_BRAIDS")


class TestServiceUnitPrice:
    def test_adult_prices(self):
        assert pricing.service_unit_price(PROTEIN) == 10000
        assert pricing.service_unit_price(PROTEIN, add_shampoo=True) == 15000

    def test_child_prices(self):
        assert pricing.service_unit_price(PROTEIN, is_child=True) == 12000
        assert pricing.service_unit_price(PROTEIN, is_child=True, add_shampoo=True) == 17000

    def test_missing_variants_fall_back(self):
        # No combined price: shampoo option keeps the single price
        assert pricing.service_unit_price(SHAMPOO, add_shampoo=True) == 7000
        assert pricing.service_unit_price(CORNROWS, is_child=True) == 7000

    def test_line_totals_use_quantity(self):
        items = [{"service_id": 2, "quantity": 2, "is_child": False, "add_shampoo": True}]
        [line] = pricing.price_service_lines(items, {2: PROTEIN})
        assert line["unit_price"] == 15000
        assert line["total_price"] == 30000
        assert line["is_combined"] is True


class TestAutomaticDiscounts:
    def test_sixth_visit_takes_twenty_percent(self):
        discounts = pricing.calculate_discounts(make_customer(sale_count=5), lines_for(PROTEIN), 10000, NOW)
        assert [(d["type"], d["amount"]) for d in discounts] == [("SIXTH_VISIT", 2000)]

    @pytest.mark.parametrize("sale_count,expected", [(4, False), (5, True), (6, False), (11, True)])
    def test_sixth_visit_cycle(self, sale_count, expected):
        assert pricing.is_sixth_visit(sale_count) is expected

    def test_birthday_never_stacks_with_sixth_visit(self):
        customer = make_customer(sale_count=5, birth_month=NOW.month)
        discounts = pricing.calculate_discounts(customer, lines_for(PROTEIN), 10000, NOW)
        assert [d["type"] for d in discounts] == ["SIXTH_VISIT"]

    def test_birthday_month_for_returning_customer(self):
        customer = make_customer(sale_count=2, birth_month=NOW.month)
        discounts = pricing.calculate_discounts(customer, lines_for(PROTEIN), 10000, NOW)
        assert [(d["type"], d["amount"]) for d in discounts] == [("BIRTHDAY_MONTH", 2000)]

    def test_birthday_needs_a_previous_sale(self):
        customer = make_customer(sale_count=0, birth_month=NOW.month)
        assert pricing.calculate_discounts(customer, lines_for(PROTEIN), 10000, NOW) == []

    def test_birthday_once_per_month(self):
        customer = make_customer(sale_count=2, birth_month=NOW.month)
        discounts = pricing.calculate_discounts(
            customer, lines_for(PROTEIN), 10000, NOW, birthday_discount_used=True
        )
        assert discounts == []

    def test_service_combo_needs_shampoo_and_another_service(self):
        combo = pricing.calculate_discounts(make_customer(), lines_for(SHAMPOO, CORNROWS), 14000, NOW)
        assert [(d["type"], d["amount"]) for d in combo] == [("SERVICE_COMBO", 2000)]

        alone = pricing.calculate_discounts(make_customer(), lines_for(SHAMPOO), 7000, NOW)
        assert alone == []

    def test_service_combo_ignores_shampoo_only_sales(self):
        dry_shampoo = make_service(4, "Dry Shampoo", 7000)
        mixed = pricing.calculate_discounts(make_customer(), lines_for(SHAMPOO, dry_shampoo), 14000, NOW)
        assert mixed == []

        twice = pricing.calculate_discounts(make_customer(), lines_for(SHAMPOO, SHAMPOO), 14000, NOW)
        assert twice == []

    def test_bring_own_product_needs_minimum_total(self):
        discounts = pricing.calculate_discounts(
            make_customer(), lines_for(CORNROWS), 7000, NOW, own_shampoo_discount=True
        )
        assert [(d["type"], d["amount"]) for d in discounts] == [("BRING_OWN_PRODUCT", 1000)]

        too_small = pricing.calculate_discounts(make_customer(), [], 500, NOW, own_shampoo_discount=True)
        assert too_small == []

    def test_manual_discount_requires_reason(self):
        without = pricing.calculate_discounts(make_customer(), [], 5000, NOW, manual_discount=500)
        assert without == []

        with_reason = pricing.calculate_discounts(
            make_customer(), [], 5000, NOW, manual_discount=500, manual_discount_reason=" regular "
        )
        assert with_reason[0]["type"] == "MANUAL_DISCOUNT"
        assert with_reason[0]["reason"] == "regular"

    def test_explicit_sale_count_overrides_customer_counter(self):
        discounts = pricing.calculate_discounts(
            make_customer(sale_count=6), lines_for(PROTEIN), 10000, NOW, sale_count=5
        )
        assert [d["type"] for d in discounts] == ["SIXTH_VISIT"]


class TestConfigurableRules:
    def test_percentage_rule_capped_by_max_discount(self):
        rule = make_rule(value=50, max_discount=3000)
        discounts = pricing.calculate_discounts(make_customer(), lines_for(PROTEIN), 10000, NOW, rules=[rule])
        assert discounts == [{"type": "HOLIDAY", "amount": 3000, "label": "Women's Day", "rule_id": 99}]

    def test_service_specific_rule_only_counts_its_services(self):
        rule = make_rule(apply_to_all_services=False, services=[CORNROWS], value=10)
        lines = lines_for(PROTEIN, CORNROWS)
        assert pricing.rule_discount_amount(rule, lines, 17000) == 700

    def test_rule_without_matching_service_gives_nothing(self):
        rule = make_rule(apply_to_all_services=False, services=[CORNROWS])
        assert pricing.rule_discount_amount(rule, lines_for(PROTEIN), 10000) == 0

    def test_minimum_amount(self):
        rule = make_rule(min_amount=20000)
        assert pricing.rule_discount_amount(rule, lines_for(PROTEIN), 10000) == 0

    def test_fixed_rule_never_exceeds_eligible_amount(self):
        rule = make_rule(is_percentage=False, value=50000)
        assert pricing.rule_discount_amount(rule, lines_for(PROTEIN), 10000) == 10000

    def test_date_window_is_inclusive_by_day(self):
        assert pricing.rule_is_current(make_rule(end_date=datetime(2026, 3, 10, 0, 0)), NOW)
        assert pricing.rule_is_current(make_rule(start_date=datetime(2026, 3, 10, 23, 0)), NOW)
        assert not pricing.rule_is_current(make_rule(end_date=datetime(2026, 3, 9, 23, 59)), NOW)
        assert not pricing.rule_is_current(make_rule(is_active=False), NOW)

    def test_builtin_types_are_not_treated_as_configurable(self):
        rule = make_rule(type="SIXTH_VISIT")
        assert pricing.calculate_discounts(make_customer(), lines_for(PROTEIN), 10000, NOW, rules=[rule]) == []


class TestTotals:
    def test_final_amount_never_negative(self):
        assert pricing.calculate_final_amount(5000, 8000) == 0
        assert pricing.calculate_final_amount(5000, 1000, increment=500) == 4500

    def test_loyalty_points_per_thousand(self):
        assert pricing.loyalty_points_for(8000) == 8
        assert pricing.loyalty_points_for(8999) == 8
        assert pricing.loyalty_points_for(999) == 0

    def test_round_half_up(self):
        assert pricing.round_half_up(2.5) == 3
        assert pricing.round_half_up(1400.4) == 1400

    def test_notes_get_one_tag_per_adjustment(self):
        discounts = [
            {"type": "SIXTH_VISIT", "amount": 2000, "label": "6th Visit Discount", "rule_id": None},
            {
                "type": "MANUAL_DISCOUNT",
                "amount": 500,
                "label": "Manual Discount",
                "rule_id": None,
                "reason": "loyal",
            },
        ]
        notes = pricing.build_sale_notes("Walk-in", discounts, increment=1000, increment_reason="long hair")
        assert notes.split("\n") == [
            "Walk-in",
            "[6th Visit Discount: 2000 RWF]",
            "[Manual Discount: 500 RWF - loyal]",
            "[Manual Increment: 1000 RWF - long hair]",
        ]

    def test_no_notes_and_no_tags(self):
        assert pricing.build_sale_notes(None, []) is None


class TestPayments:
    def test_single_method_pays_everything(self):
        assert pricing.resolve_payments(8000, None, "momo") == [{"payment_method": "MOMO", "amount": 8000}]

    def test_unknown_method_becomes_cash(self):
        [payment] = pricing.resolve_payments(8000, None, "cheque")
        assert payment["payment_method"] == "CASH"

    def test_split_payments_must_match(self):
        payments = [{"method": "CASH", "amount": 5000}, {"method": "MOBILE_MONEY", "amount": 3000}]
        assert len(pricing.resolve_payments(8000, payments)) == 2
        assert pricing.resolve_payments(8000.005, payments)[0]["amount"] == 5000

        with pytest.raises(ValueError, match="must equal the final amount"):
            pricing.resolve_payments(9000, payments)
