from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.exceptions import AddressMissingDistance, BelowMinimumCart, EmptyCart
from app.models.address import Address
from app.models.charges import ChargeType, DeliveryFeeRule, GstTax, HandlingCharge
from app.models.offer import DiscountType, Offer
from app.schemas.checkout_schemas import PricingLine
from app.services.pricing_service import calculate_price, compute_discount, select_fee_rule
from app.services.rule_store import PricingRules

NOW = datetime(2026, 10, 19, 12, 0, 0)


def line(price, quantity=1, discounted=None, product_id=1):
    return PricingLine(
        product_id=product_id,
        name="Item",
        unit_price=Decimal(price),
        discounted_unit_price=Decimal(discounted) if discounted is not None else None,
        quantity=quantity,
    )


def fee_rule(rule_id, amount, low, high=None, active=True):
    return DeliveryFeeRule(
        id=rule_id,
        amount=Decimal(amount),
        min_subtotal=Decimal(low),
        max_subtotal=Decimal(high) if high is not None else None,
        is_active=active,
    )


def offer(discount_type, value, min_order="0", cap=None, code="TEST"):
    return Offer(
        code=code,
        title=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        min_order_value=Decimal(min_order),
        max_discount=Decimal(cap) if cap is not None else None,
        valid_from=NOW - timedelta(days=1),
        valid_to=NOW + timedelta(days=1),
    )


@pytest.fixture
def home():
    return Address(id=7, user_id=1, full_address="12 MG Road", city="Bengaluru", pincode="560001", distance_km=3.2)


@pytest.fixture
def rules():
    return PricingRules(
        fee_rules=[fee_rule(1, "60", "0", "499.99"), fee_rule(2, "40", "500", "999"), fee_rule(3, "0", "1000")],
        handling_charges=[HandlingCharge(id=1, amount=Decimal("10"), is_active=True)],
        gst_taxes=[GstTax(id=1, name="GST", charge_type=ChargeType.percentage, value=Decimal("5"), is_active=True)],
    )


def assert_total_identity(summary):
    expected = summary.subtotal + summary.delivery_fee + summary.handling_charge + summary.tax - summary.discount
    assert summary.total == max(Decimal("0"), expected)


def test_welcome_offer_example(home, rules):
    welcome = offer(DiscountType.percentage, "50", min_order="300", cap="150", code="WELCOME50")

    summary = calculate_price([line("290", quantity=2)], home, rules, welcome)

    assert summary.subtotal == Decimal("580.00")
    assert summary.delivery_fee == Decimal("40.00")
    assert summary.delivery_fee_rule_id == 2
    assert summary.handling_charge == Decimal("10.00")
    assert summary.tax == Decimal("29.00")
    assert summary.discount == Decimal("150.00")
    assert summary.total == Decimal("509.00")
    assert summary.applied_offer_code == "WELCOME50"
    assert_total_identity(summary)


@pytest.mark.parametrize("price,expected_fee", [("120", "60"), ("500", "40"), ("999", "40"), ("1500", "0")])
def test_fee_band_selected_by_subtotal(home, rules, price, expected_fee):
    summary = calculate_price([line(price)], home, rules)

    assert summary.delivery_fee == Decimal(expected_fee)
    assert_total_identity(summary)


def test_no_matching_band_means_free_delivery(home):
    rules = PricingRules(fee_rules=[fee_rule(1, "40", "500", "999")])

    summary = calculate_price([line("200")], home, rules)

    assert summary.delivery_fee == Decimal("0.00")
    assert summary.delivery_fee_rule_id is None


def test_inactive_rule_never_selected():
    rules = [fee_rule(1, "99", "0", "999", active=False), fee_rule(2, "40", "500", "999")]

    assert select_fee_rule(rules, Decimal("600")).id == 2
    assert select_fee_rule(rules, Decimal("100")) is None


def test_discounted_price_wins_over_list_price(home):
    summary = calculate_price([line("300", quantity=2, discounted="250")], home, PricingRules())

    assert summary.subtotal == Decimal("500.00")


def test_flat_taxes_and_percentage_taxes_add_up(home):
    rules = PricingRules(gst_taxes=[
        GstTax(id=1, name="CGST", charge_type=ChargeType.percentage, value=Decimal("2.5"), is_active=True),
        GstTax(id=2, name="SGST", charge_type=ChargeType.percentage, value=Decimal("2.5"), is_active=True),
        GstTax(id=3, name="Packaging", charge_type=ChargeType.flat, value=Decimal("7"), is_active=True),
        GstTax(id=4, name="Old cess", charge_type=ChargeType.flat, value=Decimal("100"), is_active=False),
    ])

    summary = calculate_price([line("200")], home, rules)

    assert summary.tax == Decimal("17.00")


def test_tax_rounds_half_up(home):
    rules = PricingRules(gst_taxes=[
        GstTax(id=1, name="GST", charge_type=ChargeType.percentage, value=Decimal("5"), is_active=True),
    ])

    summary = calculate_price([line("99.90")], home, rules)

    assert summary.tax == Decimal("5.00")


def test_flat_discount_larger_than_bill_clamps_total_to_zero(home, rules):
    summary = calculate_price([line("50")], home, rules, offer(DiscountType.flat, "1000"))

    assert summary.discount == Decimal("1000.00")
    assert summary.total == Decimal("0.00")
    assert_total_identity(summary)


def test_offer_below_its_minimum_gives_no_discount(home, rules):
    summary = calculate_price([line("100")], home, rules, offer(DiscountType.flat, "50", min_order="300"))

    assert summary.discount == Decimal("0.00")
    assert summary.applied_offer_code is None


def test_percentage_discount_respects_cap():
    capped = offer(DiscountType.percentage, "20", cap="50")

    assert compute_discount(capped, Decimal("100")) == Decimal("20.00")
    assert compute_discount(capped, Decimal("1000")) == Decimal("50.00")


def test_address_without_distance_is_rejected(rules):
    legacy = Address(id=3, user_id=1, full_address="Old flat", city="Pune", pincode="411001")

    with pytest.raises(AddressMissingDistance) as exc:
        calculate_price([line("100")], legacy, rules)

    assert exc.value.extra["address_id"] == 3


def test_below_minimum_cart_amount(home):
    rules = PricingRules(min_cart_amount=Decimal("199"))

    with pytest.raises(BelowMinimumCart):
        calculate_price([line("150")], home, rules)

    assert calculate_price([line("199")], home, rules).subtotal == Decimal("199.00")


def test_empty_cart(home, rules):
    with pytest.raises(EmptyCart):
        calculate_price([], home, rules)


def test_inputs_are_not_mutated(home, rules):
    lines = [line("290", quantity=2)]
    before = [item.model_dump() for item in lines]

    first = calculate_price(lines, home, rules)
    second = calculate_price(lines, home, rules)

    assert [item.model_dump() for item in lines] == before
    assert first == second
