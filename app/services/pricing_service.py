# app/services/pricing_service.py
"""Pure pricing arithmetic.

Nothing in here touches the database or mutates its inputs: the same lines,
address, offer and rule snapshot always give the same breakdown. Offer usage
is reserved by ``offer_service`` at submit time, never here.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from app.exceptions import AddressMissingDistance, BelowMinimumCart, EmptyCart
from app.models.charges import ChargeType, DeliveryFeeRule
from app.models.offer import DiscountType
from app.schemas.checkout_schemas import PriceBreakdown, PricingLine
from app.services.rule_store import PricingRules

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return as_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_subtotal(lines: Iterable[PricingLine]) -> Decimal:
    return money(sum((line.line_total for line in lines), Decimal("0")))


def select_fee_rule(rules: List[DeliveryFeeRule], subtotal: Decimal) -> Optional[DeliveryFeeRule]:
    for rule in rules:
        if not rule.is_active:
            continue
        if subtotal < as_decimal(rule.min_subtotal):
            continue
        if rule.max_subtotal is not None and subtotal > as_decimal(rule.max_subtotal):
            continue
        return rule
    return None


def compute_handling(rules: PricingRules) -> Decimal:
    return money(sum((as_decimal(c.amount) for c in rules.handling_charges if c.is_active), Decimal("0")))


def compute_tax(rules: PricingRules, subtotal: Decimal) -> Decimal:
    tax = Decimal("0")
    for record in rules.gst_taxes:
        if not record.is_active:
            continue
        if record.charge_type == ChargeType.flat:
            tax += as_decimal(record.value)
        else:
            tax += subtotal * as_decimal(record.value) / HUNDRED
    return money(tax)


def compute_discount(offer, subtotal: Decimal) -> Decimal:
    """Discount for an already validated offer; 0 when the cart is below its minimum."""
    if offer is None:
        return ZERO
    if subtotal < as_decimal(offer.min_order_value or 0):
        return ZERO

    if offer.discount_type == DiscountType.percentage:
        raw = subtotal * as_decimal(offer.discount_value) / HUNDRED
    else:
        raw = as_decimal(offer.discount_value)

    if offer.max_discount is not None:
        raw = min(raw, as_decimal(offer.max_discount))
    return money(raw)


def calculate_price(
    lines: List[PricingLine],
    address,
    rules: PricingRules,
    offer=None,
) -> PriceBreakdown:
    if not lines:
        raise EmptyCart()

    if getattr(address, "distance_km", None) is None:
        raise AddressMissingDistance(getattr(address, "id", None))

    subtotal = compute_subtotal(lines)

    if rules.min_cart_amount is not None and subtotal < as_decimal(rules.min_cart_amount):
        raise BelowMinimumCart(rules.min_cart_amount, subtotal)

    fee_rule = select_fee_rule(rules.fee_rules, subtotal)
    delivery_fee = money(fee_rule.amount) if fee_rule else ZERO
    handling = compute_handling(rules)
    tax = compute_tax(rules, subtotal)
    discount = compute_discount(offer, subtotal)

    total = max(ZERO, subtotal + delivery_fee + handling + tax - discount)

    return PriceBreakdown(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        handling_charge=handling,
        tax=tax,
        discount=discount,
        total=total,
        delivery_fee_rule_id=fee_rule.id if fee_rule else None,
        applied_offer_code=offer.code if offer is not None and discount > 0 else None,
    )
