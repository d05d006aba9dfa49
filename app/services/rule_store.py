# app/services/rule_store.py
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlmodel import Session, select

from app.exceptions import RuleOverlap, SiteUnavailable
from app.models.charges import DeliveryFeeRule, DeliveryTimeRule, GstTax, HandlingCharge
from app.models.general_settings import MinCartAmount, SiteStatus, SystemStatus


@dataclass
class PricingRules:
    """Snapshot of the active rules the calculator needs for one request."""

    fee_rules: List[DeliveryFeeRule] = field(default_factory=list)
    handling_charges: List[HandlingCharge] = field(default_factory=list)
    gst_taxes: List[GstTax] = field(default_factory=list)
    min_cart_amount: Optional[Decimal] = None   # None = control disabled


def load_pricing_rules(session: Session) -> PricingRules:
    fee_rules = session.exec(
        select(DeliveryFeeRule)
        .where(DeliveryFeeRule.is_active == True)  # noqa: E712
        .order_by(DeliveryFeeRule.min_subtotal)
    ).all()

    handling = session.exec(
        select(HandlingCharge).where(HandlingCharge.is_active == True)  # noqa: E712
    ).all()

    taxes = session.exec(
        select(GstTax).where(GstTax.is_active == True)  # noqa: E712
    ).all()

    min_cart = session.get(MinCartAmount, 1)

    return PricingRules(
        fee_rules=list(fee_rules),
        handling_charges=list(handling),
        gst_taxes=list(taxes),
        min_cart_amount=min_cart.amount if min_cart and min_cart.is_active else None,
    )


def load_delivery_time_rules(session: Session) -> List[DeliveryTimeRule]:
    return list(session.exec(
        select(DeliveryTimeRule)
        .where(DeliveryTimeRule.is_active == True)  # noqa: E712
        .order_by(DeliveryTimeRule.min_distance, DeliveryTimeRule.id)
    ).all())


# -------------------------
# SINGLETONS
# -------------------------

def get_system_status(session: Session) -> SystemStatus:
    status = session.get(SystemStatus, 1)
    if not status:
        status = SystemStatus(id=1, status=SiteStatus.online)
        session.add(status)
        session.commit()
        session.refresh(status)
    return status


def ensure_site_online(session: Session) -> None:
    status = session.get(SystemStatus, 1)
    # no row yet means nobody ever switched the site off
    if status and status.status != SiteStatus.online:
        raise SiteUnavailable(status.status.value, status.message)


def get_min_cart_amount(session: Session) -> MinCartAmount:
    setting = session.get(MinCartAmount, 1)
    if not setting:
        setting = MinCartAmount(id=1, amount=Decimal("0"), is_active=False)
        session.add(setting)
        session.commit()
        session.refresh(setting)
    return setting


# -------------------------
# BAND OVERLAP
# -------------------------

def bands_overlap(a_min, a_max, b_min, b_max) -> bool:
    """Closed intervals; a missing upper bound means "and above"."""
    a_below_b = a_max is not None and a_max < b_min
    b_below_a = b_max is not None and b_max < a_min
    return not (a_below_b or b_below_a)


def check_fee_rule_overlap(
    session: Session,
    min_subtotal: Decimal,
    max_subtotal: Optional[Decimal],
    exclude_id: Optional[int] = None,
) -> None:
    rules = session.exec(
        select(DeliveryFeeRule).where(DeliveryFeeRule.is_active == True)  # noqa: E712
    ).all()
    for rule in rules:
        if rule.id == exclude_id:
            continue
        if bands_overlap(min_subtotal, max_subtotal, rule.min_subtotal, rule.max_subtotal):
            raise RuleOverlap(rule.id)


def check_time_rule_overlap(
    session: Session,
    min_distance: float,
    max_distance: float,
    exclude_id: Optional[int] = None,
) -> None:
    rules = session.exec(
        select(DeliveryTimeRule).where(DeliveryTimeRule.is_active == True)  # noqa: E712
    ).all()
    for rule in rules:
        if rule.id == exclude_id:
            continue
        if bands_overlap(min_distance, max_distance, rule.min_distance, rule.max_distance):
            raise RuleOverlap(rule.id)


def apply_rule_update(rule, changes: dict):
    """Copy edited fields onto a rule record and bump its version."""
    for key, value in changes.items():
        setattr(rule, key, value)
    rule.version = (rule.version or 0) + 1
    rule.updated_at = datetime.utcnow()
    return rule
