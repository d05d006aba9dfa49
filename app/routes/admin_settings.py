import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.admin import require_admin
from app.models.charges import DeliveryFeeRule, DeliveryTimeRule, GstTax, HandlingCharge
from app.models.general_settings import PaymentMethod
from app.models.user import User
from app.schemas.admin_settings_schemas import (
    DeliveryFeeRuleIn,
    DeliveryFeeRuleUpdate,
    DeliveryTimeRuleIn,
    DeliveryTimeRuleUpdate,
    GstTaxIn,
    GstTaxUpdate,
    HandlingChargeIn,
    HandlingChargeUpdate,
    MinCartAmountUpdate,
    PaymentMethodIn,
    PaymentMethodUpdate,
    SystemStatusUpdate,
)
from app.services.order_service import normalize_payment_code
from app.services.rule_store import (
    apply_rule_update,
    check_fee_rule_overlap,
    check_time_rule_overlap,
    get_min_cart_amount,
    get_system_status,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_or_404(session: Session, model, record_id: int, label: str):
    record = session.get(model, record_id)
    if not record:
        raise HTTPException(404, f"{label} not found")
    return record


def _save(session: Session, record):
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def _check_bounds(low, high, what: str):
    if high is not None and high < low:
        raise HTTPException(400, f"Maximum {what} must not be below the minimum")


# -------------------------
# DELIVERY FEE RULES
# -------------------------

@router.get("/delivery-fees")
def list_delivery_fee_rules(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return session.exec(select(DeliveryFeeRule).order_by(DeliveryFeeRule.min_subtotal)).all()


@router.post("/delivery-fees", status_code=201)
def create_delivery_fee_rule(
    data: DeliveryFeeRuleIn,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    _check_bounds(data.min_subtotal, data.max_subtotal, "subtotal")
    if data.is_active:
        check_fee_rule_overlap(session, data.min_subtotal, data.max_subtotal)

    rule = _save(session, DeliveryFeeRule(**data.model_dump()))
    logger.info(f"Delivery fee rule {rule.id} created by admin {admin.id}")
    return rule


@router.put("/delivery-fees/{rule_id}")
def update_delivery_fee_rule(
    rule_id: int,
    data: DeliveryFeeRuleUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    rule = _get_or_404(session, DeliveryFeeRule, rule_id, "Delivery fee rule")
    changes = data.model_dump(exclude_unset=True)

    min_subtotal = changes.get("min_subtotal", rule.min_subtotal)
    max_subtotal = changes.get("max_subtotal", rule.max_subtotal)
    _check_bounds(min_subtotal, max_subtotal, "subtotal")
    if changes.get("is_active", rule.is_active):
        check_fee_rule_overlap(session, min_subtotal, max_subtotal, exclude_id=rule.id)

    rule = _save(session, apply_rule_update(rule, changes))
    logger.info(f"Delivery fee rule {rule.id} updated to v{rule.version} by admin {admin.id}")
    return rule


@router.patch("/delivery-fees/{rule_id}/toggle")
def toggle_delivery_fee_rule(
    rule_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    rule = _get_or_404(session, DeliveryFeeRule, rule_id, "Delivery fee rule")
    if not rule.is_active:
        check_fee_rule_overlap(session, rule.min_subtotal, rule.max_subtotal, exclude_id=rule.id)
    return _save(session, apply_rule_update(rule, {"is_active": not rule.is_active}))


@router.delete("/delivery-fees/{rule_id}")
def delete_delivery_fee_rule(
    rule_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    rule = _get_or_404(session, DeliveryFeeRule, rule_id, "Delivery fee rule")
    session.delete(rule)
    session.commit()
    return {"message": "Delivery fee rule deleted"}


# -------------------------
# HANDLING CHARGES
# -------------------------

@router.get("/handling-charges")
def list_handling_charges(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return session.exec(select(HandlingCharge).order_by(HandlingCharge.id)).all()


@router.post("/handling-charges", status_code=201)
def create_handling_charge(
    data: HandlingChargeIn,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return _save(session, HandlingCharge(**data.model_dump()))


@router.put("/handling-charges/{charge_id}")
def update_handling_charge(
    charge_id: int,
    data: HandlingChargeUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    charge = _get_or_404(session, HandlingCharge, charge_id, "Handling charge")
    return _save(session, apply_rule_update(charge, data.model_dump(exclude_unset=True)))


@router.patch("/handling-charges/{charge_id}/toggle")
def toggle_handling_charge(
    charge_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    charge = _get_or_404(session, HandlingCharge, charge_id, "Handling charge")
    return _save(session, apply_rule_update(charge, {"is_active": not charge.is_active}))


@router.delete("/handling-charges/{charge_id}")
def delete_handling_charge(
    charge_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    charge = _get_or_404(session, HandlingCharge, charge_id, "Handling charge")
    session.delete(charge)
    session.commit()
    return {"message": "Handling charge deleted"}


# -------------------------
# GST / TAXES
# -------------------------

@router.get("/taxes")
def list_taxes(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return session.exec(select(GstTax).order_by(GstTax.id)).all()


@router.post("/taxes", status_code=201)
def create_tax(
    data: GstTaxIn,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return _save(session, GstTax(**data.model_dump()))


@router.put("/taxes/{tax_id}")
def update_tax(
    tax_id: int,
    data: GstTaxUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    tax = _get_or_404(session, GstTax, tax_id, "Tax")
    return _save(session, apply_rule_update(tax, data.model_dump(exclude_unset=True)))


@router.patch("/taxes/{tax_id}/toggle")
def toggle_tax(
    tax_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    tax = _get_or_404(session, GstTax, tax_id, "Tax")
    return _save(session, apply_rule_update(tax, {"is_active": not tax.is_active}))


@router.delete("/taxes/{tax_id}")
def delete_tax(
    tax_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    tax = _get_or_404(session, GstTax, tax_id, "Tax")
    session.delete(tax)
    session.commit()
    return {"message": "Tax deleted"}


# -------------------------
# DELIVERY TIME RULES
# -------------------------

@router.get("/delivery-times")
def list_delivery_time_rules(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return session.exec(select(DeliveryTimeRule).order_by(DeliveryTimeRule.min_distance)).all()


@router.post("/delivery-times", status_code=201)
def create_delivery_time_rule(
    data: DeliveryTimeRuleIn,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    _check_bounds(data.min_distance, data.max_distance, "distance")
    _check_bounds(data.min_time, data.max_time, "time")
    if data.is_active:
        check_time_rule_overlap(session, data.min_distance, data.max_distance)

    return _save(session, DeliveryTimeRule(**data.model_dump()))


@router.put("/delivery-times/{rule_id}")
def update_delivery_time_rule(
    rule_id: int,
    data: DeliveryTimeRuleUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    rule = _get_or_404(session, DeliveryTimeRule, rule_id, "Delivery time rule")
    changes = data.model_dump(exclude_unset=True)

    min_distance = changes.get("min_distance", rule.min_distance)
    max_distance = changes.get("max_distance", rule.max_distance)
    _check_bounds(min_distance, max_distance, "distance")
    _check_bounds(changes.get("min_time", rule.min_time), changes.get("max_time", rule.max_time), "time")
    if changes.get("is_active", rule.is_active):
        check_time_rule_overlap(session, min_distance, max_distance, exclude_id=rule.id)

    return _save(session, apply_rule_update(rule, changes))


@router.patch("/delivery-times/{rule_id}/toggle")
def toggle_delivery_time_rule(
    rule_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    rule = _get_or_404(session, DeliveryTimeRule, rule_id, "Delivery time rule")
    if not rule.is_active:
        check_time_rule_overlap(session, rule.min_distance, rule.max_distance, exclude_id=rule.id)
    return _save(session, apply_rule_update(rule, {"is_active": not rule.is_active}))


@router.delete("/delivery-times/{rule_id}")
def delete_delivery_time_rule(
    rule_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    rule = _get_or_404(session, DeliveryTimeRule, rule_id, "Delivery time rule")
    session.delete(rule)
    session.commit()
    return {"message": "Delivery time rule deleted"}


# -------------------------
# MIN CART AMOUNT
# -------------------------

@router.get("/min-cart-amount")
def get_min_cart(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return get_min_cart_amount(session)


@router.put("/min-cart-amount")
def update_min_cart(
    data: MinCartAmountUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    setting = get_min_cart_amount(session)
    setting.amount = data.amount
    setting.is_active = data.is_active
    setting.updated_by = admin.id
    setting.updated_at = datetime.utcnow()
    return _save(session, setting)


# -------------------------
# SYSTEM STATUS
# -------------------------

@router.get("/system-status")
def get_site_status(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return get_system_status(session)


@router.put("/system-status")
def update_site_status(
    data: SystemStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    status = get_system_status(session)
    status.status = data.status
    status.message = data.message
    status.updated_at = datetime.utcnow()
    status = _save(session, status)

    logger.warning(f"Site status set to {status.status.value} by admin {admin.id}")
    return status


# -------------------------
# PAYMENT METHODS
# -------------------------

@router.get("/payment-methods")
def list_payment_methods_admin(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    return session.exec(select(PaymentMethod).order_by(PaymentMethod.id)).all()


@router.post("/payment-methods", status_code=201)
def create_payment_method(
    data: PaymentMethodIn,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    code = normalize_payment_code(data.code)
    exists = session.exec(select(PaymentMethod).where(PaymentMethod.code == code)).first()
    if exists:
        raise HTTPException(400, "Payment method already exists")

    return _save(session, PaymentMethod(**data.model_dump(exclude={"code"}), code=code))


@router.put("/payment-methods/{method_id}")
def update_payment_method(
    method_id: int,
    data: PaymentMethodUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    method = _get_or_404(session, PaymentMethod, method_id, "Payment method")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(method, key, value)
    return _save(session, method)
