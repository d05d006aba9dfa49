# app/services/offer_service.py
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.exceptions import OfferError
from app.models.offer import Offer, OfferRedemption
from app.services.pricing_service import as_decimal, compute_discount

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def get_offer_by_code(session: Session, code: str) -> Optional[Offer]:
    return session.exec(
        select(Offer).where(Offer.code == normalize_code(code))
    ).first()


def customer_redemptions(session: Session, offer_id: int, customer_id: int) -> int:
    redemption = session.exec(
        select(OfferRedemption).where(
            OfferRedemption.offer_id == offer_id,
            OfferRedemption.customer_id == customer_id,
        )
    ).first()
    return redemption.count if redemption else 0


def validate_offer(
    session: Session,
    code: str,
    customer_id: int,
    subtotal: Decimal,
    now: Optional[datetime] = None,
) -> Offer:
    """Run the offer checks in order; the first failing one is reported.

    Read-only: usage counters only move in ``reserve_offer_usage``.
    """
    now = now or datetime.utcnow()
    offer = get_offer_by_code(session, code)

    if not offer:
        raise OfferError(OfferError.NOT_FOUND, "Invalid or expired promo code")

    if not offer.is_active:
        raise OfferError(OfferError.INACTIVE, "This promo code is no longer active")

    if now < offer.valid_from:
        raise OfferError(OfferError.NOT_STARTED, "This promo code is not valid yet")

    if now > offer.valid_to:
        raise OfferError(OfferError.EXPIRED, "This promo code has expired")

    min_order = as_decimal(offer.min_order_value or 0)
    if as_decimal(subtotal) < min_order:
        raise OfferError(
            OfferError.BELOW_MIN_ORDER,
            f"Minimum order value is ₹{min_order}",
        )

    if offer.total_usage_limit is not None and offer.usage_count >= offer.total_usage_limit:
        raise OfferError(OfferError.USAGE_EXHAUSTED, "This promo code has reached its usage limit")

    used = customer_redemptions(session, offer.id, customer_id)
    if used >= offer.per_customer_limit:
        raise OfferError(
            OfferError.CUSTOMER_LIMIT_REACHED,
            f"You've already used this promo code {offer.per_customer_limit} time(s)",
        )

    return offer


def reserve_offer_usage(session: Session, offer: Offer, customer_id: int) -> None:
    """Take one usage unit from the global and per-customer counters.

    Both increments are conditional UPDATEs so the limit is re-checked by the
    database at write time. Runs inside the caller's transaction; the caller
    commits together with the order, or rolls everything back on failure.
    """
    result = session.execute(
        update(Offer)
        .where(Offer.id == offer.id)
        .where(
            or_(
                Offer.total_usage_limit.is_(None),
                Offer.usage_count < Offer.total_usage_limit,
            )
        )
        .values(usage_count=Offer.usage_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(f"Offer {offer.code} usage cap hit at reservation time")
        raise OfferError(OfferError.USAGE_EXHAUSTED, "This promo code has reached its usage limit")

    _bump_customer_counter(session, offer, customer_id)
    logger.info(f"Reserved one use of offer {offer.code} for customer {customer_id}")


def _bump_customer_counter(session: Session, offer: Offer, customer_id: int, retry: bool = True) -> None:
    result = session.execute(
        update(OfferRedemption)
        .where(
            OfferRedemption.offer_id == offer.id,
            OfferRedemption.customer_id == customer_id,
            OfferRedemption.count < offer.per_customer_limit,
        )
        .values(count=OfferRedemption.count + 1, last_used_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        return

    exists = session.exec(
        select(OfferRedemption.id).where(
            OfferRedemption.offer_id == offer.id,
            OfferRedemption.customer_id == customer_id,
        )
    ).first()
    if exists is not None:
        raise OfferError(
            OfferError.CUSTOMER_LIMIT_REACHED,
            f"You've already used this promo code {offer.per_customer_limit} time(s)",
        )

    # first redemption; the unique key catches a concurrent first insert
    try:
        with session.begin_nested():
            session.add(OfferRedemption(offer_id=offer.id, customer_id=customer_id, count=1))
    except IntegrityError:
        if not retry:
            raise
        _bump_customer_counter(session, offer, customer_id, retry=False)


def preview_offer(session: Session, code: str, customer_id: int, subtotal: Decimal):
    offer = validate_offer(session, code, customer_id, subtotal)
    return offer, compute_discount(offer, as_decimal(subtotal))


def list_public_offers(session: Session, now: Optional[datetime] = None) -> List[Offer]:
    now = now or datetime.utcnow()
    return list(session.exec(
        select(Offer)
        .where(Offer.is_active == True)  # noqa: E712
        .where(Offer.is_public == True)  # noqa: E712
        .where(Offer.valid_from <= now)
        .where(Offer.valid_to >= now)
        .order_by(Offer.valid_to)
    ).all())
