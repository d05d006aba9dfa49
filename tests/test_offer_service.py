from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from app.constants.order_status import ActorRole
from app.exceptions import OfferError
from app.models.offer import DiscountType, Offer, OfferRedemption
from app.services import offer_service
from conftest import make_offer, make_user


def reason_of(session, code, customer_id, subtotal="500", now=None):
    with pytest.raises(OfferError) as exc:
        offer_service.validate_offer(session, code, customer_id, Decimal(subtotal), now=now)
    return exc.value.reason


class TestValidateOffer:
    def test_valid_code_is_case_insensitive(self, session, customer):
        make_offer(session, "WELCOME50")

        assert offer_service.validate_offer(session, "  welcome50 ", customer.id, Decimal("500")).code == "WELCOME50"

    def test_unknown_code(self, session, customer):
        assert reason_of(session, "NOPE", customer.id) == OfferError.NOT_FOUND

    def test_inactive(self, session, customer):
        make_offer(session, "OLD", is_active=False)

        assert reason_of(session, "OLD", customer.id) == OfferError.INACTIVE

    def test_not_started_and_expired(self, session, customer):
        now = datetime.utcnow()
        make_offer(session, "SOON", valid_from=now + timedelta(days=2), valid_to=now + timedelta(days=9))
        make_offer(session, "GONE", valid_from=now - timedelta(days=9), valid_to=now - timedelta(days=2))

        assert reason_of(session, "SOON", customer.id) == OfferError.NOT_STARTED
        assert reason_of(session, "GONE", customer.id) == OfferError.EXPIRED

    def test_below_min_order(self, session, customer):
        make_offer(session, "BIG", min_order_value=Decimal("600"))

        assert reason_of(session, "BIG", customer.id, subtotal="599.99") == OfferError.BELOW_MIN_ORDER

    def test_inactive_is_reported_before_expiry(self, session, customer):
        now = datetime.utcnow()
        make_offer(session, "DEAD", is_active=False, valid_to=now - timedelta(days=1), valid_from=now - timedelta(days=5))

        assert reason_of(session, "DEAD", customer.id) == OfferError.INACTIVE

    def test_usage_exhausted(self, session, customer):
        make_offer(session, "FLAT100", total_usage_limit=10, usage_count=10)

        assert reason_of(session, "FLAT100", customer.id) == OfferError.USAGE_EXHAUSTED

    def test_customer_limit(self, session, customer):
        offer = make_offer(session, "ONCE")
        session.add(OfferRedemption(offer_id=offer.id, customer_id=customer.id, count=1))
        session.commit()

        assert reason_of(session, "ONCE", customer.id) == OfferError.CUSTOMER_LIMIT_REACHED

    def test_validation_does_not_touch_counters(self, session, customer):
        offer = make_offer(session, "LOOK")

        offer_service.validate_offer(session, "LOOK", customer.id, Decimal("500"))
        session.refresh(offer)

        assert offer.usage_count == 0
        assert session.exec(select(OfferRedemption)).first() is None

    def test_preview_returns_discount(self, session, customer):
        make_offer(session, "HALF", discount_type=DiscountType.percentage,
                   discount_value=Decimal("50"), max_discount=Decimal("150"))

        offer, discount = offer_service.preview_offer(session, "half", customer.id, Decimal("580"))

        assert offer.code == "HALF"
        assert discount == Decimal("150.00")


class TestReserveOfferUsage:
    def test_increments_both_counters(self, session, customer):
        offer = make_offer(session, "TWICE", per_customer_limit=2, total_usage_limit=5)

        offer_service.reserve_offer_usage(session, offer, customer.id)
        session.commit()
        offer_service.reserve_offer_usage(session, offer, customer.id)
        session.commit()

        session.refresh(offer)
        redemption = session.exec(select(OfferRedemption)).one()
        assert offer.usage_count == 2
        assert redemption.count == 2

    def test_customer_limit_enforced_at_write_time(self, session, customer):
        offer = make_offer(session, "ONCE", total_usage_limit=5)
        offer_service.reserve_offer_usage(session, offer, customer.id)
        session.commit()

        with pytest.raises(OfferError) as exc:
            offer_service.reserve_offer_usage(session, offer, customer.id)
        session.rollback()

        assert exc.value.reason == OfferError.CUSTOMER_LIMIT_REACHED
        session.refresh(offer)
        assert offer.usage_count == 1

    def test_global_limit_enforced_at_write_time(self, session, customer, other_customer):
        offer = make_offer(session, "LAST", total_usage_limit=1)
        offer_service.reserve_offer_usage(session, offer, customer.id)
        session.commit()

        with pytest.raises(OfferError) as exc:
            offer_service.reserve_offer_usage(session, offer, other_customer.id)
        session.rollback()

        assert exc.value.reason == OfferError.USAGE_EXHAUSTED

    def test_unlimited_offer(self, session, customer, other_customer):
        offer = make_offer(session, "ALWAYS", total_usage_limit=None)

        offer_service.reserve_offer_usage(session, offer, customer.id)
        offer_service.reserve_offer_usage(session, offer, other_customer.id)
        session.commit()

        session.refresh(offer)
        assert offer.usage_count == 2


def test_racing_redemptions_never_exceed_the_cap(tmp_path):
    """Both customers pass validation; only one reservation may land."""
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)

    with Session(engine) as setup:
        first = make_user(setup, ActorRole.customer, "First")
        second = make_user(setup, ActorRole.customer, "Second")
        make_offer(setup, "FLAT100", total_usage_limit=1)
        first_id, second_id = first.id, second.id

    with Session(engine) as session_a, Session(engine) as session_b:
        offer_a = offer_service.validate_offer(session_a, "FLAT100", first_id, Decimal("500"))
        offer_b = offer_service.validate_offer(session_b, "FLAT100", second_id, Decimal("500"))

        offer_service.reserve_offer_usage(session_a, offer_a, first_id)
        session_a.commit()

        with pytest.raises(OfferError) as exc:
            offer_service.reserve_offer_usage(session_b, offer_b, second_id)
        session_b.rollback()

    assert exc.value.reason == OfferError.USAGE_EXHAUSTED
    with Session(engine) as check:
        offer = check.exec(select(Offer).where(Offer.code == "FLAT100")).one()
        assert offer.usage_count == 1
        assert len(check.exec(select(OfferRedemption)).all()) == 1

    engine.dispose()
