from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlmodel import select

from app.constants.order_status import ActorRole, OrderStatus
from app.exceptions import NotFound, StateConflict
from app.models.order import Order
from app.models.order_event import OrderStatusEvent
from app.schemas.checkout_schemas import CartLine, PlaceOrderRequest
from app.services import order_service
from app.services.order_lifecycle import Actor


@pytest.fixture
def order(session, customer, checkout_ready):
    request = PlaceOrderRequest(
        address_id=checkout_ready["address"].id,
        items=[CartLine(product_id=checkout_ready["product"].id, quantity=1)],
        payment_method="cash",
    )
    placed, _, _ = order_service.submit_order(session, customer, request)
    return placed


@pytest.mark.parametrize("raw,expected", [
    ("COD", "cash"), ("Cash on Delivery", "cash"), ("UPI", "upi"), ("debit", "online"), ("card", "online"),
])
def test_payment_code_aliases(raw, expected):
    assert order_service.normalize_payment_code(raw) == expected


def test_submit_snapshots_prices(session, order):
    assert order.subtotal == Decimal("290.00")
    assert order.delivery_fee == Decimal("0.00")   # below the 500 band
    assert order.total == Decimal("314.50")
    assert order.items[0].unit_price == Decimal("290.00")
    assert order.progress_status == OrderStatus.pending


def test_lost_races_end_in_state_conflict(session, order, restaurant, monkeypatch):
    order_service.transition_order_status(session, order.id, "confirmed", Actor(ActorRole.admin, None))

    # a reader that keeps seeing the pre-confirmation row
    stale = SimpleNamespace(
        id=order.id,
        customer_id=order.customer_id,
        restaurant_id=order.restaurant_id,
        delivery_partner_id=None,
        status=OrderStatus.pending,
        progress_status=OrderStatus.pending,
        created_at=datetime.utcnow(),
    )
    monkeypatch.setattr(order_service, "get_order", lambda *args, **kwargs: stale)

    with pytest.raises(StateConflict):
        order_service.transition_order_status(
            session, order.id, "confirmed", Actor(ActorRole.restaurant, restaurant.id)
        )

    monkeypatch.undo()
    events = session.exec(select(OrderStatusEvent).where(OrderStatusEvent.order_id == order.id)).all()
    assert [e.status for e in events] == ["pending", "confirmed"]
    assert session.get(Order, order.id, populate_existing=True).status == OrderStatus.confirmed


def test_assign_requires_a_delivery_partner(session, order, customer, rider):
    with pytest.raises(NotFound):
        order_service.assign_delivery_partner(session, order.id, customer.id)

    assigned = order_service.assign_delivery_partner(session, order.id, rider.id)
    assert assigned.delivery_partner_id == rider.id


def test_order_numbers_are_unique(session, order):
    number = order_service.generate_order_number(session)

    assert number.startswith("ORD-")
    assert number != order.order_number
