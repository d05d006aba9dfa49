from types import SimpleNamespace

import pytest

from app.constants.order_status import ActorRole, PickupStatus
from app.exceptions import IllegalTransition, NotAuthorized
from app.services.order_lifecycle import Actor, evaluate_pickup_transition

CUSTOMER = Actor(ActorRole.customer, 1)
RIDER = Actor(ActorRole.delivery, 3)
ADMIN = Actor(ActorRole.admin, 99)


def pickup(status, rider_id=3):
    return SimpleNamespace(id=8, customer_id=1, delivery_partner_id=rider_id, status=status)


def test_partner_walks_the_flow():
    steps = [
        (PickupStatus.pending, "accepted"),
        (PickupStatus.accepted, "picked"),
        (PickupStatus.picked, "on_the_way"),
        (PickupStatus.on_the_way, "delivered"),
    ]
    for current, target in steps:
        assert evaluate_pickup_transition(pickup(current), target, RIDER) == PickupStatus(target)


def test_pending_straight_to_on_the_way_is_illegal():
    with pytest.raises(IllegalTransition):
        evaluate_pickup_transition(pickup(PickupStatus.pending), "on_the_way", RIDER)


def test_alias_spelling():
    result = evaluate_pickup_transition(pickup(PickupStatus.accepted), "Picked Up", RIDER)

    assert result == PickupStatus.picked


@pytest.mark.parametrize("current", [PickupStatus.pending, PickupStatus.accepted])
def test_customer_cancels_before_collection(current):
    assert evaluate_pickup_transition(pickup(current), "cancelled", CUSTOMER) == PickupStatus.cancelled


def test_customer_cannot_cancel_after_collection():
    with pytest.raises(IllegalTransition):
        evaluate_pickup_transition(pickup(PickupStatus.picked), "cancelled", CUSTOMER)


def test_restaurant_has_no_say():
    with pytest.raises(NotAuthorized):
        evaluate_pickup_transition(pickup(PickupStatus.pending), "accepted", Actor(ActorRole.restaurant, 2))


def test_unassigned_partner_is_rejected():
    with pytest.raises(NotAuthorized):
        evaluate_pickup_transition(pickup(PickupStatus.pending, rider_id=None), "accepted", RIDER)


def test_admin_forces_but_terminal_holds():
    assert evaluate_pickup_transition(pickup(PickupStatus.pending), "delivered", ADMIN) == PickupStatus.delivered

    with pytest.raises(IllegalTransition):
        evaluate_pickup_transition(pickup(PickupStatus.delivered), "pending", ADMIN)


def test_idempotent_resubmit():
    assert evaluate_pickup_transition(pickup(PickupStatus.picked), "picked", RIDER) is None
