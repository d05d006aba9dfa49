# app/services/order_lifecycle.py
"""Status machines for orders and pickup jobs.

These functions only decide; they never write. ``evaluate_*`` returns the
normalized target status when the transition must be applied, ``None`` for an
idempotent resubmit, and raises ``NotAuthorized`` / ``IllegalTransition``
otherwise. Persistence lives in ``order_service`` and ``pickup_service``.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from app.constants.order_status import (
    ActorRole,
    CUSTOMER_PICKUP_CANCELLABLE,
    DELIVERY_TOLERATED_SOURCES,
    HEAVY_TRAFFIC_SOURCES,
    ORDER_NEXT,
    ORDER_ROLE_TARGETS,
    ORDER_TERMINAL,
    OrderStatus,
    PICKUP_NEXT,
    PICKUP_ROLE_TARGETS,
    PICKUP_TERMINAL,
    PickupStatus,
    normalize_order_status,
    normalize_pickup_status,
)
from app.exceptions import IllegalTransition, NotAuthorized


@dataclass(frozen=True)
class Actor:
    role: ActorRole
    user_id: Optional[int] = None

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(role=ActorRole(user.role), user_id=user.id)

    @property
    def label(self) -> str:
        if self.user_id is None:
            return self.role.value
        return f"{self.role.value}:{self.user_id}"


# -------------------------
# ORDERS
# -------------------------

def _check_order_ownership(order, actor: Actor) -> None:
    if actor.role == ActorRole.admin:
        return
    owner = {
        ActorRole.customer: order.customer_id,
        ActorRole.restaurant: order.restaurant_id,
        ActorRole.delivery: order.delivery_partner_id,
    }[actor.role]
    if owner is None or owner != actor.user_id:
        raise NotAuthorized(f"Order #{order.id} is not assigned to this {actor.role.value}")


def order_progress(order) -> OrderStatus:
    current = OrderStatus(order.status)
    if current == OrderStatus.heavy_traffic:
        return OrderStatus(order.progress_status)
    return current


def evaluate_order_transition(
    order,
    target,
    actor: Actor,
    now: Optional[datetime] = None,
    cancel_window_minutes: int = 5,
) -> Optional[OrderStatus]:
    target = normalize_order_status(target)
    current = OrderStatus(order.status)

    if target not in ORDER_ROLE_TARGETS[actor.role]:
        raise NotAuthorized(f"A {actor.role.value} cannot set an order to {target.value}")

    _check_order_ownership(order, actor)

    if target == current:
        return None

    if current in ORDER_TERMINAL:
        raise IllegalTransition(current.value, target.value)

    progress = order_progress(order)

    if actor.role == ActorRole.admin:
        return target

    if actor.role == ActorRole.customer:
        now = now or datetime.utcnow()
        if now - order.created_at > timedelta(minutes=cancel_window_minutes):
            raise NotAuthorized(
                f"Order can only be cancelled within {cancel_window_minutes} minutes of placing."
            )
        return target

    if target == OrderStatus.heavy_traffic:
        if progress in HEAVY_TRAFFIC_SOURCES:
            return target
        raise IllegalTransition(current.value, target.value)

    if ORDER_NEXT.get(progress) == target:
        return target

    if actor.role == ActorRole.delivery and progress in DELIVERY_TOLERATED_SOURCES.get(target, ()):
        return target

    raise IllegalTransition(current.value, target.value)


# -------------------------
# PICKUPS
# -------------------------

def _check_pickup_ownership(pickup, actor: Actor) -> None:
    if actor.role == ActorRole.admin:
        return
    if actor.role == ActorRole.customer:
        owner = pickup.customer_id
    elif actor.role == ActorRole.delivery:
        owner = pickup.delivery_partner_id
    else:
        owner = None
    if owner is None or owner != actor.user_id:
        raise NotAuthorized(f"Pickup #{pickup.id} is not assigned to this {actor.role.value}")


def evaluate_pickup_transition(pickup, target, actor: Actor) -> Optional[PickupStatus]:
    target = normalize_pickup_status(target)
    current = PickupStatus(pickup.status)

    allowed = PICKUP_ROLE_TARGETS.get(actor.role, set())
    if target not in allowed:
        raise NotAuthorized(f"A {actor.role.value} cannot set a pickup to {target.value}")

    _check_pickup_ownership(pickup, actor)

    if target == current:
        return None

    if current in PICKUP_TERMINAL:
        raise IllegalTransition(current.value, target.value)

    if actor.role == ActorRole.admin:
        return target

    if actor.role == ActorRole.customer:
        if current in CUSTOMER_PICKUP_CANCELLABLE:
            return target
        raise IllegalTransition(current.value, target.value)

    if PICKUP_NEXT.get(current) == target:
        return target

    raise IllegalTransition(current.value, target.value)
