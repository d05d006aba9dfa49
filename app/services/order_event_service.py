# app/services/order_event_service.py

from datetime import datetime
from typing import List, Optional
from sqlmodel import Session, select
from app.models.order_event import OrderStatusEvent, PickupStatusEvent
from app.services.order_lifecycle import Actor




def log_order_status(
    session: Session,
    order_id: int,
    status: str,
    actor: Actor,
    message: Optional[str] = None,
    created_at: Optional[datetime] = None,
):
    """
    Append-only status history for the order timeline
    """

    event = OrderStatusEvent(
        order_id=order_id,
        status=status,
        actor_role=actor.role,
        actor_id=actor.user_id,
        message=message,
        created_at=created_at or datetime.utcnow(),
    )

    session.add(event)


def log_pickup_status(
    session: Session,
    pickup_id: int,
    status: str,
    actor: Actor,
    message: Optional[str] = None,
    created_at: Optional[datetime] = None,
):
    session.add(PickupStatusEvent(
        pickup_id=pickup_id,
        status=status,
        actor_role=actor.role,
        actor_id=actor.user_id,
        message=message,
        created_at=created_at or datetime.utcnow(),
    ))


def order_history(session: Session, order_id: int) -> List[OrderStatusEvent]:
    return list(session.exec(
        select(OrderStatusEvent)
        .where(OrderStatusEvent.order_id == order_id)
        .order_by(OrderStatusEvent.created_at, OrderStatusEvent.id)
    ).all())


def pickup_history(session: Session, pickup_id: int) -> List[PickupStatusEvent]:
    return list(session.exec(
        select(PickupStatusEvent)
        .where(PickupStatusEvent.pickup_id == pickup_id)
        .order_by(PickupStatusEvent.created_at, PickupStatusEvent.id)
    ).all())
