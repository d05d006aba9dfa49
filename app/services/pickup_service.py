# app/services/pickup_service.py
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from app.constants.order_status import ActorRole, PickupStatus
from app.exceptions import NotFound, StateConflict
from app.models.pickup import PickupJob
from app.models.user import User
from app.schemas.pickup_schemas import PickupCreate
from app.services.order_event_service import log_pickup_status
from app.services.order_lifecycle import Actor, evaluate_pickup_transition

logger = logging.getLogger(__name__)

MAX_TRANSITION_ATTEMPTS = 3


def get_pickup(session: Session, pickup_id: int, fresh: bool = False) -> PickupJob:
    pickup = session.get(PickupJob, pickup_id, populate_existing=fresh)
    if not pickup:
        raise NotFound("Pickup not found")
    return pickup


def book_pickup(session: Session, customer: User, data: PickupCreate) -> PickupJob:
    now = datetime.utcnow()
    pickup = PickupJob(
        customer_id=customer.id,
        pickup_address=data.pickup_address,
        drop_address=data.drop_address,
        item_type=data.item_type,
        note=data.note,
        total_amount=data.total_amount,
        status=PickupStatus.pending,
        created_at=now,
        updated_at=now,
    )
    try:
        session.add(pickup)
        session.flush()
        log_pickup_status(
            session, pickup.id, PickupStatus.pending.value,
            Actor.from_user(customer), "Pickup booked", created_at=now,
        )
        session.commit()
    except Exception as e:
        logger.error(f"Error booking pickup for customer {customer.id}: {e}")
        session.rollback()
        raise

    session.refresh(pickup)
    logger.info(f"Pickup {pickup.id} booked by customer {customer.id}")
    return pickup


def transition_pickup_status(
    session: Session,
    pickup_id: int,
    target,
    actor: Actor,
    note: Optional[str] = None,
) -> PickupJob:
    for attempt in range(MAX_TRANSITION_ATTEMPTS):
        pickup = get_pickup(session, pickup_id, fresh=True)
        expected = pickup.status

        new_status = evaluate_pickup_transition(pickup, target, actor)
        if new_status is None:
            return pickup

        when = datetime.utcnow()
        values = {"status": new_status, "updated_at": when}
        if new_status == PickupStatus.cancelled:
            values["cancel_reason"] = note or f"Cancelled by {actor.role.value}"

        try:
            result = session.execute(
                update(PickupJob)
                .where(PickupJob.id == pickup_id, PickupJob.status == expected)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                log_pickup_status(session, pickup_id, new_status.value, actor, note, created_at=when)
                session.commit()
                logger.info(
                    f"Pickup {pickup_id}: {PickupStatus(expected).value} → {new_status.value} by {actor.label}"
                )
                return get_pickup(session, pickup_id, fresh=True)
            session.rollback()
        except Exception as e:
            logger.error(f"Error updating pickup {pickup_id} status: {e}")
            session.rollback()
            raise

        logger.warning(f"Pickup {pickup_id} changed concurrently (attempt {attempt + 1}), re-evaluating")

    raise StateConflict(f"Pickup #{pickup_id} is being updated by someone else, please retry")


def assign_pickup_partner(session: Session, pickup_id: int, partner_id: int) -> PickupJob:
    pickup = get_pickup(session, pickup_id)
    partner = session.get(User, partner_id)
    if not partner or partner.role != ActorRole.delivery:
        raise NotFound("Delivery partner not found")

    pickup.delivery_partner_id = partner.id
    pickup.updated_at = datetime.utcnow()
    session.add(pickup)
    session.commit()
    session.refresh(pickup)
    logger.info(f"Pickup {pickup_id} assigned to delivery partner {partner_id}")
    return pickup
