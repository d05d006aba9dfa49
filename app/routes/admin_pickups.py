from typing import Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from app.constants.order_status import normalize_pickup_status
from app.database import get_session
from app.dependencies.admin import require_admin
from app.models.pickup import PickupJob
from app.models.user import User
from app.schemas.orders_schemas import (
    AssignPartnerRequest,
    StatusTransitionRequest,
    StatusTransitionResponse,
    history_entries,
    pickup_detail,
)
from app.services.order_event_service import pickup_history
from app.services.order_lifecycle import Actor
from app.services.pickup_service import (
    assign_pickup_partner,
    get_pickup,
    transition_pickup_status,
)
from app.utils.pagination import paginate


router = APIRouter()


@router.get("")
def list_pickups(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    query = select(PickupJob).order_by(PickupJob.created_at.desc())
    if status:
        query = query.where(PickupJob.status == normalize_pickup_status(status))

    return paginate(session=session, query=query, page=page, limit=limit, serializer=pickup_detail)


@router.get("/{pickup_id}")
def get_pickup_admin(
    pickup_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    pickup = get_pickup(session, pickup_id)
    return pickup_detail(pickup, pickup_history(session, pickup.id))


@router.patch("/{pickup_id}/assign")
def assign_pickup(
    pickup_id: int,
    data: AssignPartnerRequest,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    pickup = assign_pickup_partner(session, pickup_id, data.delivery_partner_id)
    return {
        "message": "Delivery partner assigned",
        "pickup_id": pickup.id,
        "delivery_partner_id": pickup.delivery_partner_id,
    }


@router.patch("/{pickup_id}/status", response_model=StatusTransitionResponse)
def update_pickup_status(
    pickup_id: int,
    data: StatusTransitionRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    pickup = transition_pickup_status(
        session, pickup_id, data.status, Actor.from_user(admin), note=data.note
    )

    return StatusTransitionResponse(
        id=pickup.id,
        status=pickup.status.value,
        status_history=history_entries(pickup_history(session, pickup.id)),
    )
