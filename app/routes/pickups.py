from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.admin import require_customer
from app.exceptions import NotAuthorized
from app.models.pickup import PickupJob
from app.models.user import User
from app.constants.order_status import ActorRole
from app.schemas.orders_schemas import (
    StatusTransitionRequest,
    StatusTransitionResponse,
    history_entries,
    pickup_detail,
)
from app.schemas.pickup_schemas import PickupCreate
from app.services.order_event_service import pickup_history
from app.services.order_lifecycle import Actor
from app.services.pickup_service import book_pickup, get_pickup, transition_pickup_status
from app.utils.pagination import paginate
from app.utils.token import get_current_user


router = APIRouter()


@router.post("", status_code=201)
def create_pickup(
    data: PickupCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    pickup = book_pickup(session, current_user, data)
    return {
        "message": "Pickup booked",
        "pickup": pickup_detail(pickup, pickup_history(session, pickup.id)),
    }


@router.get("/mine")
def list_my_pickups(
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    query = (
        select(PickupJob)
        .where(PickupJob.customer_id == current_user.id)
        .order_by(PickupJob.created_at.desc())
    )
    return paginate(session=session, query=query, page=page, limit=limit, serializer=pickup_detail)


@router.get("/{pickup_id}")
def get_pickup_details(
    pickup_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    pickup = get_pickup(session, pickup_id)
    if current_user.role != ActorRole.admin and current_user.id not in (
        pickup.customer_id, pickup.delivery_partner_id
    ):
        raise NotAuthorized("You cannot view this pickup")

    return pickup_detail(pickup, pickup_history(session, pickup.id))


@router.patch("/{pickup_id}/status", response_model=StatusTransitionResponse)
def update_pickup_status(
    pickup_id: int,
    data: StatusTransitionRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    pickup = transition_pickup_status(
        session, pickup_id, data.status, Actor.from_user(current_user), note=data.note
    )

    return StatusTransitionResponse(
        id=pickup.id,
        status=pickup.status.value,
        status_history=history_entries(pickup_history(session, pickup.id)),
    )
