from typing import Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from app.constants.order_status import ActorRole, normalize_order_status
from app.database import get_session
from app.dependencies.admin import require_customer
from app.exceptions import NotAuthorized
from app.models.order import Order
from app.models.user import User
from app.schemas.orders_schemas import (
    StatusTransitionRequest,
    StatusTransitionResponse,
    history_entries,
    order_detail,
    order_summary,
)
from app.schemas.review_schemas import ItemReviewCreate
from app.services.order_event_service import order_history
from app.services.order_lifecycle import Actor
from app.services.order_service import attach_review, get_order, transition_order_status
from app.utils.pagination import paginate
from app.utils.token import get_current_user


router = APIRouter()


def _can_view(order: Order, user: User) -> bool:
    if user.role == ActorRole.admin:
        return True
    return user.id in (order.customer_id, order.restaurant_id, order.delivery_partner_id)


@router.get("/my-orders")
def list_my_orders(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    query = (
        select(Order)
        .where(Order.customer_id == current_user.id)
        .order_by(Order.created_at.desc())
    )

    if status:
        query = query.where(Order.status == normalize_order_status(status))

    return paginate(session=session, query=query, page=page, limit=limit, serializer=order_summary)


@router.get("/{order_id}")
def get_order_details(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = get_order(session, order_id)
    if not _can_view(order, current_user):
        raise NotAuthorized("You cannot view this order")

    return order_detail(order)


@router.get("/{order_id}/track")
def track_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = get_order(session, order_id)
    if not _can_view(order, current_user):
        raise NotAuthorized("You cannot view this order")

    return order_detail(order, order_history(session, order.id))


# Any role: the lifecycle decides what this actor may do

@router.patch("/{order_id}/status", response_model=StatusTransitionResponse)
def update_order_status(
    order_id: int,
    data: StatusTransitionRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = transition_order_status(
        session,
        order_id,
        data.status,
        Actor.from_user(current_user),
        note=data.note,
    )

    return StatusTransitionResponse(
        id=order.id,
        status=order.status.value,
        status_history=history_entries(order_history(session, order.id)),
    )


@router.post("/{order_id}/cancel", response_model=StatusTransitionResponse)
def cancel_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    order = transition_order_status(
        session, order_id, "cancelled", Actor.from_user(current_user),
        note="Cancelled by customer",
    )

    return StatusTransitionResponse(
        id=order.id,
        status=order.status.value,
        status_history=history_entries(order_history(session, order.id)),
    )


@router.post("/{order_id}/items/{item_id}/review")
def review_order_item(
    order_id: int,
    item_id: int,
    data: ItemReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    item = attach_review(
        session, order_id, item_id, current_user, data.rating, data.comment
    )

    return {
        "message": "Review submitted",
        "item_id": item.id,
        "rating": item.review_rating,
        "comment": item.review_comment,
        "reviewed_at": item.reviewed_at,
    }
