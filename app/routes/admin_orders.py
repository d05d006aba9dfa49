# -------- ADMIN ORDERS --------
from datetime import date, timedelta
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, String, select
from sqlalchemy import cast
from app.constants.order_status import normalize_order_status
from app.database import get_session
from app.dependencies.admin import require_admin
from app.models.order import Order
from app.models.user import User
from app.schemas.orders_schemas import (
    AssignPartnerRequest,
    StatusTransitionRequest,
    StatusTransitionResponse,
    history_entries,
    order_detail,
    order_summary,
)
from app.services.order_event_service import order_history
from app.services.order_lifecycle import Actor
from app.services.order_service import (
    assign_delivery_partner,
    get_order,
    transition_order_status,
)
from app.utils.pagination import paginate


router = APIRouter()


@router.get("")
def list_orders(
    page: int = 1,
    limit: int = 10,
    search: Optional[str] = None,
    status: Optional[str] = None,
    restaurant_id: Optional[int] = None,
    delivery_partner_id: Optional[int] = None,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    query = (
        select(Order)
        .join(User, User.id == Order.customer_id)
        .order_by(Order.created_at.desc())
    )

    if search:
        query = query.where(
            (User.name.ilike(f"%{search}%")) |
            (Order.order_number.ilike(f"%{search}%")) |
            (cast(Order.id, String).ilike(f"%{search}%"))
        )

    if status:
        query = query.where(Order.status == normalize_order_status(status))

    if restaurant_id:
        query = query.where(Order.restaurant_id == restaurant_id)

    if delivery_partner_id:
        query = query.where(Order.delivery_partner_id == delivery_partner_id)

    if start_date:
        query = query.where(Order.created_at >= start_date)

    if end_date:
        # inclusive of the whole end day
        query = query.where(Order.created_at < end_date + timedelta(days=1))

    return paginate(session=session, query=query, page=page, limit=limit, serializer=order_summary)


@router.get("/{order_id}")
def get_order_admin(
    order_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    order = get_order(session, order_id)
    return order_detail(order, order_history(session, order.id))


@router.patch("/{order_id}/assign")
def assign_order(
    order_id: int,
    data: AssignPartnerRequest,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    order = assign_delivery_partner(session, order_id, data.delivery_partner_id)
    return {
        "message": "Delivery partner assigned",
        "order_id": order.id,
        "delivery_partner_id": order.delivery_partner_id,
    }


@router.patch("/{order_id}/status", response_model=StatusTransitionResponse)
def update_order_status(
    order_id: int,
    data: StatusTransitionRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    order = transition_order_status(
        session, order_id, data.status, Actor.from_user(admin), note=data.note
    )

    return StatusTransitionResponse(
        id=order.id,
        status=order.status.value,
        status_history=history_entries(order_history(session, order.id)),
    )
