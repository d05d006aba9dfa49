from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select
from app.constants.order_status import normalize_order_status
from app.database import get_session
from app.dependencies.admin import require_delivery
from app.models.order import Order
from app.models.pickup import PickupJob
from app.models.user import User
from app.schemas.checkout_schemas import DeliveryEstimate
from app.schemas.orders_schemas import order_detail, pickup_detail
from app.services.delivery_time_service import get_delivery_estimate
from app.utils.pagination import paginate


router = APIRouter()


@router.get("/estimate", response_model=DeliveryEstimate)
def delivery_estimate(
    distance_km: float = Query(ge=0),
    session: Session = Depends(get_session)
):
    return get_delivery_estimate(session, distance_km)


@router.get("/orders")
def my_delivery_orders(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_delivery)
):
    query = (
        select(Order)
        .where(Order.delivery_partner_id == current_user.id)
        .order_by(Order.created_at.desc())
    )
    if status:
        query = query.where(Order.status == normalize_order_status(status))

    return paginate(session=session, query=query, page=page, limit=limit, serializer=order_detail)


@router.get("/pickups")
def my_pickup_jobs(
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_delivery)
):
    query = (
        select(PickupJob)
        .where(PickupJob.delivery_partner_id == current_user.id)
        .order_by(PickupJob.created_at.desc())
    )
    return paginate(session=session, query=query, page=page, limit=limit, serializer=pickup_detail)
