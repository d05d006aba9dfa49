from typing import Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from app.constants.order_status import normalize_order_status
from app.database import get_session
from app.dependencies.admin import require_restaurant
from app.models.order import Order
from app.models.user import User
from app.schemas.orders_schemas import order_detail
from app.utils.pagination import paginate


router = APIRouter()


@router.get("/orders")
def restaurant_orders(
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_restaurant)
):
    query = (
        select(Order)
        .where(Order.restaurant_id == current_user.id)
        .order_by(Order.created_at.desc())
    )
    if status:
        query = query.where(Order.status == normalize_order_status(status))

    return paginate(session=session, query=query, page=page, limit=limit, serializer=order_detail)
