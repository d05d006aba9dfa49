from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.database import get_session
from app.dependencies.admin import require_customer
from app.models.user import User
from app.schemas.checkout_schemas import (
    PlaceOrderRequest,
    PlaceOrderResponse,
    PricedOrderDraft,
    PriceRequest,
)
from app.services.order_service import compute_price, submit_order


router = APIRouter()


# Price preview for cart / checkout screens

@router.post("/price", response_model=PricedOrderDraft)
def price_preview(
    data: PriceRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    return compute_price(session, current_user, data)


# Order Confirmation Page

@router.post("/place-order", response_model=PlaceOrderResponse, status_code=201)
def place_order(
    data: PlaceOrderRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    order, draft, method = submit_order(session, current_user, data)

    return PlaceOrderResponse(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        message="Order placed",
        summary=draft.summary,
        delivery_estimate=draft.delivery_estimate,
        payment_method=method.code,
        payment_instructions=method.instructions,
        track_order_url=f"/orders/{order.id}/track",
        applied_offer_code=order.applied_offer_code,
    )
