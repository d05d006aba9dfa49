from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.database import get_session
from app.dependencies.admin import require_customer
from app.models.user import User
from app.schemas.offer_schemas import OfferValidateRequest
from app.services import offer_service


router = APIRouter()


@router.get("")
def list_offers(session: Session = Depends(get_session)):
    offers = offer_service.list_public_offers(session)
    return [
        {
            "code": o.code,
            "title": o.title,
            "description": o.description,
            "discount_type": o.discount_type.value,
            "discount_value": o.discount_value,
            "min_order_value": o.min_order_value,
            "max_discount": o.max_discount,
            "valid_to": o.valid_to,
        }
        for o in offers
    ]


@router.post("/validate")
def validate_offer_code(
    data: OfferValidateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    offer, discount = offer_service.preview_offer(
        session, data.code, current_user.id, data.subtotal
    )
    return {
        "valid": True,
        "code": offer.code,
        "title": offer.title,
        "discount": discount,
    }
