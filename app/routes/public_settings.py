from sqlmodel import Session, select
from fastapi import APIRouter, Depends
from app.database import get_session
from app.models.general_settings import MinCartAmount, PaymentMethod, SiteStatus, SystemStatus


router = APIRouter()


@router.get("/site-status")
def site_status(session: Session = Depends(get_session)):
    status = session.get(SystemStatus, 1)
    if not status:
        return {"status": SiteStatus.online.value, "message": ""}

    return {"status": status.status.value, "message": status.message}


@router.get("/min-cart-amount")
def min_cart_amount(session: Session = Depends(get_session)):
    setting = session.get(MinCartAmount, 1)
    if not setting or not setting.is_active:
        return {"is_active": False, "amount": None}

    return {"is_active": True, "amount": setting.amount}


@router.get("/payment-methods")
def payment_methods(session: Session = Depends(get_session)):
    methods = session.exec(
        select(PaymentMethod)
        .where(PaymentMethod.is_active == True)  # noqa: E712
        .order_by(PaymentMethod.id)
    ).all()

    return [
        {"code": m.code, "name": m.name, "instructions": m.instructions}
        for m in methods
    ]
