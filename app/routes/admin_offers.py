import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.admin import require_admin
from app.models.offer import Offer
from app.models.user import User
from app.schemas.offer_schemas import OfferCreate, OfferUpdate
from app.services.offer_service import get_offer_by_code, normalize_code
from app.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_window(valid_from: datetime, valid_to: datetime):
    if valid_to <= valid_from:
        raise HTTPException(400, "valid_to must be after valid_from")


@router.post("", status_code=201)
def create_offer(
    data: OfferCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    _check_window(data.valid_from, data.valid_to)

    if get_offer_by_code(session, data.code):
        raise HTTPException(400, "Offer code already exists")

    offer = Offer(**data.model_dump(exclude={"code"}), code=normalize_code(data.code))
    session.add(offer)
    session.commit()
    session.refresh(offer)

    logger.info(f"Offer {offer.code} created by admin {admin.id}")
    return offer


@router.get("")
def list_offers_admin(
    page: int = 1,
    limit: int = 10,
    is_active: Optional[bool] = None,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    query = select(Offer).order_by(Offer.created_at.desc())
    if is_active is not None:
        query = query.where(Offer.is_active == is_active)
    return paginate(session=session, query=query, page=page, limit=limit)


@router.get("/{offer_id}")
def get_offer_admin(
    offer_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    offer = session.get(Offer, offer_id)
    if not offer:
        raise HTTPException(404, "Offer not found")
    return offer


@router.put("/{offer_id}")
def update_offer(
    offer_id: int,
    data: OfferUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    offer = session.get(Offer, offer_id)
    if not offer:
        raise HTTPException(404, "Offer not found")

    changes = data.model_dump(exclude_unset=True)
    _check_window(
        changes.get("valid_from", offer.valid_from),
        changes.get("valid_to", offer.valid_to),
    )

    for key, value in changes.items():
        setattr(offer, key, value)
    offer.version += 1
    offer.updated_at = datetime.utcnow()

    session.add(offer)
    session.commit()
    session.refresh(offer)

    logger.info(f"Offer {offer.code} updated to v{offer.version} by admin {admin.id}")
    return offer


@router.patch("/{offer_id}/toggle")
def toggle_offer(
    offer_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    offer = session.get(Offer, offer_id)
    if not offer:
        raise HTTPException(404, "Offer not found")

    offer.is_active = not offer.is_active
    offer.version += 1
    offer.updated_at = datetime.utcnow()
    session.add(offer)
    session.commit()
    session.refresh(offer)

    return {"message": "Offer updated", "code": offer.code, "is_active": offer.is_active}


@router.delete("/{offer_id}")
def delete_offer(
    offer_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin)
):
    offer = session.get(Offer, offer_id)
    if not offer:
        raise HTTPException(404, "Offer not found")

    # redeemed offers stay for order history; just switch them off
    if offer.usage_count > 0:
        offer.is_active = False
        offer.updated_at = datetime.utcnow()
        session.add(offer)
        session.commit()
        return {"message": "Offer has been used and was deactivated instead"}

    session.delete(offer)
    session.commit()
    return {"message": "Offer deleted"}
