from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import update
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.admin import require_customer
from app.models.address import Address
from app.models.user import User
from app.schemas.address_schemas import AddressCreate
from app.utils.pagination import paginate


router = APIRouter()


def _clear_other_defaults(session: Session, user_id: int, keep_id: int):
    session.execute(
        update(Address)
        .where(Address.user_id == user_id, Address.id != keep_id)
        .values(is_default=False)
        .execution_options(synchronize_session=False)
    )


def _address_out(a: Address) -> dict:
    return {
        **a.snapshot(),
        "is_default": a.is_default,
        "is_expired": a.is_expired,
        "created_at": a.created_at,
    }


@router.post("")
def add_address(
    data: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    has_any = session.exec(
        select(Address.id).where(Address.user_id == current_user.id)
    ).first()

    address = Address(user_id=current_user.id, **data.model_dump())
    # the first address is always the default one
    if has_any is None:
        address.is_default = True

    session.add(address)
    session.flush()
    if address.is_default:
        _clear_other_defaults(session, current_user.id, address.id)
    session.commit()
    session.refresh(address)

    return {"message": "Address saved", "address": _address_out(address)}


@router.put("/{address_id}")
def update_address(
    address_id: int,
    data: AddressCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    address = session.get(Address, address_id)

    if not address or address.user_id != current_user.id:
        raise HTTPException(404, "Address not found")

    was_default = address.is_default
    for key, value in data.model_dump().items():
        setattr(address, key, value)
    # a default address stays default until another one takes over
    address.is_default = data.is_default or was_default

    session.add(address)
    if address.is_default:
        _clear_other_defaults(session, current_user.id, address.id)
    session.commit()
    session.refresh(address)

    return {
        "message": "Address updated successfully",
        "address": _address_out(address)
    }


@router.patch("/{address_id}/default")
def set_default_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    address = session.get(Address, address_id)
    if not address or address.user_id != current_user.id:
        raise HTTPException(404, "Address not found")

    address.is_default = True
    session.add(address)
    _clear_other_defaults(session, current_user.id, address.id)
    session.commit()
    session.refresh(address)

    return {"message": "Default address updated", "address": _address_out(address)}


@router.delete("/{address_id}")
def delete_address(
    address_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    address = session.get(Address, address_id)

    if not address or address.user_id != current_user.id:
        raise HTTPException(404, "Address not found")

    was_default = address.is_default
    session.delete(address)
    session.flush()

    if was_default:
        successor = session.exec(
            select(Address)
            .where(Address.user_id == current_user.id)
            .order_by(Address.created_at.desc())
        ).first()
        if successor:
            successor.is_default = True
            session.add(successor)

    session.commit()

    return {
        "message": "Address deleted successfully"
    }


@router.get("")
def list_addresses(
    page: int = 1,
    limit: int = 10,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    query = (
        select(Address)
        .where(Address.user_id == current_user.id)
        .order_by(Address.is_default.desc(), Address.created_at.desc())
    )

    return paginate(session=session, query=query, page=page, limit=limit, serializer=_address_out)
