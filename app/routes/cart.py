from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete
from sqlmodel import Session, select
from app.database import get_session
from app.dependencies.admin import require_customer
from app.models.cart import CartItem, CartOffer
from app.models.product import Product
from app.models.user import User
from app.schemas.cart_schemas import CartAddRequest, CartOfferRequest, CartUpdateRequest
from app.services import offer_service
from app.services.order_service import load_cart_lines, resolve_lines
from app.services.pricing_service import compute_subtotal
from datetime import datetime


router = APIRouter()


def clear_cart(session: Session, user_id: int):
    session.execute(delete(CartItem).where(CartItem.user_id == user_id))
    session.execute(delete(CartOffer).where(CartOffer.user_id == user_id))
    session.commit()


# Add to Cart

@router.post("/add")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    product = session.get(Product, data.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    if not product.is_available:
        raise HTTPException(status_code=400, detail="Product is currently unavailable")

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.user_id == current_user.id,
            CartItem.product_id == data.product_id
        )
    ).first()

    if existing_item:
        existing_item.quantity += data.quantity
        session.add(existing_item)
        session.commit()
        session.refresh(existing_item)
        return {"message": "Cart updated", "item": existing_item}

    new_item = CartItem(
        user_id=current_user.id,
        product_id=product.id,
        quantity=data.quantity,
        created_at=datetime.utcnow()
    )

    session.add(new_item)
    session.commit()
    session.refresh(new_item)

    return {"message": "Added to cart", "item": new_item}


# View Cart

@router.get("/")
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    rows = session.exec(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == current_user.id)
        .order_by(CartItem.id)
    ).all()

    items = []
    for item, product in rows:
        price = product.discounted_price if product.discounted_price is not None else product.price
        items.append({
            "cart_item_id": item.id,
            "product_id": product.id,
            "name": product.name,
            "price": product.price,
            "discounted_price": product.discounted_price,
            "quantity": item.quantity,
            "line_total": price * item.quantity,
            "is_available": product.is_available,
        })

    applied = session.get(CartOffer, current_user.id)

    return {
        "items": items,
        "subtotal": sum((i["line_total"] for i in items), 0),
        "applied_offer_code": applied.offer_code if applied else None,
    }


@router.put("/update/{item_id}")
def update_cart_item(
    item_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    item = session.get(CartItem, item_id)
    if not item or item.user_id != current_user.id:
        raise HTTPException(404, "Cart item not found")

    item.quantity = data.quantity
    session.add(item)
    session.commit()
    session.refresh(item)
    return {"message": "Cart updated", "item": item}


@router.delete("/remove/{item_id}")
def remove_cart_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    item = session.get(CartItem, item_id)
    if not item or item.user_id != current_user.id:
        raise HTTPException(404, "Cart item not found")

    session.delete(item)
    session.commit()

    # an empty cart carries no applied offer
    remaining = session.exec(
        select(CartItem).where(CartItem.user_id == current_user.id)
    ).first()
    if remaining is None:
        clear_cart(session, current_user.id)

    return {"message": "Item removed"}


@router.delete("/clear")
def clear_user_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    clear_cart(session, current_user.id)
    return {"message": "Cart cleared"}


# Promo code on cart (tentative, no usage is reserved here)

@router.post("/offer")
def apply_offer_to_cart(
    data: CartOfferRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    lines, _ = resolve_lines(session, load_cart_lines(session, current_user.id), require_available=False)
    offer, discount = offer_service.preview_offer(
        session, data.code, current_user.id, compute_subtotal(lines)
    )

    applied = session.get(CartOffer, current_user.id)
    if applied:
        applied.offer_code = offer.code
        applied.applied_at = datetime.utcnow()
    else:
        applied = CartOffer(user_id=current_user.id, offer_code=offer.code)
    session.add(applied)
    session.commit()

    return {
        "message": "Promo code applied",
        "offer_code": offer.code,
        "discount": discount,
    }


@router.delete("/offer")
def remove_offer_from_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_customer)
):
    applied = session.get(CartOffer, current_user.id)
    if applied:
        session.delete(applied)
        session.commit()
    return {"message": "Promo code removed"}
