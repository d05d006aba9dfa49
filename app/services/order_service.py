# app/services/order_service.py
import logging
import random
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, update
from sqlmodel import Session, select

from app.config import settings
from app.constants.order_status import ActorRole, OrderStatus
from app.exceptions import (
    EmptyCart,
    ItemUnavailable,
    NotAuthorized,
    NotFound,
    OfferError,
    PaymentMethodUnavailable,
    ReviewNotAllowed,
    StateConflict,
)
from app.models.address import Address
from app.models.cart import CartItem, CartOffer
from app.models.general_settings import PaymentMethod
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.models.user import User
from app.schemas.checkout_schemas import (
    CartLine,
    DraftLine,
    OfferIssue,
    PricedOrderDraft,
    PricingLine,
    PriceRequest,
    PlaceOrderRequest,
)
from app.services import offer_service
from app.services.delivery_time_service import get_delivery_estimate
from app.services.order_event_service import log_order_status
from app.services.order_lifecycle import Actor, evaluate_order_transition
from app.services.pricing_service import calculate_price, compute_subtotal
from app.services.rule_store import ensure_site_online, load_pricing_rules

logger = logging.getLogger(__name__)

MAX_TRANSITION_ATTEMPTS = 3

PAYMENT_CODE_ALIASES = {
    "cash": "cash",
    "cod": "cash",
    "cashondelivery": "cash",
    "upi": "upi",
    "credit": "online",
    "debit": "online",
    "card": "online",
    "online": "online",
}


# -------------------------
# CHECKOUT INPUTS
# -------------------------

def normalize_payment_code(code: str) -> str:
    key = code.strip().lower().replace(" ", "").replace("_", "")
    return PAYMENT_CODE_ALIASES.get(key, key)


def get_payment_method(session: Session, code: str) -> PaymentMethod:
    normalized = normalize_payment_code(code)
    method = session.exec(
        select(PaymentMethod).where(PaymentMethod.code == normalized)
    ).first()
    if not method or not method.is_active:
        raise PaymentMethodUnavailable(code)
    return method


def get_customer_address(session: Session, customer_id: int, address_id: int) -> Address:
    address = session.get(Address, address_id)
    if not address or address.user_id != customer_id:
        raise NotFound("Address not found")
    return address


def load_cart_lines(session: Session, customer_id: int) -> List[CartLine]:
    rows = session.exec(
        select(CartItem).where(CartItem.user_id == customer_id).order_by(CartItem.id)
    ).all()
    return [CartLine(product_id=r.product_id, quantity=r.quantity) for r in rows]


def resolve_lines(
    session: Session,
    lines: List[CartLine],
    require_available: bool = True,
) -> Tuple[List[PricingLine], List[Product]]:
    """Price cart lines from the product table; client prices are never trusted."""
    if not lines:
        raise EmptyCart()

    pricing_lines = []
    products = []
    unavailable = []

    for line in lines:
        product = session.get(Product, line.product_id)
        if not product or (require_available and not product.is_available):
            unavailable.append(line.product_id)
            continue
        products.append(product)
        pricing_lines.append(PricingLine(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            discounted_unit_price=product.discounted_price,
            quantity=line.quantity,
        ))

    if unavailable:
        raise ItemUnavailable(unavailable)

    return pricing_lines, products


def _requested_offer_code(session: Session, customer_id: int, request: PriceRequest) -> Tuple[Optional[str], bool]:
    """Returns the code to apply and whether it came from the stored cart offer."""
    if request.offer_code is not None:
        return request.offer_code.strip() or None, False
    applied = session.get(CartOffer, customer_id)
    return (applied.offer_code, True) if applied else (None, False)


def _drop_stale_cart_offer(session: Session, customer_id: int, error: OfferError):
    session.execute(delete(CartOffer).where(CartOffer.user_id == customer_id))
    session.commit()
    logger.info(f"Cleared cart offer for customer {customer_id}: {error.reason}")


def _draft_lines(lines: List[PricingLine]) -> List[DraftLine]:
    return [
        DraftLine(
            product_id=line.product_id,
            name=line.name,
            unit_price=line.effective_price,
            quantity=line.quantity,
            line_total=line.line_total,
        )
        for line in lines
    ]


# -------------------------
# computePrice
# -------------------------

def compute_price(session: Session, customer: User, request: PriceRequest) -> PricedOrderDraft:
    address = get_customer_address(session, customer.id, request.address_id)
    cart_lines = request.items if request.items is not None else load_cart_lines(session, customer.id)
    lines, _ = resolve_lines(session, cart_lines, require_available=False)
    rules = load_pricing_rules(session)

    offer = None
    offer_issue = None
    code, _ = _requested_offer_code(session, customer.id, request)
    if code:
        try:
            offer = offer_service.validate_offer(
                session, code, customer.id, compute_subtotal(lines)
            )
        except OfferError as e:
            offer_issue = OfferIssue(code=code, reason=e.reason, message=e.message)

    summary = calculate_price(lines, address, rules, offer)

    return PricedOrderDraft(
        address_id=address.id,
        items=_draft_lines(lines),
        summary=summary,
        delivery_estimate=get_delivery_estimate(session, address.distance_km),
        offer_issue=offer_issue,
    )


# -------------------------
# submitOrder
# -------------------------

def generate_order_number(session: Session, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    for _ in range(10):
        candidate = f"ORD-{now:%y%m%d}-{random.randint(1000, 9999)}"
        taken = session.exec(
            select(Order.id).where(Order.order_number == candidate)
        ).first()
        if taken is None:
            return candidate
    raise StateConflict("Could not allocate an order number, please retry")


def submit_order(session: Session, customer: User, request: PlaceOrderRequest):
    """Persist a priced order, reserving offer usage in the same transaction.

    Returns ``(order, draft, payment_method)``.
    """
    # fail fast before any pricing or offer work
    ensure_site_online(session)

    address = get_customer_address(session, customer.id, request.address_id)
    cart_lines = request.items if request.items is not None else load_cart_lines(session, customer.id)
    lines, products = resolve_lines(session, cart_lines)
    method = get_payment_method(session, request.payment_method)
    rules = load_pricing_rules(session)

    offer = None
    code, from_cart = _requested_offer_code(session, customer.id, request)
    if code:
        try:
            offer = offer_service.validate_offer(session, code, customer.id, compute_subtotal(lines))
        except OfferError as e:
            # the same request without an offer goes through at full price
            e.extra["retry_without_offer"] = True
            if from_cart:
                _drop_stale_cart_offer(session, customer.id, e)
                e.extra["cart_offer_cleared"] = True
            raise

    summary = calculate_price(lines, address, rules, offer)
    estimate = get_delivery_estimate(session, address.distance_km)

    try:
        if offer is not None:
            offer_service.reserve_offer_usage(session, offer, customer.id)

        now = datetime.utcnow()
        order = Order(
            order_number=generate_order_number(session, now),
            customer_id=customer.id,
            restaurant_id=next((p.restaurant_id for p in products if p.restaurant_id), None),
            subtotal=summary.subtotal,
            delivery_fee=summary.delivery_fee,
            handling_charge=summary.handling_charge,
            tax=summary.tax,
            discount=summary.discount,
            total=summary.total,
            payment_method=method.code,
            applied_offer_code=offer.code if offer is not None else None,
            delivery_address=address.snapshot(),
            estimated_min_time=estimate.min_time,
            estimated_max_time=estimate.max_time,
            status=OrderStatus.pending,
            progress_status=OrderStatus.pending,
            created_at=now,
            updated_at=now,
        )
        session.add(order)
        session.flush()

        for line in lines:
            session.add(OrderItem(
                order_id=order.id,
                product_id=line.product_id,
                name=line.name,
                unit_price=line.effective_price,
                quantity=line.quantity,
                line_total=line.line_total,
            ))

        log_order_status(
            session,
            order.id,
            OrderStatus.pending.value,
            Actor.from_user(customer),
            message="Order placed",
            created_at=now,
        )

        # checkout completion destroys the cart
        session.execute(delete(CartItem).where(CartItem.user_id == customer.id))
        session.execute(delete(CartOffer).where(CartOffer.user_id == customer.id))

        session.commit()
    except Exception as e:
        logger.error(f"Error placing order for customer {customer.id}: {e}")
        session.rollback()
        raise

    session.refresh(order)
    logger.info(f"Order {order.order_number} placed by customer {customer.id}, total {order.total}")

    draft = PricedOrderDraft(
        address_id=address.id,
        items=_draft_lines(lines),
        summary=summary,
        delivery_estimate=estimate,
    )
    return order, draft, method


# -------------------------
# transitionOrderStatus
# -------------------------

def get_order(session: Session, order_id: int, fresh: bool = False) -> Order:
    order = session.get(Order, order_id, populate_existing=fresh)
    if not order:
        raise NotFound("Order not found")
    return order


def transition_order_status(
    session: Session,
    order_id: int,
    target,
    actor: Actor,
    note: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Order:
    """Apply one status change as a compare-and-set on the current status.

    A lost race re-reads the order and evaluates the request again, so the
    history always matches the status that actually won.
    """
    for attempt in range(MAX_TRANSITION_ATTEMPTS):
        order = get_order(session, order_id, fresh=True)
        expected = order.status
        when = now or datetime.utcnow()

        new_status = evaluate_order_transition(
            order,
            target,
            actor,
            now=when,
            cancel_window_minutes=settings.customer_cancel_window_minutes,
        )
        if new_status is None:
            return order

        values = {"status": new_status, "updated_at": when}
        if new_status not in (OrderStatus.heavy_traffic, OrderStatus.cancelled):
            values["progress_status"] = new_status
        if new_status == OrderStatus.delivered:
            values["delivered_at"] = when

        try:
            result = session.execute(
                update(Order)
                .where(Order.id == order_id, Order.status == expected)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                log_order_status(session, order_id, new_status.value, actor, note, created_at=when)
                session.commit()
                logger.info(
                    f"Order {order_id}: {OrderStatus(expected).value} → {new_status.value} by {actor.label}"
                )
                return get_order(session, order_id, fresh=True)
            session.rollback()
        except Exception as e:
            logger.error(f"Error updating order {order_id} status: {e}")
            session.rollback()
            raise

        logger.warning(f"Order {order_id} changed concurrently (attempt {attempt + 1}), re-evaluating")

    raise StateConflict(f"Order #{order_id} is being updated by someone else, please retry")


def assign_delivery_partner(session: Session, order_id: int, partner_id: int) -> Order:
    order = get_order(session, order_id)
    partner = session.get(User, partner_id)
    if not partner or partner.role != ActorRole.delivery:
        raise NotFound("Delivery partner not found")

    order.delivery_partner_id = partner.id
    order.updated_at = datetime.utcnow()
    session.add(order)
    session.commit()
    session.refresh(order)
    logger.info(f"Order {order_id} assigned to delivery partner {partner_id}")
    return order


# -------------------------
# REVIEWS
# -------------------------

def attach_review(
    session: Session,
    order_id: int,
    item_id: int,
    customer: User,
    rating: int,
    comment: Optional[str] = None,
) -> OrderItem:
    order = get_order(session, order_id)
    if order.customer_id != customer.id:
        raise NotAuthorized("Only the customer who placed the order can review it")

    if not order.reviews_unlocked:
        raise ReviewNotAllowed("Order not delivered yet")

    item = session.get(OrderItem, item_id)
    if not item or item.order_id != order.id:
        raise NotFound("Order item not found")

    if item.reviewed_at is not None:
        raise ReviewNotAllowed("This item has already been reviewed")

    item.review_rating = rating
    item.review_comment = comment
    item.reviewed_at = datetime.utcnow()
    session.add(item)
    session.commit()
    session.refresh(item)
    return item
