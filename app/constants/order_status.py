from enum import Enum

from app.exceptions import UnknownStatus


class ActorRole(str, Enum):
    customer = "customer"
    restaurant = "restaurant"
    delivery = "delivery"
    admin = "admin"


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    packed = "packed"
    out_for_delivery = "out_for_delivery"
    on_the_way = "on_the_way"
    delivered = "delivered"
    cancelled = "cancelled"
    heavy_traffic = "heavy_traffic"


class PickupStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    picked = "picked"
    on_the_way = "on_the_way"
    delivered = "delivered"
    cancelled = "cancelled"


# forward path only, side-states and cancellation handled separately
ORDER_FLOW = [
    OrderStatus.pending,
    OrderStatus.confirmed,
    OrderStatus.preparing,
    OrderStatus.packed,
    OrderStatus.out_for_delivery,
    OrderStatus.on_the_way,
    OrderStatus.delivered,
]

PICKUP_FLOW = [
    PickupStatus.pending,
    PickupStatus.accepted,
    PickupStatus.picked,
    PickupStatus.on_the_way,
    PickupStatus.delivered,
]

ORDER_TERMINAL = {OrderStatus.delivered, OrderStatus.cancelled}
PICKUP_TERMINAL = {PickupStatus.delivered, PickupStatus.cancelled}


def _successors(flow):
    return {flow[i]: flow[i + 1] for i in range(len(flow) - 1)}


ORDER_NEXT = _successors(ORDER_FLOW)
PICKUP_NEXT = _successors(PICKUP_FLOW)


# targets each role may request at all
ORDER_ROLE_TARGETS = {
    ActorRole.restaurant: {
        OrderStatus.confirmed,
        OrderStatus.preparing,
        OrderStatus.packed,
    },
    ActorRole.delivery: {
        OrderStatus.out_for_delivery,
        OrderStatus.on_the_way,
        OrderStatus.delivered,
        OrderStatus.heavy_traffic,
    },
    ActorRole.customer: {OrderStatus.cancelled},
    ActorRole.admin: set(OrderStatus),
}

# delivery partners often tap ahead of the kitchen UI
DELIVERY_TOLERATED_SOURCES = {
    OrderStatus.out_for_delivery: {OrderStatus.preparing, OrderStatus.packed},
    OrderStatus.on_the_way: {
        OrderStatus.preparing,
        OrderStatus.packed,
        OrderStatus.out_for_delivery,
    },
}

HEAVY_TRAFFIC_SOURCES = {
    OrderStatus.packed,
    OrderStatus.out_for_delivery,
    OrderStatus.on_the_way,
}

PICKUP_ROLE_TARGETS = {
    ActorRole.delivery: {
        PickupStatus.accepted,
        PickupStatus.picked,
        PickupStatus.on_the_way,
        PickupStatus.delivered,
    },
    ActorRole.customer: {PickupStatus.cancelled},
    ActorRole.admin: set(PickupStatus),
}

CUSTOMER_PICKUP_CANCELLABLE = {PickupStatus.pending, PickupStatus.accepted}


ORDER_ALIASES = {
    "placed": OrderStatus.pending,
    "canceled": OrderStatus.cancelled,
    "cancelled_by_customer": OrderStatus.cancelled,
    "cancelled_by_admin": OrderStatus.cancelled,
    "packing": OrderStatus.packed,
    "ready": OrderStatus.packed,
    "picked": OrderStatus.out_for_delivery,
    "picked_up": OrderStatus.out_for_delivery,
    "on_the_way_to_customer": OrderStatus.on_the_way,
    "delayed": OrderStatus.heavy_traffic,
    "delayed_high_demand": OrderStatus.heavy_traffic,
    "delayed_weather": OrderStatus.heavy_traffic,
    "delayed_rider_assigned_late": OrderStatus.heavy_traffic,
    "delayed_rider_unavailable": OrderStatus.heavy_traffic,
}

PICKUP_ALIASES = {
    "canceled": PickupStatus.cancelled,
    "picked_up": PickupStatus.picked,
    "on_the_way_to_drop_location": PickupStatus.on_the_way,
}


def _slug(raw: str) -> str:
    return "_".join(raw.strip().lower().replace("-", " ").split())


def normalize_order_status(raw) -> OrderStatus:
    """Map any client spelling ("Delivered", "canceled", "Picked Up") onto the enum."""
    if isinstance(raw, OrderStatus):
        return raw
    key = _slug(str(raw))
    if key in ORDER_ALIASES:
        return ORDER_ALIASES[key]
    try:
        return OrderStatus(key)
    except ValueError:
        raise UnknownStatus(str(raw))


def normalize_pickup_status(raw) -> PickupStatus:
    if isinstance(raw, PickupStatus):
        return raw
    key = _slug(str(raw))
    if key in PICKUP_ALIASES:
        return PICKUP_ALIASES[key]
    try:
        return PickupStatus(key)
    except ValueError:
        raise UnknownStatus(str(raw))
