from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class StatusTransitionRequest(BaseModel):
    status: str
    note: Optional[str] = None


class AssignPartnerRequest(BaseModel):
    delivery_partner_id: int


class StatusHistoryEntry(BaseModel):
    status: str
    timestamp: datetime
    actor: str
    actor_id: Optional[int] = None
    message: Optional[str] = None


class StatusTransitionResponse(BaseModel):
    id: int
    status: str
    status_history: List[StatusHistoryEntry]


def history_entries(events) -> List[StatusHistoryEntry]:
    return [
        StatusHistoryEntry(
            status=e.status,
            timestamp=e.created_at,
            actor=e.actor_role.value if hasattr(e.actor_role, "value") else e.actor_role,
            actor_id=e.actor_id,
            message=e.message,
        )
        for e in events
    ]


def order_summary(order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status.value,
        "progress_status": order.progress_status.value,
        "total": order.total,
        "payment_method": order.payment_method,
        "created_at": order.created_at,
    }


def order_detail(order, events=None) -> dict:
    data = order_summary(order)
    data.update({
        "customer_id": order.customer_id,
        "restaurant_id": order.restaurant_id,
        "delivery_partner_id": order.delivery_partner_id,
        "summary": {
            "subtotal": order.subtotal,
            "delivery_fee": order.delivery_fee,
            "handling_charge": order.handling_charge,
            "tax": order.tax,
            "discount": order.discount,
            "total": order.total,
            "applied_offer_code": order.applied_offer_code,
        },
        "delivery_address": order.delivery_address,
        "estimated_delivery": {
            "min_time": order.estimated_min_time,
            "max_time": order.estimated_max_time,
        },
        "delivered_at": order.delivered_at,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "name": item.name,
                "unit_price": item.unit_price,
                "quantity": item.quantity,
                "line_total": item.line_total,
                "review_rating": item.review_rating,
                "review_comment": item.review_comment,
            }
            for item in order.items
        ],
    })
    if events is not None:
        data["status_history"] = history_entries(events)
    return data


def pickup_detail(pickup, events=None) -> dict:
    data = {
        "id": pickup.id,
        "customer_id": pickup.customer_id,
        "delivery_partner_id": pickup.delivery_partner_id,
        "pickup_address": pickup.pickup_address,
        "drop_address": pickup.drop_address,
        "item_type": pickup.item_type.value,
        "note": pickup.note,
        "total_amount": pickup.total_amount,
        "status": pickup.status.value,
        "cancel_reason": pickup.cancel_reason,
        "created_at": pickup.created_at,
    }
    if events is not None:
        data["status_history"] = history_entries(events)
    return data
