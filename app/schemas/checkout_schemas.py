# app/schemas/checkout_schemas.py
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class CartLine(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


class PricingLine(BaseModel):
    product_id: int
    name: str = ""
    unit_price: Decimal
    discounted_unit_price: Optional[Decimal] = None
    quantity: int = Field(ge=1)

    @property
    def effective_price(self) -> Decimal:
        if self.discounted_unit_price is not None:
            return self.discounted_unit_price
        return self.unit_price

    @property
    def line_total(self) -> Decimal:
        return self.effective_price * self.quantity


class PriceBreakdown(BaseModel):
    subtotal: Decimal
    delivery_fee: Decimal
    handling_charge: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    delivery_fee_rule_id: Optional[int] = None
    applied_offer_code: Optional[str] = None


class DeliveryEstimate(BaseModel):
    unavailable: bool = False
    title: Optional[str] = None
    min_time: Optional[int] = None   # minutes
    max_time: Optional[int] = None


class OfferIssue(BaseModel):
    code: str
    reason: str
    message: str


class DraftLine(BaseModel):
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class PricedOrderDraft(BaseModel):
    address_id: int
    items: List[DraftLine]
    summary: PriceBreakdown
    delivery_estimate: DeliveryEstimate
    # set when a requested code could not be applied; price is shown without it
    offer_issue: Optional[OfferIssue] = None


class PriceRequest(BaseModel):
    address_id: int
    items: Optional[List[CartLine]] = None      # None = use the stored cart
    offer_code: Optional[str] = None            # None = use the cart's applied offer


class PlaceOrderRequest(PriceRequest):
    payment_method: str


class PlaceOrderResponse(BaseModel):
    """Result of a placed order.

    A rejected offer fails the request with ``code: offer_invalid`` and
    ``retry_without_offer: true``. When the offer was the cart's applied one it
    is removed as well (``cart_offer_cleared: true``), so resubmitting the same
    request places the order at full price. ``applied_offer_code`` is the code
    actually redeemed, if any.
    """
    order_id: int
    order_number: str
    status: str
    message: str
    summary: PriceBreakdown
    delivery_estimate: DeliveryEstimate
    payment_method: str
    payment_instructions: str
    track_order_url: str
    applied_offer_code: Optional[str] = None
