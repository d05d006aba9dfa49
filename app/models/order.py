from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from app.constants.order_status import OrderStatus
from app.models.order_item import OrderItem


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)

    customer_id: int = Field(foreign_key="user.id", index=True)
    restaurant_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    delivery_partner_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)

    subtotal: Decimal = Field(max_digits=10, decimal_places=2)
    delivery_fee: Decimal = Field(max_digits=10, decimal_places=2)
    handling_charge: Decimal = Field(max_digits=10, decimal_places=2)
    tax: Decimal = Field(max_digits=10, decimal_places=2)
    discount: Decimal = Field(max_digits=10, decimal_places=2)
    total: Decimal = Field(max_digits=10, decimal_places=2)

    payment_method: str
    applied_offer_code: Optional[str] = None
    delivery_address: dict = Field(sa_column=Column(JSON, nullable=False))
    estimated_min_time: Optional[int] = None
    estimated_max_time: Optional[int] = None

    status: OrderStatus = Field(default=OrderStatus.pending, index=True)
    # last forward status, kept while the order sits in heavy_traffic
    progress_status: OrderStatus = Field(default=OrderStatus.pending)
    delivered_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")

    @property
    def reviews_unlocked(self) -> bool:
        return self.delivered_at is not None
