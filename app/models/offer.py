from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum


class DiscountType(str, Enum):
    flat = "flat"
    percentage = "percentage"


class Offer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # stored upper-case so lookups are case-insensitive
    code: str = Field(index=True, unique=True)
    title: str
    description: str = ""

    discount_type: DiscountType
    discount_value: Decimal = Field(max_digits=10, decimal_places=2)
    min_order_value: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    max_discount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    valid_from: datetime
    valid_to: datetime

    is_active: bool = Field(default=True)
    is_public: bool = Field(default=True)

    total_usage_limit: Optional[int] = None   # None = unlimited
    per_customer_limit: int = Field(default=1, ge=1)
    usage_count: int = Field(default=0)

    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class OfferRedemption(SQLModel, table=True):
    __tablename__ = "offer_redemption"
    __table_args__ = (UniqueConstraint("offer_id", "customer_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    offer_id: int = Field(foreign_key="offer.id", index=True)
    customer_id: int = Field(foreign_key="user.id", index=True)
    count: int = Field(default=0)
    last_used_at: datetime = Field(default_factory=datetime.utcnow)
