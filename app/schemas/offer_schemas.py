from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, timezone
from decimal import Decimal

from app.models.offer import DiscountType


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offer windows are stored and compared as naive UTC."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class OfferCreate(BaseModel):
    code: str
    title: str
    description: str = ""
    discount_type: DiscountType
    discount_value: Decimal = Field(gt=0)
    min_order_value: Decimal = Field(default=Decimal("0"), ge=0)
    max_discount: Optional[Decimal] = Field(default=None, gt=0)
    valid_from: datetime
    valid_to: datetime
    is_active: bool = True
    is_public: bool = True
    total_usage_limit: Optional[int] = Field(default=None, ge=0)
    per_customer_limit: int = Field(default=1, ge=1)

    @field_validator("valid_from", "valid_to")
    @classmethod
    def normalize_window(cls, v):
        return to_naive_utc(v)


class OfferUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, gt=0)
    min_order_value: Optional[Decimal] = Field(default=None, ge=0)
    max_discount: Optional[Decimal] = Field(default=None, gt=0)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None
    total_usage_limit: Optional[int] = Field(default=None, ge=0)
    per_customer_limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("valid_from", "valid_to")
    @classmethod
    def normalize_window(cls, v):
        return to_naive_utc(v)


class OfferValidateRequest(BaseModel):
    code: str
    subtotal: Decimal = Field(ge=0)
