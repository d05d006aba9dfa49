# app/schemas/admin_settings_schemas.py
from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal

from app.models.charges import ChargeType
from app.models.general_settings import SiteStatus


class DeliveryFeeRuleIn(BaseModel):
    amount: Decimal = Field(ge=0)
    min_subtotal: Decimal = Field(default=Decimal("0"), ge=0)
    max_subtotal: Optional[Decimal] = Field(default=None, ge=0)
    is_active: bool = True


class DeliveryFeeRuleUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, ge=0)
    min_subtotal: Optional[Decimal] = Field(default=None, ge=0)
    max_subtotal: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class HandlingChargeIn(BaseModel):
    name: str = "Handling charge"
    amount: Decimal = Field(ge=0)
    is_active: bool = True


class HandlingChargeUpdate(BaseModel):
    name: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class GstTaxIn(BaseModel):
    name: str
    charge_type: ChargeType = ChargeType.percentage
    value: Decimal = Field(ge=0)
    is_active: bool = True


class GstTaxUpdate(BaseModel):
    name: Optional[str] = None
    charge_type: Optional[ChargeType] = None
    value: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class DeliveryTimeRuleIn(BaseModel):
    title: str
    min_distance: float = Field(ge=0)
    max_distance: float = Field(ge=0)
    min_time: int = Field(ge=0)
    max_time: int = Field(ge=0)
    is_active: bool = True


class DeliveryTimeRuleUpdate(BaseModel):
    title: Optional[str] = None
    min_distance: Optional[float] = Field(default=None, ge=0)
    max_distance: Optional[float] = Field(default=None, ge=0)
    min_time: Optional[int] = Field(default=None, ge=0)
    max_time: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class MinCartAmountUpdate(BaseModel):
    amount: Decimal = Field(ge=0)
    is_active: bool = True


class SystemStatusUpdate(BaseModel):
    status: SiteStatus
    message: str = ""


class PaymentMethodIn(BaseModel):
    code: str
    name: str
    instructions: str = ""
    is_active: bool = True


class PaymentMethodUpdate(BaseModel):
    name: Optional[str] = None
    instructions: Optional[str] = None
    is_active: Optional[bool] = None
