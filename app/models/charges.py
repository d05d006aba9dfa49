# app/models/charges.py
from sqlmodel import Field
from typing import Optional
from decimal import Decimal
from enum import Enum

from app.models.base import RuleBase


class ChargeType(str, Enum):
    flat = "flat"
    percentage = "percentage"


class DeliveryFeeRule(RuleBase, table=True):
    __tablename__ = "delivery_fee_rule"
    id: Optional[int] = Field(default=None, primary_key=True)

    amount: Decimal = Field(max_digits=10, decimal_places=2)
    min_subtotal: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    max_subtotal: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)  # None = and above


class HandlingCharge(RuleBase, table=True):
    __tablename__ = "handling_charge"
    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(default="Handling charge")
    amount: Decimal = Field(max_digits=10, decimal_places=2)


class GstTax(RuleBase, table=True):
    __tablename__ = "gst_tax"
    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    charge_type: ChargeType = Field(default=ChargeType.percentage)
    value: Decimal = Field(max_digits=10, decimal_places=2)


class DeliveryTimeRule(RuleBase, table=True):
    __tablename__ = "delivery_time_rule"
    id: Optional[int] = Field(default=None, primary_key=True)

    title: str
    min_distance: float
    max_distance: float
    min_time: int   # minutes
    max_time: int   # minutes
