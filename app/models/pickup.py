from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.constants.order_status import PickupStatus


class PickupItemType(str, Enum):
    Lunchbox = "Lunchbox"
    Documents = "Documents"
    Clothes = "Clothes"
    Others = "Others"


class PickupJob(SQLModel, table=True):
    __tablename__ = "pickup_job"
    id: Optional[int] = Field(default=None, primary_key=True)

    customer_id: int = Field(foreign_key="user.id", index=True)
    delivery_partner_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)

    pickup_address: str
    drop_address: str
    item_type: PickupItemType
    note: Optional[str] = None
    total_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    status: PickupStatus = Field(default=PickupStatus.pending, index=True)
    cancel_reason: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
