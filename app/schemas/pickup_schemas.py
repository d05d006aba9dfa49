from pydantic import BaseModel
from typing import Optional
from decimal import Decimal

from app.models.pickup import PickupItemType


class PickupCreate(BaseModel):
    pickup_address: str
    drop_address: str
    item_type: PickupItemType
    note: Optional[str] = None
    total_amount: Optional[Decimal] = None
