from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum


class SiteStatus(str, Enum):
    online = "online"
    maintenance = "maintenance"
    offline = "offline"


class SystemStatus(SQLModel, table=True):
    __tablename__ = "system_status"
    id: Optional[int] = Field(default=1, primary_key=True)
    status: SiteStatus = Field(default=SiteStatus.online)
    message: str = ""
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class MinCartAmount(SQLModel, table=True):
    __tablename__ = "min_cart_amount"
    id: Optional[int] = Field(default=1, primary_key=True)
    amount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    is_active: bool = Field(default=True)
    updated_by: Optional[int] = Field(default=None, foreign_key="user.id")
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PaymentMethod(SQLModel, table=True):
    __tablename__ = "payment_method"
    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(index=True, unique=True)   # cash | upi | online
    name: str
    instructions: str = ""
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
