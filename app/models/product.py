from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class Product(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    restaurant_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    name: str

    price: Decimal = Field(max_digits=10, decimal_places=2)
    discounted_price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    is_available: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
