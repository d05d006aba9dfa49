from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class CartItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    product_id: int = Field(foreign_key="product.id")
    quantity: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class CartOffer(SQLModel, table=True):
    """Offer code tentatively applied to a customer's cart (no usage reserved)."""

    __tablename__ = "cart_offer"
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    offer_code: str
    applied_at: datetime = Field(default_factory=datetime.utcnow)
