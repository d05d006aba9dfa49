from sqlmodel import SQLModel, Field , Relationship
from typing import Optional , TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

if TYPE_CHECKING:
    from app.models.order import Order

class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    product_id: int = Field(foreign_key="product.id")

    name: str
    unit_price: Decimal = Field(max_digits=10, decimal_places=2)
    quantity: int
    line_total: Decimal = Field(max_digits=10, decimal_places=2)

    # filled only after the order is delivered
    review_rating: Optional[int] = None
    review_comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    order: Optional["Order"] = Relationship(back_populates="items")
