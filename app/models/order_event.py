from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from app.constants.order_status import ActorRole


class OrderStatusEvent(SQLModel, table=True):
    """Append-only status history row for an order."""

    __tablename__ = "order_status_event"
    id: Optional[int] = Field(default=None, primary_key=True)

    order_id: int = Field(foreign_key="order.id", index=True)
    status: str = Field(index=True)
    actor_role: ActorRole
    actor_id: Optional[int] = None
    message: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)


class PickupStatusEvent(SQLModel, table=True):
    __tablename__ = "pickup_status_event"
    id: Optional[int] = Field(default=None, primary_key=True)

    pickup_id: int = Field(foreign_key="pickup_job.id", index=True)
    status: str = Field(index=True)
    actor_role: ActorRole
    actor_id: Optional[int] = None
    message: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
