from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from app.constants.order_status import ActorRole


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True)
    phone: Optional[str] = None
    role: ActorRole = Field(default=ActorRole.customer)
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
