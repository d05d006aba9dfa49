from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Address(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    title: str = Field(default="home")   # home / work / other
    full_address: str
    landmark: Optional[str] = None
    city: str
    pincode: str
    # None means the address predates distance capture and is expired for checkout
    distance_km: Optional[float] = None
    is_default: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_expired(self) -> bool:
        return self.distance_km is None

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "full_address": self.full_address,
            "landmark": self.landmark,
            "city": self.city,
            "pincode": self.pincode,
            "distance_km": self.distance_km,
        }
