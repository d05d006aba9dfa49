from pydantic import BaseModel, Field
from typing import Optional

class AddressCreate(BaseModel):
    title: str = "home"
    full_address: str
    landmark: Optional[str] = None
    city: str
    pincode: str
    distance_km: Optional[float] = Field(default=None, ge=0)
    is_default: bool = False
