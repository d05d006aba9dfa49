from typing import Optional
from sqlmodel import SQLModel, Field


class ItemReviewCreate(SQLModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
