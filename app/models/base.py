# app/models/base.py
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class RuleBase(SQLModel):
    """Common columns for admin-managed pricing rules.

    Every rule can be toggled independently and carries an edit counter so a
    priced order can be traced back to the rule revision that produced it.
    """

    is_active: bool = Field(default=True, index=True)
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
