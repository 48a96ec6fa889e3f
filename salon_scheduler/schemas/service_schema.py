"""Service catalogue data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from salon_scheduler.utils import generate_id, utc_now


class Service(BaseModel):
    """A bookable service with its current price and duration."""

    id: str = Field(default_factory=generate_id)
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    duration_minutes: int = Field(..., gt=0)
    category: str = ""
    active: bool = True
    popular: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
