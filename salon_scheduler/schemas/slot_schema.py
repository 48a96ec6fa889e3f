"""Slot data models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from salon_scheduler.utils import generate_id, normalize_date, normalize_time, utc_now


class SlotStatus(str, Enum):
    """Reservation state of a single slot."""

    AVAILABLE = "available"
    BLOCKED = "blocked"
    BOOKED = "booked"


class Slot(BaseModel):
    """A single bookable unit of time on a specific date."""

    id: str = Field(default_factory=generate_id)
    date: str
    time_slot: str
    status: SlotStatus = SlotStatus.AVAILABLE
    booking_id: Optional[str] = None
    blocked_reason: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return normalize_date(value)

    @field_validator("time_slot", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time(value)

    @model_validator(mode="after")
    def _check_booking_link(self) -> "Slot":
        if self.status == SlotStatus.BOOKED and not self.booking_id:
            raise ValueError("A booked slot must reference a booking_id")
        if self.status != SlotStatus.BOOKED and self.booking_id:
            raise ValueError(f"A {self.status.value} slot cannot reference a booking")
        return self

    @property
    def key(self) -> tuple[str, str]:
        return self.date, self.time_slot
