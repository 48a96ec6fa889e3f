"""Booking data models."""

from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_validator

from salon_scheduler.schemas.customer_schema import Customer
from salon_scheduler.schemas.service_schema import Service
from salon_scheduler.utils import generate_id, normalize_date, normalize_time, utc_now


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


class BookingService(BaseModel):
    """Line item linking a booking to one service at its booked price."""

    id: str = Field(default_factory=generate_id)
    booking_id: str
    service_id: str
    price: float
    created_at: datetime = Field(default_factory=utc_now)
    service: Optional[Service] = None


class Booking(BaseModel):
    """
    A customer's reservation at a specific date and time.

    ``booking_date``/``booking_time`` are copies of the reserved slot's
    values, so the booking stays intact if the slot is later altered.
    ``customer`` and ``booking_services`` are filled on read and never
    persisted with the booking record.
    """

    id: str = Field(default_factory=generate_id)
    customer_id: str
    booking_date: str
    booking_time: str
    status: BookingStatus = BookingStatus.CONFIRMED
    total_price: float = 0
    total_duration_minutes: int = 0
    notes: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    customer: Optional[Customer] = None
    booking_services: list[BookingService] = Field(default_factory=list)

    ENRICHED_FIELDS: ClassVar[set[str]] = {"customer", "booking_services"}

    @field_validator("booking_date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return normalize_date(value)

    @field_validator("booking_time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time(value)

    def to_record(self) -> dict:
        """Serialize the stored fields only."""
        return self.model_dump(mode="json", exclude=self.ENRICHED_FIELDS)
