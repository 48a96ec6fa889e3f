"""Customer data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from salon_scheduler.utils import generate_id, normalize_phone, utc_now

MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15


class CustomerInfo(BaseModel):
    """Contact details supplied with a booking request."""

    name: str = Field(..., min_length=1)
    phone: str
    email: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        cleaned = normalize_phone(value)
        digits = cleaned.lstrip("+")
        if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
            raise ValueError(f"Phone number {value!r} doesn't look right")
        return cleaned


class Customer(BaseModel):
    """Customer record owned by the customer directory."""

    id: str = Field(default_factory=generate_id)
    name: str
    phone: str
    email: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
