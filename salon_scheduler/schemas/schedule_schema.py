"""Working-hours template data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from salon_scheduler.utils import generate_id, normalize_time, utc_now


def _optional_time(value):
    if value is None or value == "":
        return None
    return normalize_time(value)


def _check_window(open_time, close_time, break_start, break_end) -> None:
    if open_time is not None and close_time is not None and open_time >= close_time:
        raise ValueError(f"open_time {open_time} must be before close_time {close_time}")
    if (break_start is None) != (break_end is None):
        raise ValueError("break_start and break_end must be set together")
    if break_start is not None and break_start >= break_end:
        raise ValueError(f"break_start {break_start} must be before break_end {break_end}")


class DefaultSchedule(BaseModel):
    """The single canonical open/close/break/duration set used for slot generation."""

    open_time: str
    close_time: str
    slot_duration: int = Field(..., gt=0)
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def _normalize_bounds(cls, value):
        return normalize_time(value)

    @field_validator("break_start", "break_end", mode="before")
    @classmethod
    def _normalize_break(cls, value):
        return _optional_time(value)

    @model_validator(mode="after")
    def _check_order(self) -> "DefaultSchedule":
        _check_window(self.open_time, self.close_time, self.break_start, self.break_end)
        return self

    def in_break(self, time_slot: str) -> bool:
        """True if ``time_slot`` falls in the half-open window [break_start, break_end)."""
        if not self.break_start or not self.break_end:
            return False
        return self.break_start <= time_slot < self.break_end


class WorkingHours(BaseModel):
    """Template entry for one weekday (0=Sunday .. 6=Saturday)."""

    id: str = Field(default_factory=generate_id)
    day_of_week: int = Field(..., ge=0, le=6)
    is_open: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    slot_duration: Optional[int] = Field(default=None, gt=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("open_time", "close_time", "break_start", "break_end", mode="before")
    @classmethod
    def _normalize_times(cls, value):
        return _optional_time(value)

    @model_validator(mode="after")
    def _check_open_day(self) -> "WorkingHours":
        if self.is_open and (self.open_time is None or self.close_time is None):
            raise ValueError(f"Day {self.day_of_week} is open but has no open/close time")
        _check_window(self.open_time, self.close_time, self.break_start, self.break_end)
        return self
