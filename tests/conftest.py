"""Shared test fixtures and helpers."""

from dataclasses import replace
from typing import Optional

import pytest

from salon_scheduler.config import BookingConfig, settings
from salon_scheduler.scheduler import Scheduler
from salon_scheduler.schemas.schedule_schema import DefaultSchedule
from salon_scheduler.storage import MemoryCollectionStore

# 2025-03-15 is a Saturday
SATURDAY = "2025-03-15"
SUNDAY = "2025-03-16"
MONDAY = "2025-03-17"
TUESDAY = "2025-03-18"

ANA = {"name": "Ana Souza", "phone": "(69) 99283-9458", "email": "ana@example.com"}
BRUNO = {"name": "Bruno Lima", "phone": "69 98111-2233"}


@pytest.fixture
def store():
    return MemoryCollectionStore()


@pytest.fixture
def scheduler(store):
    sched = Scheduler(store)
    sched.initialize_data()
    return sched


@pytest.fixture
def service_ids(scheduler):
    """Seeded service ids keyed by service name."""
    return {s.name: s.id for s in scheduler.get_services()}


def make_scheduler(
    store: Optional[MemoryCollectionStore] = None,
    release_slot_on_cancel: bool = False,
    require_slot: bool = False,
) -> Scheduler:
    """Build a seeded Scheduler with explicit booking policy flags."""
    config = replace(
        settings,
        booking=BookingConfig(
            release_slot_on_cancel=release_slot_on_cancel, require_slot=require_slot
        ),
    )
    sched = Scheduler(store or MemoryCollectionStore(), config)
    sched.initialize_data()
    return sched


def make_schedule(
    open_time: str = "08:00",
    close_time: str = "18:00",
    slot_duration: int = 30,
    break_start: Optional[str] = "12:00",
    break_end: Optional[str] = "13:00",
) -> DefaultSchedule:
    """Helper to create a DefaultSchedule with sensible defaults."""
    return DefaultSchedule(
        open_time=open_time,
        close_time=close_time,
        slot_duration=slot_duration,
        break_start=break_start,
        break_end=break_end,
    )
