"""
Scheduler facade, the boundary of the scheduling engine.

Wires the working-hours template, slot store, customer directory,
service catalog, and booking engine to one collection store and one
re-entrant lock. Every composite operation runs under that lock, so two
concurrent bookings for the same date and time cannot both see the slot
as available.

Usage:
    scheduler = Scheduler(MemoryCollectionStore())
    scheduler.initialize_data()
    scheduler.generate_slots("2025-03-17", "2025-03-22")
    booking = scheduler.create_booking(
        {"name": "Ana Souza", "phone": "69 99283-9458"},
        "2025-03-17", "09:00", [service.id for service in scheduler.get_services()],
    )
"""

import threading
from datetime import date, time
from typing import Any, Iterable, Optional, Union

from salon_scheduler.config import AppConfig, settings
from salon_scheduler.logging_context import get_request_logger
from salon_scheduler.schemas.booking_schema import Booking, BookingStatus
from salon_scheduler.schemas.customer_schema import CustomerInfo
from salon_scheduler.schemas.schedule_schema import DefaultSchedule, WorkingHours
from salon_scheduler.schemas.service_schema import Service
from salon_scheduler.schemas.slot_schema import Slot
from salon_scheduler.scheduling.booking_engine import BookingEngine
from salon_scheduler.scheduling.schedule_template import ScheduleTemplate
from salon_scheduler.scheduling.slot_generator import build_slot_grid
from salon_scheduler.scheduling.slot_store import SlotStore
from salon_scheduler.storage import CollectionStore, JsonFileCollectionStore, MemoryCollectionStore
from salon_scheduler.tools.customer import CustomerDirectory
from salon_scheduler.tools.services import ServiceCatalog

logger = get_request_logger(__name__)

DateLike = Union[str, date]
TimeLike = Union[str, time]


class Scheduler:
    """Single entry point over slots, schedule, and bookings."""

    def __init__(
        self, store: Optional[CollectionStore] = None, config: Optional[AppConfig] = None
    ) -> None:
        self.config = config or settings
        self.store = store if store is not None else MemoryCollectionStore()
        self._lock = threading.RLock()

        self.template = ScheduleTemplate(self.store, self._lock, self.config.schedule)
        self.slots = SlotStore(self.store, self._lock)
        self.customers = CustomerDirectory(self.store, self._lock)
        self.services = ServiceCatalog(self.store, self._lock)
        self.bookings = BookingEngine(
            self.store,
            self.slots,
            self.customers,
            self.services,
            self._lock,
            self.config.booking,
        )

    def initialize_data(self) -> None:
        """Seed the service catalog and working week when they are empty."""
        with self._lock:
            self.services.seed_defaults()
            self.template.seed_default_week()

    # ------------------------------------------------------------------ #
    # Schedule
    # ------------------------------------------------------------------ #

    def get_default_schedule(self) -> DefaultSchedule:
        return self.template.get_default_schedule()

    def save_default_schedule(
        self, schedule: Union[DefaultSchedule, dict]
    ) -> list[WorkingHours]:
        return self.template.save_default_schedule(schedule)

    def get_working_hours(self) -> list[WorkingHours]:
        return self.template.get_week()

    # ------------------------------------------------------------------ #
    # Slots
    # ------------------------------------------------------------------ #

    def generate_slots(self, start_date: DateLike, end_date: DateLike) -> int:
        """
        Add every missing slot between the dates (inclusive).

        A new slot at the date and time of a pending or confirmed booking
        that has no slot is created booked for that booking.
        """
        with self._lock:
            schedule = self.template.get_default_schedule()
            grid = build_slot_grid(schedule, start_date, end_date)
            created = self.slots.add_missing(grid, self.bookings.unlinked_live_bookings())
        logger.info(
            "Generated %d slot(s) for %s..%s across %d open day(s)",
            created, start_date, end_date, len(grid),
        )
        return created

    def find_slot(self, slot_date: DateLike, time_slot: TimeLike) -> Optional[Slot]:
        return self.slots.find_slot(slot_date, time_slot)

    def get_available_slots(self, slot_date: DateLike) -> list[Slot]:
        return self.slots.get_available_slots(slot_date)

    def get_all_slots(self, slot_date: DateLike) -> list[Slot]:
        return self.slots.get_all_slots(slot_date)

    def update_slot(self, slot_id: str, **changes: Any) -> Optional[Slot]:
        return self.slots.update_slot(slot_id, **changes)

    def save_blocked_slots(
        self, slot_date: DateLike, times: Iterable[TimeLike], reason: str
    ) -> list[Slot]:
        return self.slots.save_blocked_slots(slot_date, times, reason)

    def delete_all_slots(self) -> int:
        return self.slots.delete_all_slots()

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def create_booking(
        self,
        customer: Union[CustomerInfo, dict],
        booking_date: DateLike,
        booking_time: TimeLike,
        service_ids: Iterable[str],
        notes: Optional[str] = None,
    ) -> Booking:
        return self.bookings.create_booking(
            customer, booking_date, booking_time, service_ids, notes
        )

    def get_bookings(self, booking_date: Optional[DateLike] = None) -> list[Booking]:
        return self.bookings.get_bookings(booking_date)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.bookings.get_booking(booking_id)

    def update_booking_status(
        self, booking_id: str, status: Union[BookingStatus, str]
    ) -> Optional[Booking]:
        return self.bookings.update_booking_status(booking_id, status)

    # ------------------------------------------------------------------ #
    # Service catalog
    # ------------------------------------------------------------------ #

    def get_services(self) -> list[Service]:
        return self.services.get_services()

    def create_service(self, name: str, price: float, duration_minutes: int, **kwargs: Any) -> Service:
        return self.services.create_service(name, price, duration_minutes, **kwargs)

    def update_service(self, service_id: str, **changes: Any) -> Optional[Service]:
        return self.services.update_service(service_id, **changes)

    def delete_service(self, service_id: str) -> bool:
        return self.services.delete_service(service_id)


def create_scheduler(config: Optional[AppConfig] = None, data_dir: Optional[str] = None) -> Scheduler:
    """Build a Scheduler over the configured storage backend and seed it."""
    config = config or settings
    if data_dir is not None or config.storage.backend == "json":
        store: CollectionStore = JsonFileCollectionStore(
            data_dir or config.storage.data_dir, config.storage.key_prefix
        )
    else:
        store = MemoryCollectionStore()
    scheduler = Scheduler(store, config)
    scheduler.initialize_data()
    return scheduler
