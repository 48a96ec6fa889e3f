"""
Booking creation, status transitions, and slot synchronization.

A booking reserves the slot at its date and time. Reaching a status that
frees the time (completed, no_show, and cancelled when configured)
returns the slot to available. Reads join each booking with its
customer and service line items.
"""

import threading
from datetime import date, time
from typing import Iterable, Optional, Union

from salon_scheduler.config import BookingConfig, settings
from salon_scheduler.logging_context import get_request_logger
from salon_scheduler.schemas.booking_schema import Booking, BookingService, BookingStatus
from salon_scheduler.schemas.customer_schema import Customer, CustomerInfo
from salon_scheduler.schemas.service_schema import Service
from salon_scheduler.schemas.slot_schema import Slot, SlotStatus
from salon_scheduler.scheduling.slot_store import SlotStore
from salon_scheduler.storage import BOOKING_SERVICES, BOOKINGS, CollectionStore, WriteThroughIndex
from salon_scheduler.tools.customer import CustomerDirectory
from salon_scheduler.tools.services import ServiceCatalog
from salon_scheduler.utils import normalize_date, normalize_time, utc_now

logger = get_request_logger(__name__)

SLOT_RELEASING_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.NO_SHOW})
# bookings in these statuses hold their date and time
LIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class SchedulingError(Exception):
    """Base class for scheduling failures surfaced to callers."""


class SlotUnavailableError(SchedulingError):
    """Raised when the requested slot is already booked or blocked."""


class SlotNotFoundError(SchedulingError):
    """Raised in strict mode when no slot exists at the requested date and time."""


def enrich_booking(
    booking: Booking,
    customers: dict[str, Customer],
    services: dict[str, Service],
    line_items: list[BookingService],
) -> Booking:
    """Join a booking with its customer and service line items. No side effects."""
    joined = [
        item.model_copy(update={"service": services.get(item.service_id)})
        for item in line_items
    ]
    return booking.model_copy(
        update={"customer": customers.get(booking.customer_id), "booking_services": joined}
    )


class BookingEngine(WriteThroughIndex):
    """Creates bookings against slots and keeps slot status in step with them."""

    def __init__(
        self,
        store: CollectionStore,
        slots: SlotStore,
        customers: CustomerDirectory,
        services: ServiceCatalog,
        lock: Optional[threading.RLock] = None,
        config: Optional[BookingConfig] = None,
    ) -> None:
        self._store = store
        self._slots = slots
        self._customers = customers
        self._services = services
        self._lock = lock or threading.RLock()
        self._config = config or settings.booking

        self._bookings: dict[str, Booking] = {}
        self._line_items: dict[str, list[BookingService]] = {}
        for record in store.load_all(BOOKINGS):
            booking = Booking.model_validate(record)
            self._bookings[booking.id] = booking
        for record in store.load_all(BOOKING_SERVICES):
            item = BookingService.model_validate(record)
            self._line_items.setdefault(item.booking_id, []).append(item)

    @property
    def releasing_statuses(self) -> frozenset[BookingStatus]:
        if self._config.release_slot_on_cancel:
            return SLOT_RELEASING_STATUSES | {BookingStatus.CANCELLED}
        return SLOT_RELEASING_STATUSES

    # ------------------------------------------------------------------ #
    # Creation
    # ------------------------------------------------------------------ #

    def create_booking(
        self,
        customer: Union[CustomerInfo, dict],
        booking_date: Union[str, date],
        booking_time: Union[str, time],
        service_ids: Iterable[str],
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Create a confirmed booking and reserve its slot.

        Raises:
            SlotUnavailableError: If the slot at date/time is booked or blocked,
                or a pending or confirmed booking already holds that date and time.
            SlotNotFoundError: If no slot exists and slots are required.
        """
        info = customer if isinstance(customer, CustomerInfo) else CustomerInfo.model_validate(customer)
        day = normalize_date(booking_date)
        at = normalize_time(booking_time)
        service_ids = list(service_ids)

        with self._lock:
            slot = self._slots.find_slot(day, at)
            if slot is not None and slot.status != SlotStatus.AVAILABLE:
                raise SlotUnavailableError(
                    f"Slot {day} {at} is {slot.status.value} and cannot be booked"
                )
            holder = self._live_booking_at(day, at)
            if holder is not None:
                raise SlotUnavailableError(
                    f"{day} {at} is already held by booking {holder.id} ({holder.status.value})"
                )
            if slot is None:
                if self._config.require_slot:
                    raise SlotNotFoundError(f"No slot exists at {day} {at}")
                logger.warning(
                    "No slot at %s %s; booking created without slot linkage", day, at
                )

            with self._customers.transaction(), self._slots.transaction(), self.transaction():
                owner = self._customers.find_or_create(info.name, info.phone, info.email)
                selected = self._services.get_services_by_ids(service_ids)
                if len(selected) != len(set(service_ids)):
                    logger.debug(
                        "Dropped %d unknown service id(s)", len(set(service_ids)) - len(selected)
                    )

                booking = Booking(
                    customer_id=owner.id,
                    booking_date=day,
                    booking_time=at,
                    status=BookingStatus.CONFIRMED,
                    total_price=sum(s.price for s in selected),
                    total_duration_minutes=sum(s.duration_minutes for s in selected),
                    notes=notes or "",
                )
                items = [
                    BookingService(booking_id=booking.id, service_id=s.id, price=s.price)
                    for s in selected
                ]
                self._bookings[booking.id] = booking
                self._line_items[booking.id] = items
                self._flush()

                if slot is not None:
                    self._slots.reserve(slot.id, booking.id)

            logger.info(
                "Booking created: %s for %s on %s at %s (%d service(s), total %.2f)",
                booking.id, owner.name, day, at, len(items), booking.total_price,
            )
            return self._enrich(booking)

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_bookings(self, booking_date: Optional[Union[str, date]] = None) -> list[Booking]:
        """Bookings (optionally of one date) sorted by date, then time."""
        day = normalize_date(booking_date) if booking_date is not None else None
        with self._lock:
            bookings = [
                b for b in self._bookings.values() if day is None or b.booking_date == day
            ]
            customers = self._customers.snapshot()
            services = self._services.snapshot()
            enriched = [
                enrich_booking(b, customers, services, self._line_items.get(b.id, []))
                for b in bookings
            ]
        return sorted(enriched, key=lambda b: (b.booking_date, b.booking_time))

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return self._enrich(booking) if booking else None

    # ------------------------------------------------------------------ #
    # Status transitions
    # ------------------------------------------------------------------ #

    def update_booking_status(
        self, booking_id: str, status: Union[BookingStatus, str]
    ) -> Optional[Booking]:
        """
        Set a booking's status. Any status may follow any other.

        Completed and no_show free the linked slot; cancelled leaves it
        booked unless RELEASE_SLOT_ON_CANCEL is enabled. Moving a booking
        back to pending or confirmed takes its slot again, and raises
        SlotUnavailableError if that date and time has since been booked
        or blocked. Unknown ids return None.
        """
        new_status = BookingStatus(status)
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                logger.debug("Status update ignored for unknown booking %s", booking_id)
                return None

            slot = self._slots.find_slot(current.booking_date, current.booking_time)
            reactivated = new_status in LIVE_STATUSES and current.status not in LIVE_STATUSES
            if reactivated:
                self._check_reactivation(current, slot)

            updated = current.model_copy(update={"status": new_status, "updated_at": utc_now()})
            with self._slots.transaction(), self.transaction():
                self._bookings[booking_id] = updated
                if new_status in self.releasing_statuses:
                    linked = self._slots.find_slot_by_booking(booking_id)
                    if linked is not None:
                        self._slots.release(linked.id)
                        logger.info(
                            "Slot %s %s released by booking %s (%s)",
                            linked.date, linked.time_slot, booking_id, new_status.value,
                        )
                elif reactivated and slot is not None and slot.status == SlotStatus.AVAILABLE:
                    self._slots.reserve(slot.id, booking_id)
                self._flush()

            logger.info(
                "Booking %s status: %s -> %s",
                booking_id, current.status.value, new_status.value,
            )
            return self._enrich(updated)

    def unlinked_live_bookings(self) -> dict[tuple[str, str], str]:
        """(date, time) -> id of each pending or confirmed booking that has no slot."""
        with self._lock:
            held: dict[tuple[str, str], str] = {}
            for booking in self._bookings.values():
                if booking.status not in LIVE_STATUSES:
                    continue
                if self._slots.find_slot_by_booking(booking.id) is not None:
                    continue
                held.setdefault((booking.booking_date, booking.booking_time), booking.id)
            return held

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _live_booking_at(
        self, booking_date: str, booking_time: str, exclude: Optional[str] = None
    ) -> Optional[Booking]:
        for booking in self._bookings.values():
            if (
                booking.id != exclude
                and booking.status in LIVE_STATUSES
                and booking.booking_date == booking_date
                and booking.booking_time == booking_time
            ):
                return booking
        return None

    def _check_reactivation(self, booking: Booking, slot: Optional[Slot]) -> None:
        day, at = booking.booking_date, booking.booking_time
        holder = self._live_booking_at(day, at, exclude=booking.id)
        if holder is not None:
            raise SlotUnavailableError(
                f"{day} {at} is already held by booking {holder.id} ({holder.status.value})"
            )
        taken = slot is not None and slot.status != SlotStatus.AVAILABLE
        if taken and slot.booking_id != booking.id:
            raise SlotUnavailableError(
                f"Slot {day} {at} is {slot.status.value} and cannot be booked"
            )

    def _enrich(self, booking: Booking) -> Booking:
        return enrich_booking(
            booking,
            self._customers.snapshot(),
            self._services.snapshot(),
            self._line_items.get(booking.id, []),
        )

    def _checkpoint(self) -> tuple:
        return dict(self._bookings), dict(self._line_items)

    def _restore(self, state: tuple) -> None:
        bookings, line_items = state
        self._bookings, self._line_items = dict(bookings), dict(line_items)

    def _flush(self) -> None:
        self._store.store_all(BOOKINGS, [b.to_record() for b in self._bookings.values()])
        self._store.store_all(
            BOOKING_SERVICES,
            [
                item.model_dump(mode="json", exclude={"service"})
                for items in self._line_items.values()
                for item in items
            ],
        )
