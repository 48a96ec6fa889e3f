"""
Indexed in-memory slot store.

Slots are kept in a map keyed by id plus secondary indexes keyed by
(date, time_slot), which enforces at most one slot per date and time,
and by the booking_id of booked slots.
Every mutating operation runs under the shared lock and writes the full
slot collection back to the collection store before returning.
"""

import logging
import threading
from datetime import date, time
from typing import Any, Iterable, Optional, Union

from salon_scheduler.schemas.slot_schema import Slot, SlotStatus
from salon_scheduler.storage import SLOTS, CollectionStore, WriteThroughIndex
from salon_scheduler.utils import normalize_date, normalize_time, utc_now

logger = logging.getLogger(__name__)

DateLike = Union[str, date]
TimeLike = Union[str, time]

_READ_ONLY_FIELDS = frozenset({"id", "created_at", "updated_at"})
# fields that tie a booked slot to its booking; only reserve/release change them
_LINK_FIELDS = frozenset({"status", "booking_id", "date", "time_slot"})


def _check_fields(changes: dict[str, Any]) -> None:
    unknown = set(changes) - (set(Slot.model_fields) - _READ_ONLY_FIELDS)
    if unknown:
        raise ValueError(f"Unknown or read-only slot field(s): {sorted(unknown)}")


class SlotStore(WriteThroughIndex):
    """All slots of the calendar with exact (date, time) lookup."""

    def __init__(self, store: CollectionStore, lock: Optional[threading.RLock] = None) -> None:
        self._store = store
        self._lock = lock or threading.RLock()
        self._slots: dict[str, Slot] = {}
        self._by_key: dict[tuple[str, str], str] = {}
        self._by_booking: dict[str, str] = {}
        for record in store.load_all(SLOTS):
            slot = Slot.model_validate(record)
            if slot.key in self._by_key:
                logger.warning("Duplicate stored slot %s %s ignored", slot.date, slot.time_slot)
                continue
            self._index(slot)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def find_slot(self, slot_date: DateLike, time_slot: TimeLike) -> Optional[Slot]:
        """Exact match on (date, time). Returns None if absent."""
        key = (normalize_date(slot_date), normalize_time(time_slot))
        with self._lock:
            slot_id = self._by_key.get(key)
            return self._slots[slot_id].model_copy() if slot_id else None

    def find_slot_by_booking(self, booking_id: str) -> Optional[Slot]:
        """Return the slot reserved by ``booking_id``, if any."""
        with self._lock:
            slot_id = self._by_booking.get(booking_id)
            return self._slots[slot_id].model_copy() if slot_id else None

    def get_slot(self, slot_id: str) -> Optional[Slot]:
        with self._lock:
            slot = self._slots.get(slot_id)
            return slot.model_copy() if slot else None

    def get_all_slots(self, slot_date: DateLike) -> list[Slot]:
        """All slots of one date, any status, ordered by time."""
        day = normalize_date(slot_date)
        with self._lock:
            slots = [s.model_copy() for s in self._slots.values() if s.date == day]
        return sorted(slots, key=lambda s: s.time_slot)

    def get_available_slots(self, slot_date: DateLike) -> list[Slot]:
        """Bookable slots of one date, ordered by time."""
        return [s for s in self.get_all_slots(slot_date) if s.status == SlotStatus.AVAILABLE]

    def count(self) -> int:
        with self._lock:
            return len(self._slots)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def add_missing(
        self,
        grid: dict[str, list[str]],
        reserved: Optional[dict[tuple[str, str], str]] = None,
    ) -> int:
        """
        Create a slot for every (date, time) of ``grid`` not already stored.

        New slots are available, except where ``reserved`` maps the
        (date, time) to a booking that has no slot yet: that slot is
        created booked for it. Existing slots are left untouched whatever
        their status. Returns the number of slots created.
        """
        reserved = reserved or {}
        with self._lock, self.transaction():
            created = 0
            for slot_date, times in grid.items():
                for time_slot in times:
                    key = (slot_date, time_slot)
                    if key in self._by_key:
                        continue
                    booking_id = reserved.get(key)
                    if booking_id is not None and booking_id not in self._by_booking:
                        slot = Slot(
                            date=slot_date,
                            time_slot=time_slot,
                            status=SlotStatus.BOOKED,
                            booking_id=booking_id,
                        )
                        logger.info(
                            "Slot %s %s created booked for booking %s",
                            slot_date, time_slot, booking_id,
                        )
                    else:
                        slot = Slot(date=slot_date, time_slot=time_slot)
                    self._index(slot)
                    created += 1
            if created:
                self._flush()
            return created

    def update_slot(self, slot_id: str, **changes: Any) -> Optional[Slot]:
        """
        Merge ``changes`` into a slot and refresh updated_at.

        A slot cannot be booked here, and a booked slot cannot change its
        status, booking_id, date or time; bookings own that link through
        reserve() and release(). Unknown ids are a silent no-op returning None.
        """
        _check_fields(changes)
        with self._lock:
            current = self._slots.get(slot_id)
            if current is None:
                logger.debug("update_slot ignored unknown slot id %s", slot_id)
                return None
            candidate = Slot.model_validate({**current.model_dump(), **changes})
            touched = sorted(
                name for name in _LINK_FIELDS
                if getattr(candidate, name) != getattr(current, name)
            )
            linked = SlotStatus.BOOKED in (current.status, candidate.status)
            if linked and touched:
                raise ValueError(
                    f"Slot {current.date} {current.time_slot}: {touched} can only "
                    "change through a booking"
                )
            return self._apply(slot_id, changes)

    def reserve(self, slot_id: str, booking_id: str) -> Optional[Slot]:
        return self._apply(
            slot_id,
            {"status": SlotStatus.BOOKED, "booking_id": booking_id, "blocked_reason": None},
        )

    def release(self, slot_id: str) -> Optional[Slot]:
        return self._apply(slot_id, {"status": SlotStatus.AVAILABLE, "booking_id": None})

    def save_blocked_slots(
        self, slot_date: DateLike, times: Iterable[TimeLike], reason: str
    ) -> list[Slot]:
        """
        Upsert each (date, time) to a blocked slot carrying ``reason``.

        An existing slot keeps its id and created_at. Booked slots are
        skipped so a live reservation is never detached from its slot.
        """
        day = normalize_date(slot_date)
        time_slots = [normalize_time(t) for t in times]

        with self._lock, self.transaction():
            now = utc_now()
            blocked: list[Slot] = []
            for time_slot in time_slots:
                slot_id = self._by_key.get((day, time_slot))
                existing = self._slots.get(slot_id) if slot_id else None
                if existing is not None and existing.status == SlotStatus.BOOKED:
                    logger.warning(
                        "Slot %s %s is booked (booking %s); not blocking it",
                        day, time_slot, existing.booking_id,
                    )
                    continue

                identity = (
                    {"id": existing.id, "created_at": existing.created_at} if existing else {}
                )
                slot = Slot(
                    **identity,
                    date=day,
                    time_slot=time_slot,
                    status=SlotStatus.BLOCKED,
                    blocked_reason=reason,
                    updated_at=now,
                )
                self._index(slot)
                blocked.append(slot.model_copy())

            if blocked:
                self._flush()
            logger.info("Blocked %d slot(s) on %s: %s", len(blocked), day, reason)
            return blocked

    def delete_all_slots(self) -> int:
        """Remove every slot that is not booked. Returns the number removed."""
        with self._lock, self.transaction():
            keep = {sid: s for sid, s in self._slots.items() if s.status == SlotStatus.BOOKED}
            removed = len(self._slots) - len(keep)
            self._slots = keep
            self._by_key = {s.key: sid for sid, s in keep.items()}
            self._by_booking = {s.booking_id: sid for sid, s in keep.items()}
            self._flush()
            logger.info("Cleared %d unbooked slot(s), kept %d booked", removed, len(keep))
            return removed

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _apply(self, slot_id: str, changes: dict[str, Any]) -> Optional[Slot]:
        with self._lock:
            current = self._slots.get(slot_id)
            if current is None:
                return None

            updated = Slot.model_validate(
                {**current.model_dump(), **changes, "updated_at": utc_now()}
            )
            owner = self._by_key.get(updated.key)
            if owner is not None and owner != slot_id:
                raise ValueError(
                    f"A slot already exists at {updated.date} {updated.time_slot}"
                )
            with self.transaction():
                self._index(updated)
                self._flush()
            return updated.model_copy()

    def _index(self, slot: Slot) -> None:
        previous = self._slots.get(slot.id)
        if previous is not None:
            self._by_key.pop(previous.key, None)
            if previous.booking_id:
                self._by_booking.pop(previous.booking_id, None)
        self._slots[slot.id] = slot
        self._by_key[slot.key] = slot.id
        if slot.booking_id:
            self._by_booking[slot.booking_id] = slot.id

    def _checkpoint(self) -> tuple:
        return dict(self._slots), dict(self._by_key), dict(self._by_booking)

    def _restore(self, state: tuple) -> None:
        slots, by_key, by_booking = state
        self._slots, self._by_key, self._by_booking = dict(slots), dict(by_key), dict(by_booking)

    def _flush(self) -> None:
        self._store.store_all(
            SLOTS, [s.model_dump(mode="json") for s in self._slots.values()]
        )
