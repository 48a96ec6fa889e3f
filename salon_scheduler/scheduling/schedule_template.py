"""
Weekly working-hours template and the derived default schedule.

One WorkingHours entry exists per weekday (0=Sunday .. 6=Saturday).
Slot generation reads a single DefaultSchedule taken from Monday's
entry. Saving a default schedule rewrites all seven days with the same
hours and forces Sunday closed and every other day open.
"""

import logging
import threading
from typing import Optional, Union

from salon_scheduler.config import ScheduleConfig, settings
from salon_scheduler.schemas.schedule_schema import DefaultSchedule, WorkingHours
from salon_scheduler.storage import WORKING_HOURS, CollectionStore, WriteThroughIndex
from salon_scheduler.utils import SUNDAY, utc_now

logger = logging.getLogger(__name__)

MONDAY = 1
DAYS_IN_WEEK = 7

FALLBACK_OPEN_TIME = "08:00"
FALLBACK_CLOSE_TIME = "18:00"
FALLBACK_SLOT_DURATION = 30


class ScheduleTemplate(WriteThroughIndex):
    """Working-hours entries indexed by weekday."""

    def __init__(
        self,
        store: CollectionStore,
        lock: Optional[threading.RLock] = None,
        config: Optional[ScheduleConfig] = None,
    ) -> None:
        self._store = store
        self._lock = lock or threading.RLock()
        self._config = config or settings.schedule
        self._days: dict[int, WorkingHours] = {}
        for record in store.load_all(WORKING_HOURS):
            entry = WorkingHours.model_validate(record)
            self._days.setdefault(entry.day_of_week, entry)

    def seed_default_week(self) -> bool:
        """Create the initial week from configuration if no entries exist."""
        with self._lock, self.transaction():
            if self._days:
                return False
            cfg = self._config
            for day in range(DAYS_IN_WEEK):
                self._days[day] = WorkingHours(
                    day_of_week=day,
                    is_open=day != SUNDAY,
                    open_time=cfg.open_time,
                    close_time=cfg.close_time,
                    break_start=cfg.break_start or None,
                    break_end=cfg.break_end or None,
                    slot_duration=cfg.slot_duration,
                )
            self._flush()
            logger.info("Seeded default working week %s-%s", cfg.open_time, cfg.close_time)
            return True

    def get_week(self) -> list[WorkingHours]:
        with self._lock:
            return [self._days[d].model_copy() for d in sorted(self._days)]

    def get_day(self, day_of_week: int) -> Optional[WorkingHours]:
        with self._lock:
            entry = self._days.get(day_of_week)
            return entry.model_copy() if entry else None

    def get_default_schedule(self) -> DefaultSchedule:
        """Effective schedule for slot generation, read from Monday's entry."""
        with self._lock:
            monday = self._days.get(MONDAY)
        if monday is None:
            return DefaultSchedule(
                open_time=FALLBACK_OPEN_TIME,
                close_time=FALLBACK_CLOSE_TIME,
                slot_duration=FALLBACK_SLOT_DURATION,
            )
        return DefaultSchedule(
            open_time=monday.open_time or FALLBACK_OPEN_TIME,
            close_time=monday.close_time or FALLBACK_CLOSE_TIME,
            slot_duration=monday.slot_duration or FALLBACK_SLOT_DURATION,
            break_start=monday.break_start,
            break_end=monday.break_end,
        )

    def save_default_schedule(
        self, schedule: Union[DefaultSchedule, dict]
    ) -> list[WorkingHours]:
        """
        Apply one set of hours to the whole week.

        Overrides any per-day open/closed customization: Sunday becomes
        closed and every other day open. Existing entries keep their id
        and created_at.
        """
        if not isinstance(schedule, DefaultSchedule):
            schedule = DefaultSchedule.model_validate(schedule)

        with self._lock, self.transaction():
            now = utc_now()
            week: dict[int, WorkingHours] = {}
            for day in range(DAYS_IN_WEEK):
                existing = self._days.get(day)
                identity = (
                    {"id": existing.id, "created_at": existing.created_at} if existing else {}
                )
                week[day] = WorkingHours(
                    **identity,
                    day_of_week=day,
                    is_open=day != SUNDAY,
                    open_time=schedule.open_time,
                    close_time=schedule.close_time,
                    break_start=schedule.break_start,
                    break_end=schedule.break_end,
                    slot_duration=schedule.slot_duration,
                    updated_at=now,
                )
            self._days = week
            self._flush()
            logger.info(
                "Default schedule saved: %s-%s every %d min (break %s-%s)",
                schedule.open_time,
                schedule.close_time,
                schedule.slot_duration,
                schedule.break_start or "none",
                schedule.break_end or "none",
            )
            return self.get_week()

    def _checkpoint(self) -> dict[int, WorkingHours]:
        return dict(self._days)

    def _restore(self, state: dict[int, WorkingHours]) -> None:
        self._days = dict(state)

    def _flush(self) -> None:
        self._store.store_all(
            WORKING_HOURS,
            [self._days[d].model_dump(mode="json") for d in sorted(self._days)],
        )
