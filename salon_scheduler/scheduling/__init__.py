from salon_scheduler.scheduling.booking_engine import (
    BookingEngine,
    SchedulingError,
    SlotNotFoundError,
    SlotUnavailableError,
)
from salon_scheduler.scheduling.schedule_template import ScheduleTemplate
from salon_scheduler.scheduling.slot_generator import (
    build_slot_grid,
    generate_day_times,
    iter_dates,
)
from salon_scheduler.scheduling.slot_store import SlotStore

__all__ = [
    "BookingEngine",
    "ScheduleTemplate",
    "SlotStore",
    "SchedulingError",
    "SlotNotFoundError",
    "SlotUnavailableError",
    "build_slot_grid",
    "generate_day_times",
    "iter_dates",
]
