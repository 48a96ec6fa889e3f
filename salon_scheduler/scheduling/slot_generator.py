"""
Slot grid generation from the default working-hours schedule.

Pure functions only: given a DefaultSchedule and a date range they
return the candidate slot times per open day. Writing the slots into
the store is the SlotStore's job.
"""

import logging
from datetime import date, timedelta
from typing import Iterator, Union

from salon_scheduler.schemas.schedule_schema import DefaultSchedule
from salon_scheduler.utils import SUNDAY, format_time, parse_time, to_date, weekday_index

logger = logging.getLogger(__name__)


def iter_dates(start: Union[str, date], end: Union[str, date]) -> Iterator[date]:
    """Yield every calendar date from ``start`` to ``end`` inclusive."""
    current = to_date(start)
    last = to_date(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def is_closed_day(day: date) -> bool:
    """Sunday is always closed, whatever the template says."""
    return weekday_index(day) == SUNDAY


def generate_day_times(schedule: DefaultSchedule) -> list[str]:
    """
    Return the slot start times for one open day.

    Walks from open_time in slot_duration steps, rolling minute overflow
    into hours. A slot is emitted only if it ends at or before
    close_time, and start times inside [break_start, break_end) are
    skipped.
    """
    hour, minute = parse_time(schedule.open_time)
    close = parse_time(schedule.close_time)
    duration = schedule.slot_duration

    times: list[str] = []
    while (hour, minute) < close:
        end_minute = minute + duration
        end = (hour + end_minute // 60, end_minute % 60)
        if end > close:
            break

        time_slot = format_time(hour, minute)
        if not schedule.in_break(time_slot):
            times.append(time_slot)

        minute += duration
        if minute >= 60:
            hour += minute // 60
            minute %= 60

    return times


def build_slot_grid(
    schedule: DefaultSchedule, start: Union[str, date], end: Union[str, date]
) -> dict[str, list[str]]:
    """Map each open ISO date in the range to its slot start times."""
    day_times = generate_day_times(schedule)
    grid: dict[str, list[str]] = {}
    for day in iter_dates(start, end):
        if is_closed_day(day):
            continue
        grid[day.isoformat()] = list(day_times)
    logger.debug(
        "Slot grid: %d open day(s), %d slot(s) per day", len(grid), len(day_times)
    )
    return grid
