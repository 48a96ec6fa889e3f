"""Tests for slot grid generation."""

from datetime import date

from salon_scheduler.scheduling.slot_generator import (
    build_slot_grid,
    generate_day_times,
    is_closed_day,
    iter_dates,
)
from salon_scheduler.schemas.slot_schema import SlotStatus
from tests.conftest import MONDAY, SATURDAY, SUNDAY, TUESDAY, make_schedule


class TestGenerateDayTimes:
    def test_break_window_is_half_open(self):
        times = generate_day_times(make_schedule())
        assert "11:30" in times
        assert "13:00" in times
        assert "12:00" not in times
        assert "12:30" not in times

    def test_default_day_has_eighteen_slots(self):
        times = generate_day_times(make_schedule())
        assert len(times) == 18
        assert times[0] == "08:00"
        assert times[-1] == "17:30"

    def test_no_break(self):
        times = generate_day_times(make_schedule(break_start=None, break_end=None))
        assert len(times) == 20
        assert "12:00" in times

    def test_minute_overflow_rolls_into_hours(self):
        times = generate_day_times(
            make_schedule(open_time="08:50", close_time="12:00", slot_duration=45,
                          break_start=None, break_end=None)
        )
        assert times == ["08:50", "09:35", "10:20", "11:05"]

    def test_duration_longer_than_an_hour(self):
        times = generate_day_times(
            make_schedule(open_time="09:00", close_time="14:00", slot_duration=90,
                          break_start=None, break_end=None)
        )
        assert times == ["09:00", "10:30", "12:00"]

    def test_trailing_partial_slot_not_generated(self):
        times = generate_day_times(
            make_schedule(open_time="08:00", close_time="09:15", slot_duration=30,
                          break_start=None, break_end=None)
        )
        assert times == ["08:00", "08:30"]

    def test_last_slot_may_end_exactly_at_close(self):
        times = generate_day_times(
            make_schedule(open_time="08:00", close_time="09:00", slot_duration=30,
                          break_start=None, break_end=None)
        )
        assert times == ["08:00", "08:30"]

    def test_times_are_zero_padded_and_sorted(self):
        times = generate_day_times(make_schedule(open_time="07:05", slot_duration=55))
        assert all(len(t) == 5 for t in times)
        assert times == sorted(times)

    def test_start_inside_break_is_skipped_but_straddling_start_kept(self):
        times = generate_day_times(
            make_schedule(open_time="11:00", close_time="14:00", slot_duration=45,
                          break_start="12:00", break_end="13:00")
        )
        # 11:45 starts before the break, 12:30 starts inside it
        assert times == ["11:00", "11:45", "13:15"]


class TestDateWalk:
    def test_iter_dates_inclusive(self):
        days = list(iter_dates(SATURDAY, MONDAY))
        assert days == [date(2025, 3, 15), date(2025, 3, 16), date(2025, 3, 17)]

    def test_inverted_range_is_empty(self):
        assert list(iter_dates(TUESDAY, MONDAY)) == []

    def test_sunday_is_closed(self):
        assert is_closed_day(date(2025, 3, 16))
        assert not is_closed_day(date(2025, 3, 15))

    def test_grid_skips_sunday(self):
        grid = build_slot_grid(make_schedule(), SATURDAY, TUESDAY)
        assert sorted(grid) == [SATURDAY, MONDAY, TUESDAY]
        assert SUNDAY not in grid


class TestGenerateSlots:
    def test_populates_available_slots(self, scheduler):
        created = scheduler.generate_slots(MONDAY, MONDAY)
        slots = scheduler.get_all_slots(MONDAY)
        assert created == 18
        assert len(slots) == 18
        assert all(s.status == SlotStatus.AVAILABLE for s in slots)

    def test_never_emits_sunday_even_if_template_open(self, scheduler):
        scheduler.template._days[0] = scheduler.template._days[0].model_copy(
            update={"is_open": True}
        )
        scheduler.generate_slots(SATURDAY, MONDAY)
        assert scheduler.get_all_slots(SUNDAY) == []
        assert scheduler.get_all_slots(SATURDAY)

    def test_generation_is_idempotent(self, scheduler):
        scheduler.generate_slots(SATURDAY, TUESDAY)
        before = {s.id: s for d in (SATURDAY, MONDAY, TUESDAY) for s in scheduler.get_all_slots(d)}
        created = scheduler.generate_slots(SATURDAY, TUESDAY)
        after = {s.id: s for d in (SATURDAY, MONDAY, TUESDAY) for s in scheduler.get_all_slots(d)}
        assert created == 0
        assert before == after

    def test_existing_slots_are_not_overwritten(self, scheduler, service_ids):
        scheduler.save_blocked_slots(MONDAY, ["09:00"], "Dentist")
        scheduler.generate_slots(MONDAY, MONDAY)
        booking = scheduler.create_booking(
            {"name": "Ana Souza", "phone": "69992839458"}, MONDAY, "10:00",
            [service_ids["Reflexologia"]],
        )
        scheduler.generate_slots(MONDAY, MONDAY)

        assert scheduler.find_slot(MONDAY, "09:00").status == SlotStatus.BLOCKED
        booked = scheduler.find_slot(MONDAY, "10:00")
        assert booked.status == SlotStatus.BOOKED
        assert booked.booking_id == booking.id
        assert len(scheduler.get_all_slots(MONDAY)) == 18

    def test_uses_saved_default_schedule(self, scheduler):
        scheduler.save_default_schedule(
            {"open_time": "09:00", "close_time": "12:00", "slot_duration": 60}
        )
        scheduler.generate_slots(MONDAY, MONDAY)
        assert [s.time_slot for s in scheduler.get_all_slots(MONDAY)] == [
            "09:00", "10:00", "11:00",
        ]
