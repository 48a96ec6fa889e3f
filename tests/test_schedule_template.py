"""Tests for the weekly working-hours template and default schedule."""

import pytest
from pydantic import ValidationError

from salon_scheduler.scheduling.schedule_template import ScheduleTemplate
from salon_scheduler.schemas.schedule_schema import DefaultSchedule
from salon_scheduler.storage import WORKING_HOURS, MemoryCollectionStore
from tests.conftest import make_schedule


class TestDefaultSchedule:
    def test_fallback_without_monday_entry(self):
        template = ScheduleTemplate(MemoryCollectionStore())
        schedule = template.get_default_schedule()
        assert schedule.open_time == "08:00"
        assert schedule.close_time == "18:00"
        assert schedule.slot_duration == 30
        assert schedule.break_start is None
        assert schedule.break_end is None

    def test_seeded_week_reads_monday(self, scheduler):
        schedule = scheduler.get_default_schedule()
        assert schedule == make_schedule()

    def test_seed_only_when_empty(self, scheduler):
        assert scheduler.template.seed_default_week() is False

    def test_seeded_sunday_closed(self, scheduler):
        week = scheduler.get_working_hours()
        assert [d.day_of_week for d in week] == list(range(7))
        assert week[0].is_open is False
        assert all(d.is_open for d in week[1:])


class TestSaveDefaultSchedule:
    def test_applies_to_all_seven_days(self, scheduler):
        week = scheduler.save_default_schedule(
            make_schedule(open_time="09:00", close_time="17:00", slot_duration=45,
                          break_start=None, break_end=None)
        )
        assert len(week) == 7
        for day in week:
            assert day.open_time == "09:00"
            assert day.close_time == "17:00"
            assert day.slot_duration == 45
            assert day.break_start is None

    def test_overrides_per_day_open_flags(self, scheduler):
        template = scheduler.template
        template._days[0] = template._days[0].model_copy(update={"is_open": True})
        template._days[6] = template._days[6].model_copy(update={"is_open": False})

        week = scheduler.save_default_schedule(make_schedule())
        assert week[0].is_open is False
        assert week[6].is_open is True

    def test_preserves_identity(self, scheduler):
        before = {d.day_of_week: d for d in scheduler.get_working_hours()}
        after = scheduler.save_default_schedule(make_schedule(open_time="10:00"))
        for day in after:
            assert day.id == before[day.day_of_week].id
            assert day.created_at == before[day.day_of_week].created_at
            assert day.updated_at >= before[day.day_of_week].updated_at

    def test_creates_missing_days(self):
        store = MemoryCollectionStore()
        template = ScheduleTemplate(store)
        template.save_default_schedule(make_schedule())
        assert len(store.load_all(WORKING_HOURS)) == 7

    def test_round_trips_through_default_schedule(self, scheduler):
        schedule = make_schedule(open_time="07:30", close_time="19:00", slot_duration=20,
                                 break_start="12:30", break_end="13:10")
        scheduler.save_default_schedule(schedule)
        assert scheduler.get_default_schedule() == schedule

    def test_accepts_plain_dict(self, scheduler):
        scheduler.save_default_schedule(
            {"open_time": "9:00", "close_time": "17:00", "slot_duration": 30}
        )
        assert scheduler.get_default_schedule().open_time == "09:00"

    def test_invalid_schedule_rejected_before_write(self, scheduler):
        before = scheduler.get_working_hours()
        with pytest.raises(ValidationError):
            scheduler.save_default_schedule(
                {"open_time": "18:00", "close_time": "08:00", "slot_duration": 30}
            )
        assert scheduler.get_working_hours() == before


class TestScheduleValidation:
    def test_break_requires_both_ends(self):
        with pytest.raises(ValidationError, match="together"):
            DefaultSchedule(open_time="08:00", close_time="18:00", slot_duration=30,
                            break_start="12:00")

    def test_break_must_be_ordered(self):
        with pytest.raises(ValidationError, match="break_start"):
            make_schedule(break_start="13:00", break_end="12:00")

    def test_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            make_schedule(slot_duration=0)

    def test_malformed_time_rejected(self):
        with pytest.raises(ValidationError):
            make_schedule(open_time="8h00")

    def test_in_break_half_open(self):
        schedule = make_schedule()
        assert schedule.in_break("12:00")
        assert schedule.in_break("12:59")
        assert not schedule.in_break("13:00")
        assert not schedule.in_break("11:59")
