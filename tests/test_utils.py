"""Tests for shared utility functions."""

from datetime import date, datetime, time

import pytest

from salon_scheduler.utils import (
    normalize_date,
    normalize_phone,
    normalize_time,
    parse_time,
    weekday_index,
)


class TestNormalizePhone:
    def test_strips_spaces(self):
        assert normalize_phone("69 99283 9458") == "69992839458"

    def test_strips_dashes(self):
        assert normalize_phone("69-99283-9458") == "69992839458"

    def test_strips_parentheses(self):
        assert normalize_phone("(69) 99283-9458") == "69992839458"

    def test_preserves_leading_plus(self):
        assert normalize_phone("+55 69 99283 9458") == "+5569992839458"

    def test_clean_number_unchanged(self):
        assert normalize_phone("69992839458") == "69992839458"

    def test_strips_whitespace(self):
        assert normalize_phone("  69992839458  ") == "69992839458"


class TestNormalizeTime:
    def test_pads_single_digit_hour(self):
        assert normalize_time("9:00") == "09:00"

    def test_keeps_padded_time(self):
        assert normalize_time("13:30") == "13:30"

    def test_accepts_time_object(self):
        assert normalize_time(time(8, 5)) == "08:05"

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "1230", "12:5", ""])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            normalize_time(value)

    def test_parse_time_returns_parts(self):
        assert parse_time("07:45") == (7, 45)


class TestNormalizeDate:
    def test_iso_string(self):
        assert normalize_date("2025-03-17") == "2025-03-17"

    def test_date_object(self):
        assert normalize_date(date(2025, 3, 7)) == "2025-03-07"

    def test_datetime_object(self):
        assert normalize_date(datetime(2025, 3, 7, 15, 0)) == "2025-03-07"

    @pytest.mark.parametrize("value", ["17/03/2025", "2025-02-30", "tomorrow"])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            normalize_date(value)


class TestWeekdayIndex:
    def test_sunday_is_zero(self):
        assert weekday_index(date(2025, 3, 16)) == 0

    def test_monday_is_one(self):
        assert weekday_index(date(2025, 3, 17)) == 1

    def test_saturday_is_six(self):
        assert weekday_index(date(2025, 3, 15)) == 6
