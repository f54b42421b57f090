"""Tests for per-day payroll rules: hours, allowances, night differential."""

from datetime import time

import pytest

from drivepay.sdk.day_calc import (
    derive_day,
    hours_worked,
    night_differential,
    normal_allowance_units,
    weekend_allowance_units,
)
from drivepay.sdk.schemas import DayRecord, Rates


class TestHoursWorked:

    def test_same_day_shift(self):
        assert hours_worked("08:00", "16:30") == 8.5

    def test_shift_crossing_midnight(self):
        assert hours_worked("22:00", "06:00") == 8.0

    def test_equal_times_is_a_full_day(self):
        """End equal to start counts as crossing midnight, not zero."""
        assert hours_worked("07:00", "07:00") == 24.0

    def test_missing_time_is_zero(self):
        assert hours_worked("", "06:00") == 0
        assert hours_worked("08:00", None) == 0
        assert hours_worked(None, None) == 0

    def test_accepts_time_objects(self):
        assert hours_worked(time(20, 0), time(23, 0)) == 3.0

    @pytest.mark.parametrize("start,end", [
        ("00:00", "00:01"), ("23:59", "00:00"), ("12:00", "11:59"), ("05:15", "05:14"),
    ])
    def test_never_negative(self, start, end):
        assert hours_worked(start, end) >= 0


class TestAllowances:

    def test_normal_allowance_units(self):
        assert normal_allowance_units(0) == 0
        assert normal_allowance_units(8) == 1
        assert normal_allowance_units(12) == 1
        assert normal_allowance_units(13) == 2

    def test_normal_allowance_short_shift_still_earns_one(self):
        assert normal_allowance_units(0.5) == 1

    def test_weekend_allowance_units(self):
        assert weekend_allowance_units(0) == 0
        assert weekend_allowance_units(3) == 0
        assert weekend_allowance_units(3.5) == 1
        assert weekend_allowance_units(12) == 1
        assert weekend_allowance_units(12.5) == 2


class TestNightDifferential:

    @pytest.mark.parametrize("end,expected", [
        ("23:00", 20),
        ("22:00", 20),
        ("00:30", 20),
        ("02:59", 20),
        ("03:00", 40),
        ("05:00", 40),
        ("09:59", 40),
        ("10:00", 0),
        ("14:00", 0),
        ("21:59", 0),
    ])
    def test_bands_by_end_hour(self, end, expected):
        assert night_differential(end) == expected

    def test_missing_end_time(self):
        assert night_differential("") == 0
        assert night_differential(None) == 0

    def test_uses_rates(self):
        rates = Rates(night_late=25, night_early=50)
        assert night_differential("23:00", rates) == 25
        assert night_differential("04:00", rates) == 50


class TestDeriveDay:

    def test_sunday_short_evening_shift(self):
        """2024-03-10 is a Sunday: 3h is not enough for a weekend allowance."""
        record = DayRecord(date="2024-03-10", start_time="20:00", end_time="23:00")

        derived = derive_day(record)

        assert derived.is_weekend is True
        assert derived.hours_worked == 3
        assert derived.weekend_allowance_units == 0
        assert derived.normal_allowance_units == 0
        assert derived.night_differential_amount == 20

    def test_friday_long_shift(self):
        """2024-03-15 is a Friday: over 12h earns two weekday units."""
        record = DayRecord(date="2024-03-15", start_time="08:00", end_time="22:00")

        derived = derive_day(record)

        assert derived.is_weekend is False
        assert derived.hours_worked == 14
        assert derived.normal_allowance_units == 2
        assert derived.weekend_allowance_units == 0
        assert derived.night_differential_amount == 20

    def test_saturday_counts_as_weekend(self):
        record = DayRecord(date="2024-03-09", start_time="06:00", end_time="14:00")

        derived = derive_day(record)

        assert derived.is_weekend is True
        assert derived.weekend_allowance_units == 1
        assert derived.normal_allowance_units == 0

    def test_weekend_is_by_date_not_shift_end(self):
        """A Friday night shift ending Saturday morning is still a weekday."""
        record = DayRecord(date="2024-03-15", start_time="22:00", end_time="06:00")

        derived = derive_day(record)

        assert derived.is_weekend is False
        assert derived.normal_allowance_units == 1
        assert derived.night_differential_amount == 40

    def test_empty_record(self):
        derived = derive_day(DayRecord.empty("2024-03-12"))

        assert derived.hours_worked == 0
        assert derived.worked is False
        assert derived.normal_allowance_units == 0
        assert derived.night_differential_amount == 0

    def test_to_dict_uses_stored_names(self):
        record = DayRecord(date="2024-03-15", start_time="08:00", end_time="22:00", dietaInt=1)

        data = derive_day(record).to_dict()

        assert data["startTime"] == "08:00"
        assert data["dietaInt"] == 1
        assert data["hours"] == 14
        assert data["normalAllowanceUnits"] == 2
        assert data["isWeekend"] is False
