"""Tests for fiscal month window resolution."""

from datetime import date

import pytest

from drivepay.sdk.fiscal import (
    date_range_label,
    fiscal_month_label,
    fiscal_window,
    fiscal_window_for_payroll_date,
    month_key,
    shift_month,
)


class TestFiscalWindow:

    def test_mid_year_window(self):
        window = fiscal_window(date(2024, 3, 10))

        assert window.start_date == date(2024, 2, 26)
        assert window.end_date == date(2024, 3, 25)
        assert window.start_bucket_key == "2024-02"
        assert window.end_bucket_key == "2024-03"

    @pytest.mark.parametrize("day", [1, 15, 25, 26, 31])
    def test_january_reaches_into_previous_december(self, day):
        window = fiscal_window(date(2025, 1, day))

        assert window.start_bucket_key == "2024-12"
        assert window.end_bucket_key == "2025-01"
        assert window.start_date == date(2024, 12, 26)
        assert window.end_date == date(2025, 1, 25)

    def test_december_window(self):
        window = fiscal_window(date(2024, 12, 1))

        assert window.start_bucket_key == "2024-11"
        assert window.end_bucket_key == "2024-12"

    def test_anchored_on_calendar_month_of_input(self):
        """The 28th still resolves to its own calendar month's window."""
        window = fiscal_window(date(2024, 3, 28))

        assert window.end_date == date(2024, 3, 25)
        assert window.contains(date(2024, 3, 28)) is False

    def test_buckets_are_always_adjacent_and_distinct(self):
        for month in range(1, 13):
            window = fiscal_window(date(2024, month, 1))
            assert window.start_bucket_key != window.end_bucket_key
            assert shift_month(window.start_date.replace(day=1), 1) == window.end_date.replace(day=1)

    def test_bucket_for_splits_on_cutoff(self):
        window = fiscal_window(date(2024, 3, 1))

        assert window.bucket_for(date(2024, 2, 26)) == "2024-02"
        assert window.bucket_for(date(2024, 2, 29)) == "2024-02"
        assert window.bucket_for(date(2024, 3, 1)) == "2024-03"
        assert window.bucket_for(date(2024, 3, 25)) == "2024-03"

    def test_named_month(self):
        window = fiscal_window(date(2025, 1, 5))

        assert (window.year, window.month) == (2025, 1)


class TestPayrollDate:

    def test_days_from_cutoff_belong_to_next_month(self):
        window = fiscal_window_for_payroll_date(date(2024, 3, 26))

        assert window.end_date == date(2024, 4, 25)
        assert window.contains(date(2024, 3, 26))

    def test_days_before_cutoff_stay(self):
        window = fiscal_window_for_payroll_date(date(2024, 3, 25))

        assert window.end_date == date(2024, 3, 25)

    def test_late_december_is_next_years_january(self):
        window = fiscal_window_for_payroll_date(date(2024, 12, 30))

        assert window.end_bucket_key == "2025-01"
        assert window.start_bucket_key == "2024-12"


class TestHelpers:

    def test_month_key(self):
        assert month_key(date(2024, 2, 29)) == "2024-02"

    def test_shift_month_across_years(self):
        assert shift_month(date(2024, 1, 15), -1) == date(2023, 12, 15)
        assert shift_month(date(2024, 12, 1), 1) == date(2025, 1, 1)
        assert shift_month(date(2024, 3, 1), -14) == date(2023, 1, 1)

    def test_shift_month_clamps_day(self):
        assert shift_month(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_labels(self):
        window = fiscal_window(date(2024, 3, 1))

        assert fiscal_month_label(window) == "Nómina marzo 2024"
        assert date_range_label(window) == "26 feb - 25 mar 2024"
