"""Tests for fiscal month load/save, day edits and summaries."""

import json
from datetime import date

import pytest

from drivepay.sdk.day_calc import derive_day
from drivepay.sdk.schemas import DayRecord, Rates
from drivepay.sdk.store import MemoryMonthStore, read_bucket
from drivepay.sdk.timesheet import (
    OutsideWindowError,
    derive_days,
    fiscal_month_view,
    load_fiscal_month,
    save_fiscal_month,
    set_day_fields,
    summarize,
    update_day,
)


def records_of(*entries) -> dict:
    """Build a record mapping from (date, start, end) tuples."""
    result = {}
    for date_str, start, end in entries:
        result[date_str] = DayRecord(date=date_str, start_time=start, end_time=end)
    return result


@pytest.fixture
def store():
    return MemoryMonthStore()


class TestLoadSave:

    def test_round_trip(self, store):
        records = records_of(
            ("2024-02-26", "08:00", "16:00"),
            ("2024-02-29", "20:00", "23:00"),
            ("2024-03-01", "22:00", "06:00"),
            ("2024-03-25", "07:00", "19:30"),
        )

        save_fiscal_month(store, date(2024, 3, 10), records)

        assert load_fiscal_month(store, date(2024, 3, 1)) == records

    def test_save_splits_across_buckets(self, store):
        records = records_of(
            ("2024-02-27", "08:00", "16:00"),
            ("2024-03-02", "08:00", "16:00"),
        )

        save_fiscal_month(store, "2024-03-15", records)

        assert list(read_bucket(store, "2024-02")) == ["2024-02-27"]
        assert list(read_bucket(store, "2024-03")) == ["2024-03-02"]

    def test_january_round_trip_uses_previous_december(self, store):
        records = records_of(
            ("2023-12-28", "08:00", "16:00"),
            ("2024-01-10", "08:00", "16:00"),
        )

        save_fiscal_month(store, date(2024, 1, 1), records)

        assert store.list_month_keys() == ["2023-12", "2024-01"]
        assert load_fiscal_month(store, date(2024, 1, 20)) == records

    def test_load_ignores_other_fiscal_months_in_same_buckets(self, store):
        """Buckets hold the neighbouring fiscal months' days too."""
        save_fiscal_month(store, date(2024, 2, 1), records_of(("2024-02-20", "08:00", "16:00")))
        save_fiscal_month(store, date(2024, 3, 1), records_of(("2024-03-05", "08:00", "16:00")))
        save_fiscal_month(store, date(2024, 4, 1), records_of(("2024-03-27", "08:00", "16:00")))

        loaded = load_fiscal_month(store, date(2024, 3, 1))

        assert list(loaded) == ["2024-03-05"]

    def test_partition_invariant(self, store):
        save_fiscal_month(store, date(2024, 3, 1), records_of(
            ("2024-02-26", "08:00", "16:00"),
            ("2024-03-25", "08:00", "16:00"),
        ))
        # Stray days from neighbouring fiscal months in the same buckets
        save_fiscal_month(store, date(2024, 2, 1), records_of(("2024-02-25", "08:00", "16:00")))
        save_fiscal_month(store, date(2024, 4, 1), records_of(("2024-03-26", "08:00", "16:00")))

        for date_str, record in load_fiscal_month(store, date(2024, 3, 1)).items():
            day = record.calendar_date
            if day.day >= 26:
                assert day.month == 2
            else:
                assert day.month == 3

    def test_save_keeps_existing_days(self, store):
        save_fiscal_month(store, date(2024, 3, 1), records_of(("2024-03-01", "08:00", "16:00")))
        save_fiscal_month(store, date(2024, 3, 1), records_of(("2024-03-02", "09:00", "17:00")))

        assert sorted(load_fiscal_month(store, date(2024, 3, 1))) == ["2024-03-01", "2024-03-02"]

    def test_save_rejects_day_outside_window(self, store):
        records = records_of(("2024-04-02", "08:00", "16:00"))

        with pytest.raises(OutsideWindowError):
            save_fiscal_month(store, date(2024, 3, 1), records)

        assert store.list_month_keys() == []

    def test_corrupt_bucket_loads_as_empty(self):
        store = MemoryMonthStore({
            "timesheet-2024-02": "{oops",
            "timesheet-2024-03": json.dumps({"2024-03-04": {"startTime": "08:00", "endTime": "12:00"}}),
        })

        assert list(load_fiscal_month(store, date(2024, 3, 1))) == ["2024-03-04"]


class TestUpdateDay:

    def test_creates_missing_day_with_defaults(self):
        updated = update_day({}, "2024-03-15", "start_time", "08:00")

        record = updated["2024-03-15"]
        assert record.start_time.hour == 8
        assert record.end_time is None
        assert record.extra_count == 0
        assert record.tips_amount == 0

    def test_does_not_mutate_input(self):
        original = records_of(("2024-03-15", "08:00", "16:00"))
        snapshot = {k: v.model_copy() for k, v in original.items()}

        updated = update_day(original, "2024-03-15", "extra", 2)

        assert original == snapshot
        assert updated["2024-03-15"].extra_count == 2
        assert updated["2024-03-15"].start_time.hour == 8

    def test_other_dates_untouched(self):
        original = records_of(("2024-03-14", "08:00", "16:00"), ("2024-03-15", "08:00", "16:00"))

        updated = update_day(original, "2024-03-15", "endTime", "20:00")

        assert updated["2024-03-14"] == original["2024-03-14"]
        assert updated["2024-03-15"].end_time.hour == 20

    def test_idempotent(self):
        once = update_day({}, "2024-03-15", "propinas", 7.5)
        twice = update_day(once, "2024-03-15", "propinas", 7.5)

        assert once == twice

    def test_accepts_stored_and_python_names(self):
        a = update_day({}, "2024-03-15", "dietaInt", 3)
        b = update_day({}, "2024-03-15", "international_extra_count", 3)

        assert a == b

    def test_clearing_a_time(self):
        original = records_of(("2024-03-15", "08:00", "16:00"))

        updated = update_day(original, "2024-03-15", "start_time", "")

        assert updated["2024-03-15"].start_time is None

    def test_non_numeric_value_coerces_to_zero(self):
        updated = update_day({}, "2024-03-15", "pernocta", "two")

        assert updated["2024-03-15"].overnight_count == 0

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown day field"):
            update_day({}, "2024-03-15", "bonus", 1)

    @pytest.mark.parametrize("bad", ["8am", "25:00", "08h00", 8])
    def test_malformed_time_rejected(self, bad):
        original = records_of(("2024-03-15", "08:00", "16:00"))

        with pytest.raises(ValueError, match="Invalid time"):
            update_day(original, "2024-03-15", "start_time", bad)

        assert original["2024-03-15"].start_time.hour == 8


class TestSetDayFields:

    def test_saves_through_payroll_month(self, store):
        """The 27th is stored in its own calendar bucket, via next month's window."""
        record = set_day_fields(store, date(2024, 3, 27), {"start_time": "08:00", "end_time": "18:00"})

        assert record.date == "2024-03-27"
        assert list(read_bucket(store, "2024-03")) == ["2024-03-27"]
        assert list(load_fiscal_month(store, date(2024, 4, 1))) == ["2024-03-27"]
        assert load_fiscal_month(store, date(2024, 3, 1)) == {}

    def test_updates_keep_other_fields(self, store):
        set_day_fields(store, "2024-03-15", {"start_time": "08:00", "end_time": "22:00"})
        record = set_day_fields(store, "2024-03-15", {"extra_count": 1})

        assert record.start_time.hour == 8
        assert record.extra_count == 1

    def test_malformed_time_keeps_stored_value(self, store):
        set_day_fields(store, "2024-03-15", {"start_time": "08:00", "end_time": "22:00"})

        with pytest.raises(ValueError):
            set_day_fields(store, "2024-03-15", {"start_time": "8am"})

        record = load_fiscal_month(store, "2024-03-15")["2024-03-15"]
        assert record.start_time.hour == 8
        assert record.end_time.hour == 22

    def test_requires_fields(self, store):
        with pytest.raises(ValueError):
            set_day_fields(store, "2024-03-15", {})


class TestSummary:

    def test_fold(self):
        records = {
            # Friday, 14h: 2 weekday units, ends 22:00 -> 20
            "2024-03-15": DayRecord(date="2024-03-15", start_time="08:00", end_time="22:00",
                                    dietaInt=1, extra=1, pernocta=1, propinas=10),
            # Saturday, 8h: 1 weekend unit, ends 05:00 -> 40
            "2024-03-16": DayRecord(date="2024-03-16", start_time="21:00", end_time="05:00"),
            # Sunday, 3h: no weekend unit, ends 23:00 -> 20
            "2024-03-10": DayRecord(date="2024-03-10", start_time="20:00", end_time="23:00"),
            # Not worked, only tips
            "2024-03-12": DayRecord(date="2024-03-12", propinas=2.5),
        }

        summary = summarize(derive_days(records), include_tips=True)

        assert summary.days_worked == 3
        assert summary.total_hours == 25
        assert summary.normal_allowance_units == 2
        assert summary.weekend_allowance_units == 1
        assert summary.normal_allowance_money == 30
        assert summary.weekend_allowance_money == 20
        assert summary.total_allowances == 50
        assert summary.night_differential_total == 80
        assert summary.international_extra_money == 25
        assert summary.extra_money == 120
        assert summary.overnight_money == 40
        assert summary.tips_total == 12.5
        assert summary.total_extras == 197.5
        assert summary.total_money == 50 + 80 + 197.5

    def test_tips_excluded_from_totals_when_hidden(self):
        records = {"2024-03-12": DayRecord(date="2024-03-12", extra=1, propinas=30)}

        summary = summarize(derive_days(records), include_tips=False)

        assert summary.tips_total == 30
        assert summary.total_extras == 120
        assert summary.total_money == 120

    def test_empty(self):
        summary = summarize([])

        assert summary.days_worked == 0
        assert summary.total_money == 0

    def test_custom_rates(self):
        rates = Rates(normal_allowance=18)
        records = records_of(("2024-03-15", "08:00", "12:00"))

        summary = summarize(derive_days(records, rates), rates=rates)

        assert summary.total_allowances == 18

    def test_derive_days_sorted(self):
        records = records_of(
            ("2024-03-05", "08:00", "16:00"),
            ("2024-02-27", "08:00", "16:00"),
            ("2024-03-01", "08:00", "16:00"),
        )

        assert [d.date for d in derive_days(records)] == ["2024-02-27", "2024-03-01", "2024-03-05"]

    def test_to_dict_rounds(self):
        records = records_of(("2024-03-15", "08:00", "08:20"))

        data = summarize(derive_days(records)).to_dict()

        assert data["total_hours"] == 0.33
        assert data["days_worked"] == 1


class TestFiscalMonthView:

    def test_view(self, store):
        set_day_fields(store, "2024-03-15", {"start_time": "08:00", "end_time": "22:00"})
        set_day_fields(store, "2024-02-28", {"start_time": "08:00", "end_time": "10:00"})

        view = fiscal_month_view(store, date(2024, 3, 1))
        data = view.to_dict()

        assert data["label"] == "Nómina marzo 2024"
        assert data["start_date"] == "2024-02-26"
        assert [d["date"] for d in data["days"]] == ["2024-02-28", "2024-03-15"]
        assert data["summary"]["days_worked"] == 2
        assert view.days[1].hours_worked == derive_day(view.days[1].record).hours_worked
