"""Fiscal month timesheets.

Loads and saves the records of one fiscal month across its two
calendar-month buckets, applies single-field edits, derives per-day
metrics and folds them into a money/hour Summary.

The view date and the tips toggle are always explicit arguments; nothing
here keeps state between calls.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from .day_calc import DerivedDay, derive_day
from .fiscal import (
    CUTOFF_DAY,
    FiscalWindow,
    date_range_label,
    fiscal_month_label,
    fiscal_window,
    fiscal_window_for_payroll_date,
)
from .schemas import DAY_FIELDS, DEFAULT_RATES, DayRecord, Rates, parse_time
from .store import MonthBucket, MonthStore, read_bucket, write_bucket_merge

logger = logging.getLogger(__name__)

DateLike = Union[datetime.date, str]

TIME_FIELDS = ("start_time", "end_time")


class OutsideWindowError(ValueError):
    """Raised when saving a record that is not part of the fiscal month."""
    pass


def to_date(value: DateLike) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(value)


# =============================================================================
# SUMMARY
# =============================================================================

@dataclass
class Summary:
    """Running payroll totals over a set of derived days.

    Counts are accumulated per unit; money amounts are derived from the
    counts and the rates, so the fold order never matters.
    """

    include_tips: bool = True
    rates: Rates = field(default_factory=lambda: DEFAULT_RATES)
    total_hours: float = 0.0
    days_worked: int = 0
    normal_allowance_units: int = 0
    weekend_allowance_units: int = 0
    night_differential_total: float = 0.0
    international_extra_count: int = 0
    extra_count: int = 0
    overnight_count: int = 0
    tips_total: float = 0.0

    def add(self, day: DerivedDay) -> "Summary":
        record = day.record
        if day.worked:
            self.days_worked += 1
        self.total_hours += day.hours_worked
        self.normal_allowance_units += day.normal_allowance_units
        self.weekend_allowance_units += day.weekend_allowance_units
        self.night_differential_total += day.night_differential_amount
        self.international_extra_count += record.international_extra_count
        self.extra_count += record.extra_count
        self.overnight_count += record.overnight_count
        self.tips_total += record.tips_amount
        return self

    @property
    def normal_allowance_money(self) -> float:
        return self.normal_allowance_units * self.rates.normal_allowance

    @property
    def weekend_allowance_money(self) -> float:
        return self.weekend_allowance_units * self.rates.weekend_allowance

    @property
    def total_allowances(self) -> float:
        return self.normal_allowance_money + self.weekend_allowance_money

    @property
    def international_extra_money(self) -> float:
        return self.international_extra_count * self.rates.international_extra

    @property
    def extra_money(self) -> float:
        return self.extra_count * self.rates.extra

    @property
    def overnight_money(self) -> float:
        return self.overnight_count * self.rates.overnight

    @property
    def total_extras(self) -> float:
        """International, extra and overnight money, plus tips if shown."""
        tips = self.tips_total if self.include_tips else 0
        return self.international_extra_money + self.extra_money + self.overnight_money + tips

    @property
    def total_money(self) -> float:
        return self.total_allowances + self.night_differential_total + self.total_extras

    def to_dict(self) -> Dict[str, Any]:
        return {
            "include_tips": self.include_tips,
            "total_hours": round(self.total_hours, 2),
            "days_worked": self.days_worked,
            "normal_allowance_units": self.normal_allowance_units,
            "weekend_allowance_units": self.weekend_allowance_units,
            "normal_allowance_money": round(self.normal_allowance_money, 2),
            "weekend_allowance_money": round(self.weekend_allowance_money, 2),
            "total_allowances": round(self.total_allowances, 2),
            "night_differential_total": round(self.night_differential_total, 2),
            "international_extra_money": round(self.international_extra_money, 2),
            "extra_money": round(self.extra_money, 2),
            "overnight_money": round(self.overnight_money, 2),
            "tips_total": round(self.tips_total, 2),
            "total_extras": round(self.total_extras, 2),
            "total_money": round(self.total_money, 2),
        }


# =============================================================================
# LOAD / SAVE
# =============================================================================

def load_fiscal_month(store: MonthStore, day: DateLike) -> MonthBucket:
    """Records of the fiscal month named after the calendar month of `day`.

    Takes days >= CUTOFF_DAY from the start bucket and days < CUTOFF_DAY
    from the end bucket.
    """
    window = fiscal_window(to_date(day))
    return load_window(store, window)


def load_window(store: MonthStore, window: FiscalWindow) -> MonthBucket:
    """Records of an already-resolved fiscal window."""
    start_bucket = read_bucket(store, window.start_bucket_key)
    end_bucket = read_bucket(store, window.end_bucket_key)

    combined: MonthBucket = {}
    for date_str, record in start_bucket.items():
        if record.calendar_date.day >= CUTOFF_DAY:
            combined[date_str] = record
    for date_str, record in end_bucket.items():
        if record.calendar_date.day < CUTOFF_DAY:
            combined[date_str] = record
    return combined


def save_fiscal_month(store: MonthStore, day: DateLike, records: MonthBucket) -> None:
    """Split a fiscal month's records into its two buckets and merge them in.

    Raises:
        OutsideWindowError: If a record's date is outside the fiscal month
    """
    window = fiscal_window(to_date(day))

    partitions: Dict[str, MonthBucket] = {
        window.start_bucket_key: {},
        window.end_bucket_key: {},
    }
    for date_str, record in records.items():
        record_date = record.calendar_date
        if not window.contains(record_date):
            raise OutsideWindowError(
                f"{date_str} is outside fiscal month "
                f"{window.start_date.isoformat()}..{window.end_date.isoformat()}"
            )
        partitions[window.bucket_for(record_date)][date_str] = record

    for month_key, partial in partitions.items():
        write_bucket_merge(store, month_key, partial)


# =============================================================================
# EDITS
# =============================================================================

def update_day(records: MonthBucket, day: DateLike, field_name: str, value: Any) -> MonthBucket:
    """Return a copy of `records` with one field of one day replaced.

    The day is created with default fields if it is not present yet. The
    input mapping and its records are left untouched.

    Times are parsed strictly here; only stored buckets are read leniently.

    Raises:
        ValueError: If field_name is not an editable day field, or a time
            value is not HH:MM
    """
    attr = DAY_FIELDS.get(field_name)
    if attr is None:
        raise ValueError(f"Unknown day field: {field_name}")
    if attr in TIME_FIELDS:
        value = parse_time(value)

    date_str = to_date(day).isoformat()
    current = records.get(date_str) or DayRecord.empty(date_str)

    data = current.model_dump()
    data[attr] = value

    updated = dict(records)
    updated[date_str] = DayRecord.model_validate(data)
    return updated


def set_day_fields(
    store: MonthStore,
    day: DateLike,
    fields: Dict[str, Any],
) -> DayRecord:
    """Edit one day in place: load its fiscal month, update, save.

    The day is saved through the fiscal month it is paid in, so the 26th
    onward goes through the following month's window.

    Returns:
        The stored record after the edit
    """
    if not fields:
        raise ValueError("No day fields to update")

    target = to_date(day)
    anchor = fiscal_window_for_payroll_date(target).end_date

    with store.lock:
        records = load_fiscal_month(store, anchor)
        for field_name, value in fields.items():
            records = update_day(records, target, field_name, value)
        save_fiscal_month(store, anchor, records)

    logger.info(f"updated {target.isoformat()}: {', '.join(fields)}")
    return records[target.isoformat()]


# =============================================================================
# DERIVATION
# =============================================================================

def derive_days(records: MonthBucket, rates: Optional[Rates] = None) -> List[DerivedDay]:
    """Derived metrics for every record, in date order."""
    return [derive_day(records[date_str], rates) for date_str in sorted(records)]


def summarize(
    days: Iterable[DerivedDay],
    include_tips: bool = True,
    rates: Optional[Rates] = None,
) -> Summary:
    summary = Summary(include_tips=include_tips, rates=rates or DEFAULT_RATES)
    for derived in days:
        summary.add(derived)
    return summary


@dataclass
class FiscalMonthView:
    """Everything needed to show one fiscal month."""

    window: FiscalWindow
    days: List[DerivedDay]
    summary: Summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": fiscal_month_label(self.window),
            "range_label": date_range_label(self.window),
            "start_date": self.window.start_date.isoformat(),
            "end_date": self.window.end_date.isoformat(),
            "start_bucket": self.window.start_bucket_key,
            "end_bucket": self.window.end_bucket_key,
            "days": [d.to_dict() for d in self.days],
            "summary": self.summary.to_dict(),
        }


def fiscal_month_view(
    store: MonthStore,
    day: DateLike,
    include_tips: bool = True,
    rates: Optional[Rates] = None,
) -> FiscalMonthView:
    """Load, derive and summarize the fiscal month of `day`."""
    window = fiscal_window(to_date(day))
    records = load_window(store, window)
    days = derive_days(records, rates)
    return FiscalMonthView(
        window=window,
        days=days,
        summary=summarize(days, include_tips=include_tips, rates=rates),
    )
