"""Per-day payroll calculations.

Pure functions that turn one day's raw fields into derived metrics:
hours worked, allowance units (dietas) and night differential
(nocturnidad). Nothing here touches storage.
"""

import datetime
from dataclasses import dataclass
from typing import Optional

from .schemas import DEFAULT_RATES, DayRecord, Rates, parse_time

MINUTES_PER_DAY = 24 * 60

# Saturday and Sunday, per date.weekday()
WEEKEND_DAYS = (5, 6)


def _minutes(value: datetime.time) -> int:
    return value.hour * 60 + value.minute


def hours_worked(start, end) -> float:
    """Hours between clock-in and clock-out.

    A clock-out at or before the clock-in is a shift that crossed
    midnight, so 24h is added to the end time.

    Args:
        start: Clock-in (datetime.time, "HH:MM", "" or None)
        end: Clock-out (same forms as start)

    Returns:
        Decimal hours, 0 if either time is missing
    """
    start_time = parse_time(start)
    end_time = parse_time(end)
    if start_time is None or end_time is None:
        return 0.0

    start_minutes = _minutes(start_time)
    end_minutes = _minutes(end_time)
    if end_minutes <= start_minutes:
        end_minutes += MINUTES_PER_DAY

    return (end_minutes - start_minutes) / 60


def normal_allowance_units(hours: float) -> int:
    """Weekday allowance units: none without hours, two past 12h."""
    if hours == 0:
        return 0
    if hours > 12:
        return 2
    return 1


def weekend_allowance_units(hours: float) -> int:
    """Weekend allowance units: none up to 3h, two past 12h."""
    if hours <= 3:
        return 0
    if hours > 12:
        return 2
    return 1


def night_differential(end, rates: Rates = DEFAULT_RATES) -> float:
    """Night differential for a shift, keyed on the clock-out hour.

    Bands are checked in order and the first match wins:
    22:00-02:59 pays rates.night_late, 03:00-09:59 pays rates.night_early.
    Any other clock-out hour pays nothing.
    """
    end_time = parse_time(end)
    if end_time is None:
        return 0

    hour = end_time.hour
    if hour >= 22 or hour <= 2:
        return rates.night_late
    if 3 <= hour <= 9:
        return rates.night_early
    return 0


def is_weekend(day: datetime.date) -> bool:
    return day.weekday() in WEEKEND_DAYS


@dataclass
class DerivedDay:
    """Metrics computed from one DayRecord. Never persisted."""

    record: DayRecord
    hours_worked: float
    is_weekend: bool
    normal_allowance_units: int
    weekend_allowance_units: int
    night_differential_amount: float

    @property
    def date(self) -> str:
        return self.record.date

    @property
    def worked(self) -> bool:
        return self.hours_worked > 0

    def to_dict(self) -> dict:
        """Flat view of raw and derived fields, using stored key names."""
        data = self.record.to_storage()
        data.update({
            "hours": round(self.hours_worked, 2),
            "isWeekend": self.is_weekend,
            "normalAllowanceUnits": self.normal_allowance_units,
            "weekendAllowanceUnits": self.weekend_allowance_units,
            "nightDifferentialAmount": self.night_differential_amount,
        })
        return data


def derive_day(record: DayRecord, rates: Optional[Rates] = None) -> DerivedDay:
    """Apply every day rule to one record.

    Weekday and weekend allowances are mutually exclusive: a day earns
    only the kind matching its calendar day of week.
    """
    rates = rates or DEFAULT_RATES
    hours = hours_worked(record.start_time, record.end_time)
    weekend = is_weekend(record.calendar_date)

    return DerivedDay(
        record=record,
        hours_worked=hours,
        is_weekend=weekend,
        normal_allowance_units=0 if weekend else normal_allowance_units(hours),
        weekend_allowance_units=weekend_allowance_units(hours) if weekend else 0,
        night_differential_amount=night_differential(record.end_time, rates),
    )
