"""Fiscal month windows.

A fiscal month (nómina) runs from the 26th of the previous calendar month
through the 25th of the month it is named after. Its records are stored
split across two calendar-month buckets: the tail (day >= 26) of the
previous month's bucket and the head (day < 26) of the named month's.
"""

import calendar
import datetime
from dataclasses import dataclass

CUTOFF_DAY = 26

SPANISH_MONTHS = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]


def month_key(day: datetime.date) -> str:
    """Calendar-month bucket key (YYYY-MM) for a date."""
    return f"{day.year:04d}-{day.month:02d}"


def shift_month(day: datetime.date, months: int) -> datetime.date:
    """Move a date by whole months, clamping the day to the target month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return datetime.date(year, month, min(day.day, last_day))


@dataclass(frozen=True)
class FiscalWindow:
    """Inclusive date range of one fiscal month and the buckets composing it."""

    start_date: datetime.date
    end_date: datetime.date
    start_bucket_key: str
    end_bucket_key: str

    @property
    def year(self) -> int:
        """Year of the named month."""
        return self.end_date.year

    @property
    def month(self) -> int:
        """Named month (1-12)."""
        return self.end_date.month

    def contains(self, day: datetime.date) -> bool:
        return self.start_date <= day <= self.end_date

    def bucket_for(self, day: datetime.date) -> str:
        """Bucket that stores a day of this window, by day-of-month."""
        if day.day >= CUTOFF_DAY:
            return self.start_bucket_key
        return self.end_bucket_key


def fiscal_window(day: datetime.date) -> FiscalWindow:
    """Resolve the fiscal month named after the calendar month of `day`.

    The window is anchored on the calendar month of the input, so
    2024-03-28 resolves to the March window (Feb 26 - Mar 25) even though
    that date itself belongs to April's payroll.
    """
    if day.month == 1:
        start_date = datetime.date(day.year - 1, 12, CUTOFF_DAY)
        start_key = f"{day.year - 1}-12"
    else:
        start_date = datetime.date(day.year, day.month - 1, CUTOFF_DAY)
        start_key = month_key(start_date)

    end_date = datetime.date(day.year, day.month, CUTOFF_DAY - 1)

    return FiscalWindow(
        start_date=start_date,
        end_date=end_date,
        start_bucket_key=start_key,
        end_bucket_key=month_key(end_date),
    )


def fiscal_window_for_payroll_date(day: datetime.date) -> FiscalWindow:
    """Resolve the fiscal month a worked day is paid in.

    Days from the 26th onward belong to the following month's payroll.
    """
    if day.day >= CUTOFF_DAY:
        return fiscal_window(shift_month(day.replace(day=1), 1))
    return fiscal_window(day)


def fiscal_month_label(window: FiscalWindow) -> str:
    """Title for a fiscal month, e.g. 'Nómina marzo 2024'."""
    return f"Nómina {SPANISH_MONTHS[window.month - 1]} {window.year}"


def date_range_label(window: FiscalWindow) -> str:
    """Subtitle for a fiscal month, e.g. '26 feb - 25 mar 2024'."""
    start = window.start_date
    end = window.end_date
    return (
        f"{start.day} {SPANISH_MONTHS[start.month - 1][:3]} - "
        f"{end.day} {SPANISH_MONTHS[end.month - 1][:3]} {end.year}"
    )
