"""Annual payroll rollup.

Re-derives every fiscal month of a year straight from the buckets and
folds them into one Summary. A year's first fiscal month reads the
previous year's December bucket (its tail only), and the tail of the
year's own December bucket belongs to next year's January, so every
stored day is counted in exactly one year.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .day_calc import derive_day
from .fiscal import FiscalWindow, fiscal_month_label, fiscal_window
from .schemas import DEFAULT_RATES, Rates
from .store import MonthStore
from .timesheet import Summary, load_window

logger = logging.getLogger(__name__)


@dataclass
class FiscalMonthTotals:
    window: FiscalWindow
    summary: Summary


@dataclass
class AnnualSummary:
    """Combined summary of a year plus the per-fiscal-month breakdown."""

    year: int
    summary: Summary
    months: List[FiscalMonthTotals] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "summary": self.summary.to_dict(),
            "months": [
                {
                    "month": m.window.month,
                    "label": fiscal_month_label(m.window),
                    "start_date": m.window.start_date.isoformat(),
                    "end_date": m.window.end_date.isoformat(),
                    "summary": m.summary.to_dict(),
                }
                for m in self.months
            ],
        }


def annual_summary(
    store: MonthStore,
    year: int,
    include_tips: bool = True,
    rates: Optional[Rates] = None,
) -> AnnualSummary:
    """Summarize the twelve fiscal months named in `year`.

    Args:
        store: Bucket store to read from (never written)
        year: Calendar year the fiscal months are named in
        include_tips: Whether tips count toward the grand totals
        rates: Money rates (defaults to the contractual rates)

    Returns:
        AnnualSummary with the combined summary and one entry per month
    """
    rates = rates or DEFAULT_RATES
    total = Summary(include_tips=include_tips, rates=rates)
    months = []

    for month in range(1, 13):
        window = fiscal_window(datetime.date(year, month, 1))
        month_summary = Summary(include_tips=include_tips, rates=rates)

        records = load_window(store, window)
        for date_str in sorted(records):
            derived = derive_day(records[date_str], rates)
            month_summary.add(derived)
            total.add(derived)

        months.append(FiscalMonthTotals(window=window, summary=month_summary))

    logger.debug(f"annual {year}: {total.days_worked} day(s) worked across 12 fiscal months")
    return AnnualSummary(year=year, summary=total, months=months)
