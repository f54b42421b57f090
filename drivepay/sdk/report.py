"""Report data for an arbitrary date range.

Unlike the fiscal views, a report ignores fiscal boundaries: it scans
every stored record and keeps those inside an inclusive date range. The
result is plain rows plus a Summary, ready for whatever renders it
(terminal table, CSV, a document generator).
"""

import csv
import datetime
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from .day_calc import DerivedDay
from .schemas import Rates, format_time
from .store import MonthStore, read_all_records
from .timesheet import DateLike, Summary, derive_days, summarize, to_date

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "date",
    "startTime",
    "endTime",
    "hours",
    "normalAllowanceUnits",
    "weekendAllowanceUnits",
    "nightDifferentialAmount",
    "dietaInt",
    "extra",
    "pernocta",
]
TIPS_COLUMN = "propinas"


class ReportRangeError(ValueError):
    """Raised when a report range starts after it ends."""
    pass


@dataclass
class ReportData:
    """Rows and totals for one date range."""

    range_start: datetime.date
    range_end: datetime.date
    days: List[DerivedDay]
    summary: Summary

    @property
    def include_tips(self) -> bool:
        return self.summary.include_tips

    @property
    def columns(self) -> List[str]:
        if self.include_tips:
            return REPORT_COLUMNS + [TIPS_COLUMN]
        return list(REPORT_COLUMNS)

    def rows(self) -> List[Dict[str, Any]]:
        """One dict per day, keys in column order."""
        rows = []
        for day in self.days:
            record = day.record
            row = {
                "date": record.date,
                "startTime": format_time(record.start_time),
                "endTime": format_time(record.end_time),
                "hours": round(day.hours_worked, 2),
                "normalAllowanceUnits": day.normal_allowance_units,
                "weekendAllowanceUnits": day.weekend_allowance_units,
                "nightDifferentialAmount": day.night_differential_amount,
                "dietaInt": record.international_extra_count,
                "extra": record.extra_count,
                "pernocta": record.overnight_count,
            }
            if self.include_tips:
                row[TIPS_COLUMN] = round(record.tips_amount, 2)
            rows.append(row)
        return rows

    def to_dict(self) -> Dict[str, Any]:
        return {
            "range_start": self.range_start.isoformat(),
            "range_end": self.range_end.isoformat(),
            "columns": self.columns,
            "rows": self.rows(),
            "summary": self.summary.to_dict(),
        }


def report_data(
    store: MonthStore,
    range_start: DateLike,
    range_end: DateLike,
    include_tips: bool = True,
    rates: Optional[Rates] = None,
) -> ReportData:
    """Collect every stored day in [range_start, range_end].

    Raises:
        ReportRangeError: If range_start is after range_end
    """
    start = to_date(range_start)
    end = to_date(range_end)
    if start > end:
        raise ReportRangeError(
            f"Report start {start.isoformat()} is after end {end.isoformat()}"
        )

    all_records = read_all_records(store)
    in_range = {
        date_str: record
        for date_str, record in all_records.items()
        if start <= record.calendar_date <= end
    }
    logger.debug(f"report {start}..{end}: {len(in_range)} of {len(all_records)} record(s)")

    days = derive_days(in_range, rates)
    return ReportData(
        range_start=start,
        range_end=end,
        days=days,
        summary=summarize(days, include_tips=include_tips, rates=rates),
    )


def write_report_csv(report: ReportData, output: TextIO) -> None:
    """Write report rows as CSV, header first."""
    writer = csv.DictWriter(output, fieldnames=report.columns)
    writer.writeheader()
    for row in report.rows():
        writer.writerow(row)


def save_report_csv(report: ReportData, output_path: Path) -> Path:
    """Write report rows to a CSV file.

    Returns:
        Path to the written file
    """
    with open(output_path, "w", newline="", encoding="utf-8") as csvfile:
        write_report_csv(report, csvfile)

    return output_path
