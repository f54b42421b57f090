"""Pydantic schemas for drivepay data validation.

DayRecord is the stored, per-day raw input. Field names are snake_case in
Python; the aliases are the keys used in the persisted JSON buckets, so
existing timesheet files load unchanged.

Rates holds the money constants. The defaults are the contractual amounts;
a profile may override them but never add unknown keys.
"""

import datetime
import logging
import math
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

logger = logging.getLogger(__name__)

TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_time(value: Any) -> Optional[datetime.time]:
    """Parse a wall-clock time.

    Args:
        value: datetime.time, "HH:MM", "HH:MM:SS", "" or None

    Returns:
        datetime.time, or None when the value means "not set"

    Raises:
        ValueError: If value is a non-empty string that is not a time
    """
    if value is None:
        return None
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        for fmt in TIME_FORMATS:
            try:
                return datetime.datetime.strptime(text, fmt).time()
            except ValueError:
                continue
    raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")


def format_time(value: Optional[datetime.time]) -> str:
    """Format a time as HH:MM, empty string for None."""
    if value is None:
        return ""
    return value.strftime("%H:%M")


class DayRecord(BaseModel):
    """One calendar day's raw input."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    date: str = Field(..., description="ISO calendar date (YYYY-MM-DD)")
    start_time: Optional[datetime.time] = Field(
        default=None, alias="startTime", description="Clock-in time, None if not worked"
    )
    end_time: Optional[datetime.time] = Field(
        default=None, alias="endTime", description="Clock-out time, None if not worked"
    )
    international_extra_count: int = Field(
        default=0, alias="dietaInt", description="International allowance units"
    )
    extra_count: int = Field(default=0, alias="extra", description="Extra service units")
    overnight_count: int = Field(default=0, alias="pernocta", description="Overnight stays")
    tips_amount: float = Field(default=0.0, alias="propinas", description="Tips received")

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> str:
        if isinstance(value, datetime.datetime):
            value = value.date()
        if isinstance(value, datetime.date):
            return value.isoformat()
        return datetime.date.fromisoformat(str(value)).isoformat()

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _lenient_time(cls, value: Any) -> Optional[datetime.time]:
        try:
            return parse_time(value)
        except ValueError:
            logger.warning(f"unparseable time {value!r}, treating as unset")
            return None

    @field_validator("international_extra_count", "extra_count", "overnight_count", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        try:
            count = int(float(value))
        except (TypeError, ValueError, OverflowError):
            logger.debug(f"non-numeric counter {value!r} coerced to 0")
            return 0
        return max(count, 0)

    @field_validator("tips_amount", mode="before")
    @classmethod
    def _coerce_tips(cls, value: Any) -> float:
        try:
            amount = float(value)
        except (TypeError, ValueError):
            logger.debug(f"non-numeric tips {value!r} coerced to 0")
            return 0.0
        if not math.isfinite(amount) or amount < 0:
            return 0.0
        return amount

    @field_serializer("start_time", "end_time")
    def _serialize_time(self, value: Optional[datetime.time]) -> str:
        return format_time(value)

    @classmethod
    def empty(cls, day: Any) -> "DayRecord":
        """A record with all-default fields for the given date."""
        return cls(date=day)

    @property
    def calendar_date(self) -> datetime.date:
        return datetime.date.fromisoformat(self.date)

    def to_storage(self) -> Dict[str, Any]:
        """Serialize using the persisted key names."""
        return self.model_dump(by_alias=True)


# Editable fields, by Python name and by stored name
DAY_FIELDS: Dict[str, str] = {
    "start_time": "start_time",
    "startTime": "start_time",
    "end_time": "end_time",
    "endTime": "end_time",
    "international_extra_count": "international_extra_count",
    "dietaInt": "international_extra_count",
    "extra_count": "extra_count",
    "extra": "extra_count",
    "overnight_count": "overnight_count",
    "pernocta": "overnight_count",
    "tips_amount": "tips_amount",
    "propinas": "tips_amount",
}


class Rates(BaseModel):
    """Money amounts per unit. Defaults are the contractual constants."""

    model_config = ConfigDict(extra="forbid")

    normal_allowance: float = Field(default=15, ge=0, description="Weekday allowance unit")
    weekend_allowance: float = Field(default=20, ge=0, description="Weekend allowance unit")
    international_extra: float = Field(default=25, ge=0, description="International allowance unit")
    extra: float = Field(default=120, ge=0, description="Extra service unit")
    overnight: float = Field(default=40, ge=0, description="Overnight stay unit")
    night_late: float = Field(
        default=20, ge=0, description="Night differential, shift ending 22:00-02:59"
    )
    night_early: float = Field(
        default=40, ge=0, description="Night differential, shift ending 03:00-09:59"
    )


DEFAULT_RATES = Rates()
