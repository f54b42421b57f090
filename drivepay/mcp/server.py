"""drivepay MCP Server - FastMCP implementation for timesheet tools."""

import logging
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from drivepay.sdk import (
    BucketKeyError,
    OutsideWindowError,
    ProfileError,
    ReportRangeError,
    StoreConsistencyError,
    annual_summary,
    derive_day,
    fiscal_month_view,
    get_show_tips,
    load_rates,
    open_store,
    report_data,
    set_day_fields,
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("drivepay")


def _tips(include_tips: bool | None) -> bool:
    return get_show_tips() if include_tips is None else include_tips


# --- Tools ---

@mcp.tool()
async def get_fiscal_month(
    month: str | None = Field(default=None, description="Fiscal month as YYYY-MM (default: current month)"),
    include_tips: bool | None = Field(default=None, description="Include tips in totals (default: show_tips setting)"),
) -> dict[str, Any]:
    """Get every recorded day of one fiscal month (26th of previous month to 25th) with derived metrics and totals."""
    try:
        anchor = date.fromisoformat(f"{month}-01") if month else date.today()
        view = fiscal_month_view(open_store(), anchor, include_tips=_tips(include_tips), rates=load_rates())
        return view.to_dict()
    except (ValueError, ProfileError) as e:
        logger.error(f"Error loading fiscal month {month}: {e}")
        return {"error": str(e), "days": []}


@mcp.tool()
async def update_day(
    day: str = Field(description="Date to update (YYYY-MM-DD)"),
    start_time: str | None = Field(default=None, description="Clock-in HH:MM, empty string clears it"),
    end_time: str | None = Field(default=None, description="Clock-out HH:MM, empty string clears it"),
    dieta_int: int | None = Field(default=None, description="International allowance units"),
    extra: int | None = Field(default=None, description="Extra service units"),
    pernocta: int | None = Field(default=None, description="Overnight stays"),
    propinas: float | None = Field(default=None, description="Tips received"),
) -> dict[str, Any]:
    """Set one or more fields of a day's timesheet entry. Fields left out keep their stored value."""
    fields = {
        name: value
        for name, value in (
            ("start_time", start_time),
            ("end_time", end_time),
            ("international_extra_count", dieta_int),
            ("extra_count", extra),
            ("overnight_count", pernocta),
            ("tips_amount", propinas),
        )
        if value is not None
    }
    try:
        record = set_day_fields(open_store(), day, fields)
        return {"day": derive_day(record, load_rates()).to_dict()}
    except (ValueError, OutsideWindowError, BucketKeyError, ProfileError) as e:
        logger.error(f"Error updating day {day}: {e}")
        return {"error": str(e), "day": None}


@mcp.tool()
async def get_annual_summary(
    year: int = Field(description="Year the fiscal months are named in (e.g., 2024)"),
    include_tips: bool | None = Field(default=None, description="Include tips in totals (default: show_tips setting)"),
) -> dict[str, Any]:
    """Get combined payroll totals for the twelve fiscal months of a year, with a per-month breakdown."""
    try:
        result = annual_summary(open_store(), year, include_tips=_tips(include_tips), rates=load_rates())
        return result.to_dict()
    except (ValueError, ProfileError) as e:
        logger.error(f"Error building annual summary for {year}: {e}")
        return {"error": str(e), "months": []}


@mcp.tool()
async def get_report(
    start: str = Field(description="First date of the range (YYYY-MM-DD, inclusive)"),
    end: str = Field(description="Last date of the range (YYYY-MM-DD, inclusive)"),
    include_tips: bool | None = Field(default=None, description="Include tips in totals (default: show_tips setting)"),
) -> dict[str, Any]:
    """Get report rows and totals for every recorded day in a date range, ignoring fiscal month boundaries."""
    try:
        data = report_data(open_store(), start, end, include_tips=_tips(include_tips), rates=load_rates())
        return data.to_dict()
    except (ReportRangeError, StoreConsistencyError, ValueError, ProfileError) as e:
        logger.error(f"Error building report {start}..{end}: {e}")
        return {"error": str(e), "rows": []}


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
