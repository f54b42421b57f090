"""drivepay CLI - Command-line interface for fiscal-month driver payroll."""

import json
import sys
from datetime import date
from pathlib import Path

import click
from rich.console import Console

from drivepay import __version__
from drivepay.sdk import (
    ProfileError,
    ReportRangeError,
    StoreConsistencyError,
    annual_summary,
    fiscal_month_view,
    fiscal_window,
    get_driver_name,
    get_show_tips,
    load_rates,
    open_store,
    report_data,
    save_report_csv,
    shift_month,
    write_report_csv,
)

from .day_commands import day as day_group, DATE
from .settings_commands import settings as settings_group
from .renderers.timesheet_renderer import render_annual, render_fiscal_month, render_report

MIN_YEAR = 2


@click.group()
@click.version_option(version=__version__, prog_name="drivepay")
def cli():
    """drivepay - Driver timesheet and fiscal-month payroll.

    Fiscal months (nóminas) run from the 26th of one month through the
    25th of the next, and are named after the month they end in.

    Configuration is loaded from (in order):

    \b
    1. DRIVEPAY_CONFIG_PATH environment variable
    2. ~/.config/drivepay/ (XDG default)

    Run 'drivepay settings show' to see paths and rates in effect.
    """
    pass


cli.add_command(day_group)
cli.add_command(settings_group)


def _parse_month(value: str) -> date:
    """Parse YYYY-MM (or a full date) into the first day of that month."""
    try:
        if len(value) == 7:
            return date.fromisoformat(f"{value}-01")
        return date.fromisoformat(value).replace(day=1)
    except ValueError:
        raise click.BadParameter(f"Invalid month '{value}'. Expected YYYY-MM.")


def _resolve_tips(show_tips):
    return get_show_tips() if show_tips is None else show_tips


def _driver():
    try:
        return get_driver_name()
    except ProfileError as e:
        raise click.ClickException(str(e))


def _load_rates():
    try:
        return load_rates()
    except ProfileError as e:
        raise click.ClickException(str(e))


tips_option = click.option(
    "--show-tips/--hide-tips", "show_tips", default=None,
    help="Include tips in totals (default: show_tips setting).",
)


@cli.command("month")
@click.argument("month", required=False)
@click.option("--prev", "prev_months", type=click.IntRange(min=0), default=0,
              help="Go back N fiscal months from MONTH.")
@click.option("--next", "next_months", type=click.IntRange(min=0), default=0,
              help="Go forward N fiscal months from MONTH.")
@tips_option
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default="text", help="Output format.")
def month(month, prev_months, next_months, show_tips, output_format):
    """Show the fiscal month named MONTH (YYYY-MM, default: current month).

    \b
    Examples:
      drivepay month                 # Current fiscal month
      drivepay month 2024-03         # 26 Feb - 25 Mar 2024
      drivepay month --prev 1        # Previous fiscal month
    """
    anchor = _parse_month(month) if month else date.today().replace(day=1)
    try:
        anchor = shift_month(anchor, next_months - prev_months)
        fiscal_window(anchor)
    except (ValueError, OverflowError):
        raise click.BadParameter(
            f"Fiscal month {anchor:%Y-%m} shifted by {next_months - prev_months} "
            f"is out of the supported date range.",
            param_hint="MONTH/--prev/--next",
        )

    view = fiscal_month_view(
        open_store(), anchor, include_tips=_resolve_tips(show_tips), rates=_load_rates()
    )

    if output_format == "json":
        click.echo(json.dumps(view.to_dict(), indent=2, ensure_ascii=False))
        return

    render_fiscal_month(Console(), view.to_dict(), driver=_driver())


@cli.command("annual")
@click.argument("year", required=False)
@tips_option
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default="text", help="Output format.")
def annual(year, show_tips, output_format):
    """Summarize the twelve fiscal months named in YEAR (default: this year)."""
    if year and (not year.isdigit() or len(year) != 4):
        raise click.BadParameter(f"Invalid year '{year}'. Must be 4 digits.")

    target_year = int(year) if year else date.today().year
    # January's fiscal month starts in the previous December
    if target_year < MIN_YEAR:
        raise click.BadParameter(f"Invalid year '{year}'. Must be {MIN_YEAR:04d} or later.")

    result = annual_summary(
        open_store(), target_year, include_tips=_resolve_tips(show_tips), rates=_load_rates()
    )

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    render_annual(Console(), result.to_dict())


@cli.command("report")
@click.argument("start", type=DATE)
@click.argument("end", type=DATE)
@tips_option
@click.option("--format", "output_format", type=click.Choice(["text", "json", "csv"]),
              default="text", help="Output format.")
@click.option("--output", "-o", type=click.Path(dir_okay=False),
              help="Write CSV/JSON to this file instead of stdout.")
def report(start, end, show_tips, output_format, output):
    """Report every recorded day from START to END (inclusive).

    The range ignores fiscal month boundaries.

    \b
    Examples:
      drivepay report 2024-03-01 2024-03-31
      drivepay report 2024-01-01 2024-12-31 --format csv -o 2024.csv
    """
    try:
        data = report_data(
            open_store(), start, end, include_tips=_resolve_tips(show_tips), rates=_load_rates()
        )
    except ReportRangeError as e:
        raise click.BadParameter(str(e), param_hint="START/END")
    except StoreConsistencyError as e:
        raise click.ClickException(str(e))

    if output_format == "csv":
        if output:
            path = save_report_csv(data, Path(output))
            click.echo(f"Wrote {len(data.days)} row(s) to {path}")
        else:
            write_report_csv(data, sys.stdout)
        return

    if output_format == "json":
        text = json.dumps(data.to_dict(), indent=2, ensure_ascii=False)
        if output:
            Path(output).write_text(text + "\n", encoding="utf-8")
            click.echo(f"Wrote {len(data.days)} row(s) to {output}")
        else:
            click.echo(text)
        return

    render_report(Console(), data.to_dict(), driver=_driver())


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
