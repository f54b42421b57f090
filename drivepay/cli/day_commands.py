"""Day command group: record and inspect a single day's entry."""

import json
from datetime import date

import click
from click.core import ParameterSource

from drivepay.sdk import (
    BucketKeyError,
    OutsideWindowError,
    derive_day,
    fiscal_window_for_payroll_date,
    fiscal_month_label,
    load_fiscal_month,
    load_rates,
    open_store,
    parse_time,
    set_day_fields,
    ProfileError,
)


class TimeParam(click.ParamType):
    """HH:MM, or an empty string to clear the time."""

    name = "HH:MM"

    def convert(self, value, param, ctx):
        try:
            return parse_time(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class DateParam(click.ParamType):
    name = "YYYY-MM-DD"

    def convert(self, value, param, ctx):
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(value)
        except ValueError:
            self.fail(f"Invalid date '{value}'. Expected YYYY-MM-DD.", param, ctx)


TIME = TimeParam()
DATE = DateParam()


@click.group("day")
def day():
    """Record or inspect one day's timesheet entry.

    \b
    Examples:
      drivepay day set 2024-03-15 --start 08:00 --end 22:00
      drivepay day set 2024-03-16 --extra 1 --propinas 12.50
      drivepay day set 2024-03-16 --start "" --end ""   # Clear times
      drivepay day show 2024-03-15
    """
    pass


@day.command("set")
@click.argument("day_date", metavar="DATE", type=DATE)
@click.option("--start", "start_time", type=TIME, help="Clock-in time (HH:MM, '' to clear).")
@click.option("--end", "end_time", type=TIME, help="Clock-out time (HH:MM, '' to clear).")
@click.option("--dieta-int", "dieta_int", type=click.IntRange(min=0), help="International allowance units.")
@click.option("--extra", type=click.IntRange(min=0), help="Extra service units.")
@click.option("--pernocta", type=click.IntRange(min=0), help="Overnight stays.")
@click.option("--propinas", type=click.FloatRange(min=0), help="Tips received.")
def day_set(day_date, start_time, end_time, dieta_int, extra, pernocta, propinas):
    """Set one or more fields of DATE. Unspecified fields keep their value."""
    ctx = click.get_current_context()
    fields = {}
    # A cleared time parses to None, so check the raw option source instead
    for param_name, field_name, value in (
        ("start_time", "start_time", start_time),
        ("end_time", "end_time", end_time),
        ("dieta_int", "international_extra_count", dieta_int),
        ("extra", "extra_count", extra),
        ("pernocta", "overnight_count", pernocta),
        ("propinas", "tips_amount", propinas),
    ):
        if ctx.get_parameter_source(param_name) == ParameterSource.COMMANDLINE:
            fields[field_name] = value

    if not fields:
        raise click.UsageError("Nothing to set. Pass at least one field option.")

    try:
        rates = load_rates()
        record = set_day_fields(open_store(), day_date, fields)
    except (OutsideWindowError, BucketKeyError, ProfileError) as e:
        raise click.ClickException(str(e))

    derived = derive_day(record, rates)
    window = fiscal_window_for_payroll_date(day_date)
    click.echo(f"Saved {record.date} ({fiscal_month_label(window)})")
    click.echo(f"  {derived.hours_worked:.2f}h, night differential {derived.night_differential_amount:g}€")


@day.command("show")
@click.argument("day_date", metavar="DATE", type=DATE)
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default="text", help="Output format.")
def day_show(day_date, output_format):
    """Show the stored entry and derived metrics for DATE."""
    try:
        rates = load_rates()
    except ProfileError as e:
        raise click.ClickException(str(e))

    window = fiscal_window_for_payroll_date(day_date)
    records = load_fiscal_month(open_store(), window.end_date)
    record = records.get(day_date.isoformat())

    if record is None:
        if output_format == "json":
            click.echo(json.dumps(None))
        else:
            click.echo(f"No entry for {day_date.isoformat()}")
        return

    derived = derive_day(record, rates)
    if output_format == "json":
        click.echo(json.dumps(derived.to_dict(), indent=2))
        return

    data = derived.to_dict()
    click.echo(f"{data['date']} ({fiscal_month_label(window)})")
    click.echo(f"  Inicio:       {data['startTime'] or '-'}")
    click.echo(f"  Fin:          {data['endTime'] or '-'}")
    click.echo(f"  Horas:        {data['hours']:.2f}")
    if derived.is_weekend:
        click.echo(f"  Dieta finde:  {data['weekendAllowanceUnits']}")
    else:
        click.echo(f"  Dieta normal: {data['normalAllowanceUnits']}")
    click.echo(f"  Nocturnidad:  {data['nightDifferentialAmount']:g}€")
    click.echo(f"  Dieta int:    {data['dietaInt']}")
    click.echo(f"  Extra:        {data['extra']}")
    click.echo(f"  Pernocta:     {data['pernocta']}")
    click.echo(f"  Propinas:     {data['propinas']:.2f}")
