"""Settings CLI commands for drivepay.

Manages settings.json: where buckets live and whether tips are shown.
"""

import click

from drivepay.sdk import (
    ProfileError,
    clear_data_dir,
    get_data_path,
    get_profile_path,
    get_setting,
    get_settings_path,
    get_timesheets_path,
    load_rates,
    load_settings,
    set_data_dir,
    set_setting,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    \b
    Keys:
      data_dir    where timesheet buckets are stored
      show_tips   count tips in totals unless --hide-tips/--show-tips is given
      profile     path to profile.yaml (driver name, rate overrides)
    """
    pass


@settings.command("show")
def settings_show():
    """Show settings, effective paths and the rates in use."""
    try:
        rates = load_rates()
    except ProfileError as e:
        raise click.ClickException(str(e))

    path = get_settings_path()
    stored = load_settings()
    click.echo(f"{path}{'' if path.exists() else ' (not created yet)'}")
    for key in sorted(stored):
        click.echo(f"  {key}: {stored[key]}")
    if not stored:
        click.echo("  (defaults)")

    click.echo()
    click.echo(f"Data:       {get_data_path()}")
    click.echo(f"Timesheets: {get_timesheets_path()}")
    click.echo(f"Profile:    {get_profile_path()}")

    click.echo()
    click.echo("Rates:")
    for key, value in rates.model_dump().items():
        click.echo(f"  {key}: {value:g}")


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.option("--clear", is_flag=True, help="Go back to the default data directory.")
def settings_data_dir(path, clear):
    """Show, set or clear the data directory.

    \b
    Examples:
      drivepay settings data-dir                  # Where buckets live now
      drivepay settings data-dir ~/Documents/nomina
      drivepay settings data-dir --clear
    """
    if clear:
        if clear_data_dir():
            click.echo(f"data_dir cleared, using {get_data_path()}")
        else:
            click.echo("data_dir was not set.")
        return

    if path is None:
        custom = get_setting("data_dir")
        click.echo(f"{get_data_path()}{'' if custom else ' (default)'}")
        return

    try:
        data_path = set_data_dir(path)
    except OSError as e:
        raise click.ClickException(f"Cannot use {path} as data directory: {e}")
    click.echo(f"data_dir set to {data_path}")


@settings.command("show-tips")
@click.argument("state", required=False, type=click.Choice(["on", "off"]))
def settings_show_tips(state):
    """Show or set whether tips count toward totals by default.

    \b
    Examples:
      drivepay settings show-tips        # Current value
      drivepay settings show-tips off    # Leave tips out of totals
    """
    if state is None:
        value = get_setting("show_tips", True)
        click.echo(f"show_tips: {'on' if value else 'off'}")
        return

    set_setting("show_tips", state == "on")
    click.echo(f"Set show_tips: {state}")
