"""Rich renderer for fiscal month, annual and report output.

Transforms SDK JSON output (the to_dict() forms) into formatted Rich tables.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table


def _money(value: float) -> str:
    return f"{value:,.2f}€"


def _dash(value) -> str:
    """Zero and empty values show as '-' like the timesheet form."""
    if not value:
        return "-"
    return str(value)


def _driver_line(driver) -> str:
    return f"\nConductor: {escape(driver)}" if driver else ""


def render_fiscal_month(console: Console, data: dict, driver: Optional[str] = None) -> None:
    """Render one fiscal month: day table, then summary.

    Args:
        console: Rich Console instance
        data: Output of FiscalMonthView.to_dict()
        driver: Display name from the profile, shown under the title
    """
    console.print(Panel(
        f"[bold]{data['label']}[/bold]\n[dim]{data['range_label']}[/dim]"
        f"{_driver_line(driver)}",
        border_style="blue",
        expand=False,
    ))

    days = data.get("days", [])
    if not days:
        console.print("[dim]No days recorded in this fiscal month.[/dim]")
    else:
        include_tips = data["summary"]["include_tips"]
        console.print(_day_table(days, include_tips))

    render_summary(console, data["summary"], title="Resumen")


def _day_table(days: list, include_tips: bool) -> Table:
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE_HEAVY)
    table.add_column("Fecha")
    table.add_column("Inicio", justify="center")
    table.add_column("Fin", justify="center")
    table.add_column("Horas", justify="right")
    table.add_column("D. Normal", justify="center")
    table.add_column("D. Finde", justify="center")
    table.add_column("Nocturnidad", justify="right")
    table.add_column("D. Int", justify="center")
    table.add_column("Extra", justify="center")
    table.add_column("Pernocta", justify="center")
    if include_tips:
        table.add_column("Propinas", justify="right")

    for day in days:
        style = "cyan" if day.get("isWeekend") else None
        hours = day.get("hours", 0)
        night = day.get("nightDifferentialAmount", 0)
        row = [
            day["date"],
            day.get("startTime") or "-",
            day.get("endTime") or "-",
            f"{hours:.2f}",
            _dash(day.get("normalAllowanceUnits")),
            _dash(day.get("weekendAllowanceUnits")),
            _money(night) if night else "-",
            _dash(day.get("dietaInt")),
            _dash(day.get("extra")),
            _dash(day.get("pernocta")),
        ]
        if include_tips:
            tips = day.get("propinas", 0)
            row.append(f"{tips:.2f}" if tips else "-")
        table.add_row(*row, style=style)

    return table


def render_summary(console: Console, summary: dict, title: str = "Resumen") -> None:
    """Render a Summary.to_dict() as a breakdown table."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("concept", style="dim")
    table.add_column("value", justify="right")

    table.add_row("Total Horas", f"{summary['total_hours']:.2f}h")
    table.add_row("Días Trabajados", str(summary["days_worked"]))
    table.add_row(
        f"Dieta Normal ({summary['normal_allowance_units']})",
        _money(summary["normal_allowance_money"]),
    )
    table.add_row(
        f"Dieta Finde ({summary['weekend_allowance_units']})",
        _money(summary["weekend_allowance_money"]),
    )
    table.add_row("Total Dietas", f"[blue]{_money(summary['total_allowances'])}[/blue]")
    table.add_row("Nocturnidad", _money(summary["night_differential_total"]))
    table.add_row("Dieta Int", _money(summary["international_extra_money"]))
    table.add_row("Extra", _money(summary["extra_money"]))
    table.add_row("Pernocta", _money(summary["overnight_money"]))
    if summary["include_tips"]:
        table.add_row("Propinas", _money(summary["tips_total"]))
    table.add_row("Total Extra", _money(summary["total_extras"]))
    table.add_row("[bold]Total General[/bold]", f"[bold green]{_money(summary['total_money'])}[/bold green]")

    console.print(Panel(table, title=title, border_style="dim", expand=False))


def render_annual(console: Console, data: dict) -> None:
    """Render AnnualSummary.to_dict(): per-month table, then year totals."""
    table = Table(show_header=True, header_style="bold", box=box.SIMPLE_HEAVY,
                  title=f"Resumen Anual {data['year']}")
    table.add_column("Nómina")
    table.add_column("Periodo", style="dim")
    table.add_column("Días", justify="right")
    table.add_column("Horas", justify="right")
    table.add_column("Total", justify="right")

    for month in data["months"]:
        summary = month["summary"]
        table.add_row(
            month["label"],
            f"{month['start_date']} - {month['end_date']}",
            str(summary["days_worked"]),
            f"{summary['total_hours']:.2f}",
            _money(summary["total_money"]),
        )

    console.print(table)
    render_summary(console, data["summary"], title=f"Total {data['year']}")


def render_report(console: Console, data: dict, driver: Optional[str] = None) -> None:
    """Render ReportData.to_dict() for the terminal."""
    console.print(Panel(
        f"[bold]Reporte de Actividad[/bold]\n"
        f"[dim]{data['range_start']} al {data['range_end']}[/dim]"
        f"{_driver_line(driver)}",
        border_style="green",
        expand=False,
    ))

    include_tips = data["summary"]["include_tips"]
    if data["rows"]:
        console.print(_day_table(data["rows"], include_tips))
    else:
        console.print("[dim]No days recorded in this range.[/dim]")

    render_summary(console, data["summary"], title="Totales")
