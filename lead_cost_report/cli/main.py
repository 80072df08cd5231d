"""
CLI interface for Lead Cost Report.

Provides command-line access to the data layer and the expense report.
"""

import sqlite3
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lead_cost_report.config.loader import DisplayConfig, load_report_config
from lead_cost_report.core.metrics import is_computable, round_amount
from lead_cost_report.core.periods import (
    ALL_TIME,
    AllTimeWindow,
    ExplicitWindow,
    MonthWindow,
    QueryWindow,
    YearMonth,
    YearWindow,
)
from lead_cost_report.core.report import ExpenseReport, compute_expense_report
from lead_cost_report.core.sales import qualifies_as_sale
from lead_cost_report.demo.seed_demo_data import seed_demo_data
from lead_cost_report.storage.db import DEFAULT_DB_PATH
from lead_cost_report.storage.models import ExpenseKind, ExpenseRecord, LeadRecord, to_minor_units
from lead_cost_report.storage.repository import (
    get_repository,
    initialize_schema,
    insert_expense,
    insert_lead,
)

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

DB_OPTION = typer.Option(DEFAULT_DB_PATH, "--db", help="Path to SQLite database file")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to YAML report config")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Lead Cost Report CLI."""
    if ctx.invoked_subcommand is None:
        console.print("Lead Cost Report - Use --help to see available commands")


@app.command()
def init(db: str = DB_OPTION):
    """Initialize the expense and lead database."""
    try:
        initialize_schema(db)
        console.print("[green]✓[/] Database initialized successfully")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command("add-expense")
def add_expense(
    project: str = typer.Argument(..., help="Project name"),
    month: str = typer.Argument(..., help="Expense month as YYYY-MM"),
    kind: str = typer.Argument(..., help="fixed, variable, agency_fee or ads_expense"),
    amount: str = typer.Argument(..., help="Amount in major units, e.g. 30000.50, 30.000,50 or 30,000.50"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    db: str = DB_OPTION,
):
    """Record a monthly expense for a project."""
    try:
        expense = ExpenseRecord(
            project=project,
            month=YearMonth.parse(month),
            kind=ExpenseKind.parse(kind),
            amount_minor_units=to_minor_units(_parse_amount(amount)),
            description=description
        )
        insert_expense(expense, db)
        console.print(
            f"[green]✓[/] Recorded {expense.kind.value} expense of "
            f"{expense.amount:,.2f} for {expense.project} ({expense.month})"
        )
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command("add-lead")
def add_lead(
    project: str = typer.Argument(..., help="Project name"),
    request_date: str = typer.Argument(..., help="Request date as YYYY-MM-DD"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Lead status text"),
    sale_made: Optional[str] = typer.Option(None, "--sale-made", help="Sale made answer (evet/yes)"),
    sale: bool = typer.Option(False, "--sale", help="Mark the lead as a sale"),
    config: Optional[str] = CONFIG_OPTION,
    db: str = DB_OPTION,
):
    """Record a lead for a project."""
    try:
        report_config = load_report_config(config)
        lead = LeadRecord(
            project=project,
            request_date=date.fromisoformat(request_date),
            is_sale=sale or qualifies_as_sale(status, sale_made, report_config.sales)
        )
        insert_lead(lead, db)
        label = "sale" if lead.is_sale else "lead"
        console.print(f"[green]✓[/] Recorded {label} for {lead.project} on {lead.request_date}")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def report(
    project: Optional[str] = typer.Option(
        None,
        "--project",
        "-p",
        help="Project to report on ('all' for every project)"
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Window start date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", help="Window end date (YYYY-MM-DD)"),
    month: Optional[str] = typer.Option(None, "--month", "-m", help="Single month window (YYYY-MM)"),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Whole year window"),
    sales: Optional[int] = typer.Option(None, "--sales", help="Override the sale count"),
    detail: bool = typer.Option(False, "--detail", help="Show per-month allocation lines"),
    config: Optional[str] = CONFIG_OPTION,
    db: str = DB_OPTION,
):
    """
    Allocate expenses to a reporting window and show cost metrics.

    Without --start/--end, --month or --year the report covers all time.
    Fixed expenses are prorated by calendar days, variable expenses by
    the month's leads that fall inside the window.
    """
    try:
        report_config = load_report_config(config)
        window = _build_window(start, end, month, year)
        selected_project = project or report_config.display.default_project

        repository = get_repository(db)
        expenses = repository.get_expenses()
        leads = repository.get_leads()

        if not expenses and not leads:
            _print_no_data_hint()
            sys.exit(EXIT_CODE_PASS)

        result = compute_expense_report(
            expenses=expenses,
            leads=leads,
            project=selected_project,
            window=window,
            sale_count=sales
        )
        _display_report(result, report_config.display, detail)
        sys.exit(EXIT_CODE_PASS)

    except sqlite3.OperationalError as e:
        if "no such table" in str(e).lower():
            _print_no_data_hint()
            sys.exit(EXIT_CODE_PASS)
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command("seed-demo")
def seed_demo(db: str = DB_OPTION):
    """Insert demo expenses and leads for two projects."""
    try:
        expense_count, lead_count = seed_demo_data(db)
        console.print(f"[green]✓[/] Inserted {expense_count} expenses and {lead_count} leads")
        sys.exit(EXIT_CODE_PASS)
    except Exception as e:
        console.print(f"[red]Error seeding demo data:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


def _parse_amount(text: str) -> Decimal:
    """Parse a major-unit amount written with either decimal mark.

    The last "," or "." is the decimal mark unless that character repeats;
    every other separator and any spaces group thousands, so "1,234.56",
    "1.234,56" and "1 234 567" all parse.
    """
    cleaned = text.strip().replace(" ", "")
    mark = max(cleaned.rfind(","), cleaned.rfind("."))
    if mark >= 0 and cleaned.count(cleaned[mark]) == 1:
        whole = cleaned[:mark].replace(",", "").replace(".", "")
        cleaned = f"{whole}.{cleaned[mark + 1:]}"
    else:
        cleaned = cleaned.replace(",", "").replace(".", "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {text}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {text}")
    return amount


def _build_window(
    start: Optional[str],
    end: Optional[str],
    month: Optional[str],
    year: Optional[int]
) -> QueryWindow:
    """Turn the window options into a query window.

    Raises:
        ValueError: If options conflict or dates are malformed
    """
    has_range = start is not None or end is not None
    chosen = sum([has_range, month is not None, year is not None])
    if chosen > 1:
        raise ValueError("Use only one of --start/--end, --month or --year")

    if has_range:
        if start is None or end is None:
            raise ValueError("--start and --end must be given together")
        return ExplicitWindow(start=date.fromisoformat(start), end=date.fromisoformat(end))
    if month is not None:
        parsed = YearMonth.parse(month)
        return MonthWindow(year=parsed.year, month=parsed.month)
    if year is not None:
        return YearWindow(year=year)
    return AllTimeWindow()


def _format_currency(amount, display: DisplayConfig) -> str:
    """Format an amount with thousands separators and the currency label."""
    if not is_computable(amount):
        return "N/A"
    rounded = round_amount(amount, display.decimal_places)
    return f"{rounded:,.{display.decimal_places}f} {display.currency}"


def _format_percent(value, display: DisplayConfig) -> str:
    if not is_computable(value):
        return "N/A"
    rounded = round_amount(value, display.decimal_places)
    return f"{rounded:,.{display.decimal_places}f}%"


def _format_window(result: ExpenseReport) -> str:
    if result.window == ALL_TIME:
        return "all time"
    if result.window.is_empty:
        return f"{result.window.start} - {result.window.end} (empty)"
    return f"{result.window.start} - {result.window.end}"


def _print_no_data_hint() -> None:
    console.print("\n[bold yellow]No expense or lead data found[/]")
    console.print("\nTo get started with Lead Cost Report:")
    console.print("1. Run `lead-cost-report init` to initialize the database")
    console.print("2. Record expenses with `lead-cost-report add-expense`")
    console.print("3. Record leads with `lead-cost-report add-lead`")
    console.print("   (or run `lead-cost-report seed-demo` for sample data)")
    console.print("4. Run this command again to see the report\n")


def _display_report(result: ExpenseReport, display: DisplayConfig, detail: bool) -> None:
    """Display the cost breakdown and metrics."""
    breakdown = result.breakdown
    metrics = result.metrics

    console.print("\n[bold]Lead Cost Report[/bold]")
    console.print("-" * 40)
    console.print(f"[bold]Project:[/bold] {result.project}")
    console.print(f"[bold]Window:[/bold] {_format_window(result)}")

    costs = Table(show_header=True, header_style="bold")
    costs.add_column("Cost")
    costs.add_column("Amount", justify="right")
    costs.add_row("Fixed (agency)", _format_currency(breakdown.fixed_total, display))
    costs.add_row("Variable (ads)", _format_currency(breakdown.variable_total, display))
    costs.add_row("[bold]Total[/bold]", _format_currency(breakdown.total_cost, display))
    console.print(costs)

    console.print(f"Leads: {metrics.lead_count:,}")
    console.print(f"Sales: {metrics.sale_count:,}")
    console.print(f"Cost/lead: {_format_currency(metrics.cost_per_lead, display)}")
    console.print(f"Cost/sale: {_format_currency(metrics.cost_per_sale, display)}")
    console.print(f"Conversion rate: {_format_percent(metrics.conversion_rate_percent, display)}")

    if detail:
        if not breakdown.months:
            console.print("\n[dim]No expense months overlap this window.[/]")
            return
        lines = Table(title="Allocation by month", show_header=True, header_style="bold")
        lines.add_column("Month")
        lines.add_column("Days", justify="right")
        lines.add_column("Fixed share", justify="right")
        lines.add_column("Leads", justify="right")
        lines.add_column("Variable share", justify="right")
        for line in breakdown.months:
            lines.add_row(
                str(line.month),
                f"{line.overlap_days}/{line.days_in_month}",
                _format_currency(line.fixed_share, display),
                f"{line.window_lead_count}/{line.month_lead_count}",
                _format_currency(line.variable_share, display),
            )
        console.print(lines)


if __name__ == "__main__":
    app()
