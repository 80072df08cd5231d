"""
Expense report entry point.

Combines allocation and metrics into the single call the reporting
layer makes. Pure: no I/O, no caching, safe to call concurrently.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .allocation import CostBreakdown, aggregate
from .metrics import Metrics, compute_metrics
from .periods import DateRange, QueryWindow, resolve_window
from .projects import matches_project
from .sales import count_sales
from lead_cost_report.storage.models import ExpenseRecord, LeadRecord


@dataclass(frozen=True)
class ExpenseReport:
    """Allocated costs and metrics for one project and window."""
    project: str
    window: DateRange
    breakdown: CostBreakdown
    metrics: Metrics


def compute_expense_report(
    expenses: Iterable[ExpenseRecord],
    leads: Iterable[LeadRecord],
    project: str,
    window: Optional[QueryWindow],
    sale_count: Optional[int] = None,
) -> ExpenseReport:
    """Allocate a project's expenses to a window and derive cost metrics.

    Args:
        expenses: Expense records from the data layer
        leads: Lead records from the data layer
        project: Project name, or "all" to disable project filtering
        window: Query window; None means all time
        sale_count: Sales to divide by; defaults to the window's leads
            flagged as sales

    Returns:
        ExpenseReport with breakdown and metrics

    Raises:
        ValueError: If sale_count is negative
    """
    if sale_count is not None and sale_count < 0:
        raise ValueError("sale_count cannot be negative")

    resolved = resolve_window(window)
    expenses = list(expenses)
    leads = list(leads)

    breakdown = aggregate(expenses, leads, project, resolved)

    window_leads = [
        lead for lead in leads
        if matches_project(lead.project, project) and resolved.contains(lead.request_date)
    ]
    if sale_count is None:
        sale_count = count_sales(window_leads)

    metrics = compute_metrics(breakdown, len(window_leads), sale_count)

    return ExpenseReport(
        project=project,
        window=resolved,
        breakdown=breakdown,
        metrics=metrics,
    )
