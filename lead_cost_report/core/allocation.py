"""
Expense allocation into reporting windows.

Fixed expenses (agency retainers) are prorated by the share of the
month's calendar days that fall inside the window. Variable expenses
(ad spend) are prorated by the share of the month's leads that fall
inside the window.

Allocation is done month by month:
1. Resolve the window once
2. Keep only the requested project's expenses and leads
3. For each expense month overlapping the window, allocate its fixed
   and variable amounts using that month's days and leads only
4. Sum the per-month shares
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple, Union

from .periods import DateRange, MonthSpan, QueryWindow, YearMonth, overlap_days, resolve_window
from .projects import matches_project
from lead_cost_report.storage.models import ExpenseKind, ExpenseRecord, LeadRecord

ZERO = Decimal(0)


@dataclass(frozen=True)
class MonthAllocation:
    """How one expense month contributed to a window."""
    month: YearMonth
    overlap_days: int
    days_in_month: int
    fixed_amount: Decimal
    fixed_share: Decimal
    variable_amount: Decimal
    variable_share: Decimal
    month_lead_count: int
    window_lead_count: int


@dataclass(frozen=True)
class CostBreakdown:
    """Costs attributed to a window, split by expense kind."""
    fixed_total: Decimal = ZERO
    variable_total: Decimal = ZERO
    months: Tuple[MonthAllocation, ...] = ()

    @property
    def total_cost(self) -> Decimal:
        return self.fixed_total + self.variable_total


def _as_range(window: Union[DateRange, QueryWindow]) -> DateRange:
    if isinstance(window, DateRange):
        return window
    return resolve_window(window)


def allocate_fixed(
    expense_amount: Decimal,
    month_span: MonthSpan,
    window: Union[DateRange, QueryWindow],
) -> Decimal:
    """Prorate a fixed monthly expense by day overlap.

    Args:
        expense_amount: Full amount recorded for the month
        month_span: The expense's calendar month
        window: Query window (resolved or not)

    Returns:
        expense_amount * overlapping days / days in month, exactly 0 without overlap
    """
    days = overlap_days(month_span, _as_range(window))
    if days == 0:
        return ZERO
    # Multiply before dividing so a full-month window returns the amount unchanged
    return Decimal(expense_amount) * days / month_span.days_in_month


def allocate_variable(
    expense_amount: Decimal,
    month_lead_count: int,
    window_lead_count: int,
) -> Decimal:
    """Prorate a variable monthly expense by lead share.

    A month with spend but no leads has no driver to split on, so none of
    its spend is attributed to any window.

    Args:
        expense_amount: Full amount recorded for the month
        month_lead_count: Leads generated in the whole month
        window_lead_count: Leads of that month that fall inside the window

    Returns:
        (expense_amount / month_lead_count) * window_lead_count, or 0 without leads
    """
    if month_lead_count == 0:
        return ZERO
    return Decimal(expense_amount) * window_lead_count / month_lead_count


def _group_leads_by_month(leads: Iterable[LeadRecord]) -> Dict[YearMonth, List[LeadRecord]]:
    leads_by_month: Dict[YearMonth, List[LeadRecord]] = {}
    for lead in leads:
        leads_by_month.setdefault(YearMonth.of(lead.request_date), []).append(lead)
    return leads_by_month


def aggregate(
    expenses: Iterable[ExpenseRecord],
    leads: Iterable[LeadRecord],
    project: str,
    window: Union[DateRange, QueryWindow],
) -> CostBreakdown:
    """Attribute a project's monthly expenses to a query window.

    Args:
        expenses: Expense records (any projects, any months)
        leads: Lead records (any projects, any dates)
        project: Project name, or "all" for every project
        window: Query window

    Returns:
        CostBreakdown with fixed and variable totals and per-month lines.
        Empty windows and windows with no expense months give zero totals.
    """
    resolved = _as_range(window)
    if resolved.is_empty:
        return CostBreakdown()

    project_expenses = [e for e in expenses if matches_project(e.project, project)]
    project_leads = [lead for lead in leads if matches_project(lead.project, project)]

    expenses_by_month: Dict[YearMonth, List[ExpenseRecord]] = {}
    for expense in project_expenses:
        expenses_by_month.setdefault(expense.month, []).append(expense)

    leads_by_month = _group_leads_by_month(project_leads)

    fixed_total = ZERO
    variable_total = ZERO
    months = []

    for month in sorted(expenses_by_month):
        span = month.span()
        days = overlap_days(span, resolved)
        if days == 0:
            continue

        month_expenses = expenses_by_month[month]
        fixed_amount = sum(
            (e.amount for e in month_expenses if e.kind == ExpenseKind.FIXED), ZERO
        )
        variable_amount = sum(
            (e.amount for e in month_expenses if e.kind == ExpenseKind.VARIABLE), ZERO
        )

        month_leads = leads_by_month.get(month, [])
        window_lead_count = sum(1 for lead in month_leads if resolved.contains(lead.request_date))

        fixed_share = allocate_fixed(fixed_amount, span, resolved)
        variable_share = allocate_variable(variable_amount, len(month_leads), window_lead_count)

        fixed_total += fixed_share
        variable_total += variable_share
        months.append(MonthAllocation(
            month=month,
            overlap_days=days,
            days_in_month=span.days_in_month,
            fixed_amount=fixed_amount,
            fixed_share=fixed_share,
            variable_amount=variable_amount,
            variable_share=variable_share,
            month_lead_count=len(month_leads),
            window_lead_count=window_lead_count,
        ))

    return CostBreakdown(
        fixed_total=fixed_total,
        variable_total=variable_total,
        months=tuple(months),
    )
