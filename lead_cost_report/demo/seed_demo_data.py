# lead_cost_report/demo/seed_demo_data.py

from datetime import date
from typing import List, Tuple

from lead_cost_report.core.periods import YearMonth
from lead_cost_report.storage.db import DEFAULT_DB_PATH
from lead_cost_report.storage.models import ExpenseKind, ExpenseRecord, LeadRecord
from lead_cost_report.storage.repository import initialize_schema, insert_expenses, insert_leads

DEMO_PROJECTS = ("Model Sanayi Merkezi", "Model Kuyum Merkezi")
DEMO_MONTHS = (YearMonth(2025, 1), YearMonth(2025, 2), YearMonth(2025, 3))


def build_demo_records() -> Tuple[List[ExpenseRecord], List[LeadRecord]]:
    """Three months of agency fees, ad spend and leads for two projects."""
    expenses = []
    leads = []

    for index, project in enumerate(DEMO_PROJECTS):
        for month in DEMO_MONTHS:
            expenses.append(ExpenseRecord(
                project=project,
                month=month,
                kind=ExpenseKind.FIXED,
                amount_minor_units=30_000_00,
                description="Reklam ajansı"
            ))
            expenses.append(ExpenseRecord(
                project=project,
                month=month,
                kind=ExpenseKind.VARIABLE,
                amount_minor_units=(12_000_00 + index * 4_500_00) * month.month,
                description="Meta + Google reklam harcaması"
            ))

            span = month.span()
            lead_total = 20 + 5 * month.month + 7 * index
            for n in range(lead_total):
                day = 1 + (n * span.days_in_month) // lead_total
                leads.append(LeadRecord(
                    project=project,
                    request_date=date(month.year, month.month, day),
                    is_sale=(n % 9 == 4)
                ))

    return expenses, leads


def seed_demo_data(db_path: str = DEFAULT_DB_PATH) -> Tuple[int, int]:
    """Create the schema and insert the demo records.

    Returns:
        (expenses inserted, leads inserted)
    """
    initialize_schema(db_path)
    expenses, leads = build_demo_records()
    insert_expenses(expenses, db_path)
    insert_leads(leads, db_path)
    return len(expenses), len(leads)
