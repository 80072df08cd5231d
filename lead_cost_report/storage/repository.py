"""
Repository pattern for data access.

Stores and reads the expense and lead records the report is built from.
"""

import sqlite3
from datetime import date
from typing import Iterable, List, Optional

from .db import DEFAULT_DB_PATH, get_connection
from .models import ExpenseKind, ExpenseRecord, LeadRecord
from lead_cost_report.core.periods import YearMonth
from lead_cost_report.core.projects import is_all_projects, normalize_project_name


class ReportRepository:
    """Read access to stored expenses and leads.

    Project filtering happens on normalized names, matching how the
    engine compares projects.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

    def get_expenses(self, project: Optional[str] = None) -> List[ExpenseRecord]:
        """Get stored expenses, oldest month first.

        Args:
            project: Optional project filter ("all" or None for every project)

        Returns:
            List of expense records
        """
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT project, month, expense_type, amount_minor_units, description
                FROM lead_expense
                ORDER BY month, id
            """)
            expenses = [_row_to_expense(row) for row in cursor.fetchall()]
        finally:
            conn.close()
        return _filter_project(expenses, project)

    def get_leads(self, project: Optional[str] = None) -> List[LeadRecord]:
        """Get stored leads, oldest request first.

        Args:
            project: Optional project filter ("all" or None for every project)

        Returns:
            List of lead records
        """
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT project, request_date, is_sale
                FROM lead
                ORDER BY request_date, id
            """)
            leads = [
                LeadRecord(
                    project=row["project"],
                    request_date=date.fromisoformat(row["request_date"]),
                    is_sale=bool(row["is_sale"])
                )
                for row in cursor.fetchall()
            ]
        finally:
            conn.close()
        return _filter_project(leads, project)

    def get_projects(self) -> List[str]:
        """Distinct project names seen in expenses or leads."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("""
                SELECT project FROM lead_expense
                UNION
                SELECT project FROM lead
                ORDER BY project
            """)
            return [row["project"] for row in cursor.fetchall()]
        finally:
            conn.close()


def _row_to_expense(row: sqlite3.Row) -> ExpenseRecord:
    return ExpenseRecord(
        project=row["project"],
        month=YearMonth.parse(row["month"]),
        kind=ExpenseKind(row["expense_type"]),
        amount_minor_units=row["amount_minor_units"],
        description=row["description"]
    )


def _filter_project(records, project: Optional[str]):
    if project is None or is_all_projects(project):
        return records
    wanted = normalize_project_name(project)
    return [r for r in records if normalize_project_name(r.project) == wanted]


def get_repository(db_path: str = DEFAULT_DB_PATH) -> ReportRepository:
    """Get a repository instance for the given database.

    Args:
        db_path: Path to SQLite database file

    Returns:
        An instance of ReportRepository
    """
    return ReportRepository(db_path)


def initialize_schema(db_path: str = DEFAULT_DB_PATH) -> None:
    """Create the lead_expense and lead tables if they don't exist.

    Args:
        db_path: Path to SQLite database file
    """
    conn = get_connection(db_path)
    try:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS lead_expense (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                project TEXT NOT NULL,
                month TEXT NOT NULL,
                expense_type TEXT NOT NULL CHECK (expense_type IN ('fixed', 'variable')),
                amount_minor_units INTEGER NOT NULL CHECK (amount_minor_units >= 0),
                description TEXT
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS lead (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                project TEXT NOT NULL,
                request_date TEXT NOT NULL,
                is_sale INTEGER NOT NULL DEFAULT 0
            )
        """)
        conn.commit()
    finally:
        conn.close()


_INSERT_EXPENSE = """
    INSERT INTO lead_expense (project, month, expense_type, amount_minor_units, description)
    VALUES (?, ?, ?, ?, ?)
"""

_INSERT_LEAD = """
    INSERT INTO lead (project, request_date, is_sale)
    VALUES (?, ?, ?)
"""


def _expense_params(expense: ExpenseRecord):
    return (
        expense.project,
        str(expense.month),
        expense.kind.value,
        expense.amount_minor_units,
        expense.description
    )


def _lead_params(lead: LeadRecord):
    return (lead.project, lead.request_date.isoformat(), int(lead.is_sale))


def insert_expense(expense: ExpenseRecord, db_path: str = DEFAULT_DB_PATH) -> None:
    """Insert a single expense record.

    Args:
        expense: The expense to record
        db_path: Path to SQLite database file
    """
    insert_expenses([expense], db_path)


def insert_expenses(expenses: Iterable[ExpenseRecord], db_path: str = DEFAULT_DB_PATH) -> None:
    """Insert multiple expense records atomically.

    All records are inserted in a single transaction; nothing is written
    if any insert fails.

    Args:
        expenses: Expense records to store
        db_path: Path to SQLite database file
    """
    _insert_many(_INSERT_EXPENSE, [_expense_params(e) for e in expenses], db_path)


def insert_lead(lead: LeadRecord, db_path: str = DEFAULT_DB_PATH) -> None:
    """Insert a single lead record.

    Args:
        lead: The lead to record
        db_path: Path to SQLite database file
    """
    insert_leads([lead], db_path)


def insert_leads(leads: Iterable[LeadRecord], db_path: str = DEFAULT_DB_PATH) -> None:
    """Insert multiple lead records atomically.

    Args:
        leads: Lead records to store
        db_path: Path to SQLite database file
    """
    _insert_many(_INSERT_LEAD, [_lead_params(lead) for lead in leads], db_path)


def _insert_many(statement: str, rows: List[tuple], db_path: str) -> None:
    if not rows:
        return

    conn = get_connection(db_path)
    try:
        conn.execute("BEGIN TRANSACTION")
        for params in rows:
            conn.execute(statement, params)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
