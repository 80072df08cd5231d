"""
Tests for the CLI interface.
"""
import os
import tempfile
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from lead_cost_report.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL, _format_currency, _format_percent
from lead_cost_report.config.loader import DisplayConfig
from lead_cost_report.core.metrics import NOT_COMPUTABLE
from lead_cost_report.core.periods import AllTimeWindow, ExplicitWindow, MonthWindow, YearMonth, YearWindow
from lead_cost_report.storage.models import ExpenseKind, ExpenseRecord, LeadRecord
from lead_cost_report.storage.repository import (
    ReportRepository,
    initialize_schema,
    insert_expenses,
    insert_leads,
)

runner = CliRunner()


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as path:
        yield path


@pytest.fixture
def db_path(temp_dir):
    """Initialized, empty database."""
    path = os.path.join(temp_dir, "cli.db")
    initialize_schema(path)
    return path


@pytest.fixture
def january_db(db_path):
    """Sanayi: 1000 agency fee, 310 ad spend and one lead per day in January."""
    insert_expenses([
        ExpenseRecord("Sanayi", YearMonth(2025, 1), ExpenseKind.FIXED, 1000_00),
        ExpenseRecord("Sanayi", YearMonth(2025, 1), ExpenseKind.VARIABLE, 310_00),
    ], db_path)
    insert_leads([
        LeadRecord("Sanayi", date(2025, 1, day)) for day in range(1, 32)
    ], db_path)
    return db_path


class TestDataCommands:
    """Test init and data entry commands."""

    def test_init_creates_schema(self, temp_dir):
        path = os.path.join(temp_dir, "new.db")
        result = runner.invoke(app, ["init", "--db", path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Database initialized successfully" in result.output
        assert ReportRepository(path).get_expenses() == []

    def test_add_expense(self, db_path):
        result = runner.invoke(app, [
            "add-expense", "Sanayi", "2025-01", "agency_fee", "30000,50", "--db", db_path
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "30,000.50" in result.output
        stored = ReportRepository(db_path).get_expenses()
        assert stored[0].kind == ExpenseKind.FIXED
        assert stored[0].amount_minor_units == 3000050

    @pytest.mark.parametrize("text, minor_units", [
        ("1,234.56", 123456),
        ("1.234,56", 123456),
        ("1 234 567", 123456700),
        ("1.234.567", 123456700),
        ("12.5", 1250),
    ])
    def test_add_expense_thousands_separators(self, db_path, text, minor_units):
        result = runner.invoke(app, [
            "add-expense", "Sanayi", "2025-01", "variable", text, "--db", db_path
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert ReportRepository(db_path).get_expenses()[0].amount_minor_units == minor_units

    def test_add_expense_invalid_month(self, db_path):
        result = runner.invoke(app, [
            "add-expense", "Sanayi", "Ocak", "fixed", "100", "--db", db_path
        ])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Invalid month format" in result.output
        assert ReportRepository(db_path).get_expenses() == []

    def test_add_expense_negative_amount(self, db_path):
        result = runner.invoke(app, [
            "add-expense", "--db", db_path, "--", "Sanayi", "2025-01", "fixed", "-5"
        ])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "cannot be negative" in result.output

    def test_add_expense_invalid_amount(self, db_path):
        result = runner.invoke(app, [
            "add-expense", "Sanayi", "2025-01", "fixed", "lots", "--db", db_path
        ])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Invalid amount" in result.output

    def test_add_lead_detects_sale_from_status(self, db_path):
        result = runner.invoke(app, [
            "add-lead", "Sanayi", "2025-01-05", "--status", "Satış yapıldı", "--db", db_path
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Recorded sale" in result.output
        assert ReportRepository(db_path).get_leads()[0].is_sale is True

    def test_add_lead_without_sale(self, db_path):
        result = runner.invoke(app, [
            "add-lead", "Sanayi", "2025-01-05", "--status", "Takipte", "--db", db_path
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Recorded lead" in result.output
        assert ReportRepository(db_path).get_leads()[0].is_sale is False

    def test_add_lead_invalid_date(self, db_path):
        result = runner.invoke(app, ["add-lead", "Sanayi", "05.01.2025", "--db", db_path])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_seed_demo(self, temp_dir):
        path = os.path.join(temp_dir, "demo.db")
        result = runner.invoke(app, ["seed-demo", "--db", path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Inserted 12 expenses" in result.output


class TestReportCommand:
    """Test the report command."""

    def test_report_first_half_of_january(self, january_db):
        result = runner.invoke(app, [
            "report", "--project", "Sanayi",
            "--start", "2025-01-01", "--end", "2025-01-15",
            "--db", january_db
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Lead Cost Report" in result.output
        assert "483.87 TL" in result.output
        assert "150.00 TL" in result.output
        assert "Leads: 15" in result.output
        assert "Cost/sale: N/A" in result.output
        assert "Conversion rate: 0.00%" in result.output

    def test_report_with_sale_override(self, january_db):
        result = runner.invoke(app, [
            "report", "--month", "2025-01", "--sales", "2", "--db", january_db
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Cost/sale: 655.00 TL" in result.output
        assert "1,310.00 TL" in result.output

    def test_report_detail(self, january_db):
        result = runner.invoke(app, [
            "report", "--start", "2025-01-01", "--end", "2025-01-15",
            "--detail", "--db", january_db
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Allocation by month" in result.output
        assert "15/31" in result.output

    def test_report_uses_config(self, january_db, temp_dir):
        config_path = os.path.join(temp_dir, "report.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump({"report": {"currency": "USD", "decimal_places": 1}}, f)

        result = runner.invoke(app, [
            "report", "--year", "2025", "--config", config_path, "--db", january_db
        ])

        assert result.exit_code == EXIT_CODE_PASS
        assert "1,310.0 USD" in result.output

    def test_report_conflicting_windows(self, january_db):
        result = runner.invoke(app, [
            "report", "--month", "2025-01", "--year", "2025", "--db", january_db
        ])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Use only one of" in result.output

    def test_report_start_without_end(self, january_db):
        result = runner.invoke(app, ["report", "--start", "2025-01-01", "--db", january_db])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "must be given together" in result.output

    def test_report_without_data(self, db_path):
        result = runner.invoke(app, ["report", "--db", db_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "No expense or lead data found" in result.output

    def test_report_without_schema(self, temp_dir):
        result = runner.invoke(app, ["report", "--db", os.path.join(temp_dir, "missing.db")])

        assert result.exit_code == EXIT_CODE_PASS
        assert "No expense or lead data found" in result.output

    @pytest.mark.parametrize("args, expected", [
        ([], AllTimeWindow()),
        (["--month", "2025-02"], MonthWindow(year=2025, month=2)),
        (["--year", "2024"], YearWindow(year=2024)),
        (["--start", "2025-01-03", "--end", "2025-02-01"],
         ExplicitWindow(start=date(2025, 1, 3), end=date(2025, 2, 1))),
    ])
    def test_window_options(self, january_db, args, expected):
        """Test each window option reaches the engine as the right window."""
        with patch('lead_cost_report.cli.main.compute_expense_report') as mock_report:
            mock_report.side_effect = RuntimeError("stop")
            result = runner.invoke(app, ["report", "--db", january_db] + args)

        assert result.exit_code == EXIT_CODE_FAIL
        _, kwargs = mock_report.call_args
        assert kwargs["window"] == expected
        assert kwargs["project"] == "all"
        assert kwargs["sale_count"] is None


class TestFormatting:
    """Test figure formatting helpers."""

    @pytest.mark.parametrize("value", [NOT_COMPUTABLE, Decimal("NaN"), Decimal("Infinity")])
    def test_uncomputable_values_render_as_na(self, value):
        display = DisplayConfig()
        assert _format_currency(value, display) == "N/A"
        assert _format_percent(value, display) == "N/A"

    def test_currency_uses_thousands_separators(self):
        assert _format_currency(Decimal("1234567.125"), DisplayConfig()) == "1,234,567.13 TL"
