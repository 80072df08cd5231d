"""
Data models for storage layer.

Defines expense and lead records shared by the data layer and the engine.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from lead_cost_report.core.periods import YearMonth, is_calendar_date


class ExpenseKind(Enum):
    """How a monthly expense is spread over the days of its month."""
    FIXED = "fixed"        # Accrues per calendar day (agency retainer)
    VARIABLE = "variable"  # Accrues per generated lead (ad spend)

    @classmethod
    def parse(cls, value: str) -> "ExpenseKind":
        """Parse an expense kind, accepting the legacy agency_fee/ads_expense labels.

        Raises:
            ValueError: If value names no known kind
        """
        normalized = (value or "").strip().lower()
        if normalized in _LEGACY_KIND_LABELS:
            return _LEGACY_KIND_LABELS[normalized]
        try:
            return cls(normalized)
        except ValueError:
            valid = [kind.value for kind in cls] + sorted(_LEGACY_KIND_LABELS)
            raise ValueError(f"Invalid expense type {value!r}, must be one of: {valid}")


_LEGACY_KIND_LABELS = {
    "agency_fee": ExpenseKind.FIXED,
    "ads_expense": ExpenseKind.VARIABLE,
}


@dataclass(frozen=True)
class ExpenseRecord:
    """Immutable monthly marketing expense for one project.

    Amounts are stored in minor currency units (kuruş, cents) so that
    ingested values never pick up binary floating point error.
    """
    project: str
    month: YearMonth
    kind: ExpenseKind
    amount_minor_units: int
    description: Optional[str] = None

    def __post_init__(self):
        """Reject records the engine cannot allocate."""
        if not self.project or not self.project.strip():
            raise ValueError("project is required and cannot be empty")
        if not isinstance(self.month, YearMonth):
            raise ValueError("month must be a YearMonth")
        if not isinstance(self.kind, ExpenseKind):
            raise ValueError("kind must be an ExpenseKind")
        if isinstance(self.amount_minor_units, bool) or not isinstance(self.amount_minor_units, int):
            raise ValueError("amount_minor_units must be an integer")
        if self.amount_minor_units < 0:
            raise ValueError("amount_minor_units cannot be negative")

    @property
    def amount(self) -> Decimal:
        """Amount in major currency units."""
        return Decimal(self.amount_minor_units) / Decimal(100)


@dataclass(frozen=True)
class LeadRecord:
    """Immutable record of a single lead request."""
    project: str
    request_date: date
    is_sale: bool = False

    def __post_init__(self):
        """Validate lead fields."""
        if not self.project or not self.project.strip():
            raise ValueError("project is required and cannot be empty")
        if not is_calendar_date(self.request_date):
            raise ValueError("request_date must be a calendar date, not a datetime")
        if not isinstance(self.is_sale, bool):
            raise ValueError("is_sale must be a boolean")


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to whole minor units.

    Raises:
        ValueError: If amount has more than two decimal places
    """
    minor = Decimal(amount) * 100
    if minor != minor.to_integral_value():
        raise ValueError(f"Amount {amount} has more than two decimal places")
    return int(minor)
