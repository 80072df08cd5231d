"""
Calendar periods and query windows.

Resolves reporting windows to concrete date ranges and measures
how many days of a calendar month fall inside them.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union


_YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def is_calendar_date(value) -> bool:
    """True for a plain date; datetime subclasses date but does not compare with it."""
    return isinstance(value, date) and not isinstance(value, datetime)


@dataclass(frozen=True, order=True)
class YearMonth:
    """A calendar month, e.g. 2025-01."""
    year: int
    month: int

    def __post_init__(self):
        """Validate month is a real calendar month."""
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be between 1 and 12, got {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"year must be between 1 and 9999, got {self.year}")

    @classmethod
    def parse(cls, text: str) -> "YearMonth":
        """Parse a YYYY-MM string.

        Raises:
            ValueError: If text is not in YYYY-MM format
        """
        match = _YEAR_MONTH_PATTERN.match(text.strip()) if text else None
        if not match:
            raise ValueError(f"Invalid month format (should be YYYY-MM): {text}")
        return cls(year=int(match.group(1)), month=int(match.group(2)))

    @classmethod
    def of(cls, day: date) -> "YearMonth":
        """Month containing the given day."""
        return cls(year=day.year, month=day.month)

    def span(self) -> "MonthSpan":
        """First and last day of this month."""
        days = calendar.monthrange(self.year, self.month)[1]
        return MonthSpan(
            month_start=date(self.year, self.month, 1),
            month_end=date(self.year, self.month, days),
        )

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class MonthSpan:
    """Inclusive day range covering exactly one calendar month."""
    month_start: date
    month_end: date

    def __post_init__(self):
        """Validate span stays inside one calendar month."""
        if (self.month_start.year, self.month_start.month) != (self.month_end.year, self.month_end.month):
            raise ValueError("month_start and month_end must be in the same calendar month")
        if self.month_start > self.month_end:
            raise ValueError("month_start must not be after month_end")

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.month_start.year, self.month_start.month)[1]


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] date range.

    A range whose start is after its end is empty rather than invalid,
    so degenerate windows simply contain no days.
    """
    start: date
    end: date

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class ExplicitWindow:
    """User-selected start and end dates (both inclusive)."""
    start: date
    end: date

    def __post_init__(self):
        """Validate both bounds are calendar dates."""
        if not is_calendar_date(self.start):
            raise ValueError("start must be a calendar date, not a datetime")
        if not is_calendar_date(self.end):
            raise ValueError("end must be a calendar date, not a datetime")


@dataclass(frozen=True)
class MonthWindow:
    """A single calendar month."""
    year: int
    month: int


@dataclass(frozen=True)
class YearWindow:
    """A whole calendar year."""
    year: int


@dataclass(frozen=True)
class AllTimeWindow:
    """No date restriction."""


QueryWindow = Union[ExplicitWindow, MonthWindow, YearWindow, AllTimeWindow]

ALL_TIME = DateRange(start=date.min, end=date.max)


def resolve_window(window: Optional[QueryWindow]) -> DateRange:
    """Resolve a query window to a concrete inclusive date range.

    Args:
        window: Window description; None means all time

    Returns:
        DateRange for the window (empty if an explicit start is after its end)

    Raises:
        TypeError: If window is not a known window type
        ValueError: If a month or year window names an invalid calendar period
    """
    if window is None or isinstance(window, AllTimeWindow):
        return ALL_TIME
    if isinstance(window, ExplicitWindow):
        return DateRange(start=window.start, end=window.end)
    if isinstance(window, MonthWindow):
        span = YearMonth(year=window.year, month=window.month).span()
        return DateRange(start=span.month_start, end=span.month_end)
    if isinstance(window, YearWindow):
        return DateRange(start=date(window.year, 1, 1), end=date(window.year, 12, 31))
    raise TypeError(f"Unsupported query window: {window!r}")


def overlap_days(month_span: MonthSpan, window: DateRange) -> int:
    """Count the days a month shares with a window.

    Both ranges are inclusive. Disjoint or empty ranges give 0.

    Args:
        month_span: Calendar month
        window: Resolved query window

    Returns:
        Number of shared days (never negative)
    """
    overlap_start = max(month_span.month_start, window.start)
    overlap_end = min(month_span.month_end, window.end)

    if overlap_start > overlap_end:
        return 0

    return (overlap_end - overlap_start).days + 1
