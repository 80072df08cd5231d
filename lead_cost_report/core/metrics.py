"""
Cost metrics derived from allocated costs.

Ratios with a zero denominator are explicit branches, never exceptions:
cost per lead and conversion rate fall back to 0, cost per sale becomes
NOT_COMPUTABLE so consumers can tell "no sales" apart from "free sales".
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Union

from .allocation import CostBreakdown

ZERO = Decimal(0)
HUNDRED = Decimal(100)


class Sentinel(Enum):
    """Marker for ratios that cannot be computed."""
    NOT_COMPUTABLE = "not_computable"

    def __repr__(self) -> str:
        return "NOT_COMPUTABLE"


NOT_COMPUTABLE = Sentinel.NOT_COMPUTABLE

Ratio = Union[Decimal, Sentinel]


def is_computable(value: Ratio) -> bool:
    """False for NOT_COMPUTABLE and for non-finite Decimals (NaN, Infinity)."""
    if value is NOT_COMPUTABLE:
        return False
    return Decimal(value).is_finite()


@dataclass(frozen=True)
class Metrics:
    """Cost and conversion metrics for a reporting window."""
    total_cost: Decimal
    lead_count: int
    sale_count: int
    cost_per_lead: Decimal
    cost_per_sale: Ratio
    conversion_rate_percent: Decimal

    def __post_init__(self):
        """Validate counts."""
        if self.lead_count < 0:
            raise ValueError("lead_count cannot be negative")
        if self.sale_count < 0:
            raise ValueError("sale_count cannot be negative")


def compute_metrics(breakdown: CostBreakdown, lead_count: int, sale_count: int) -> Metrics:
    """Combine allocated costs with lead and sale counts.

    Args:
        breakdown: Allocated costs for the window
        lead_count: Leads inside the window
        sale_count: Sales inside the window

    Returns:
        Metrics; cost_per_sale is NOT_COMPUTABLE when there are no sales
    """
    total_cost = breakdown.total_cost

    if lead_count > 0:
        cost_per_lead = total_cost / lead_count
        conversion_rate = Decimal(sale_count) / lead_count * HUNDRED
    else:
        cost_per_lead = ZERO
        conversion_rate = ZERO

    if sale_count > 0:
        cost_per_sale: Ratio = total_cost / sale_count
    else:
        cost_per_sale = NOT_COMPUTABLE

    return Metrics(
        total_cost=total_cost,
        lead_count=lead_count,
        sale_count=sale_count,
        cost_per_lead=cost_per_lead,
        cost_per_sale=cost_per_sale,
        conversion_rate_percent=conversion_rate,
    )


def round_amount(value: Ratio, places: int = 2) -> Ratio:
    """Round for display using ROUND_HALF_UP; values that are not computable pass through."""
    if not is_computable(value):
        return value
    return Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
