"""
Sale qualification for lead records.

Upstream lead sheets mark a sale either through the lead's status text
("Satış yapıldı", "satis") or a yes/no "sale made" column.
"""

import unicodedata
from typing import Iterable, Optional

from lead_cost_report.config.loader import SaleRuleConfig
from lead_cost_report.storage.models import LeadRecord


def _fold(text: str) -> str:
    """Casefold and strip combining accents (ş -> s)."""
    decomposed = unicodedata.normalize("NFD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).strip()


def qualifies_as_sale(
    status: Optional[str],
    sale_made: Optional[str] = None,
    rule: Optional[SaleRuleConfig] = None,
) -> bool:
    """Decide whether a lead counts as a sale.

    Args:
        status: Free-text lead status
        sale_made: Free-text "was a sale made" answer
        rule: Status fragments and affirmative answers (defaults if omitted)

    Returns:
        True if the status contains a sale fragment or sale_made is affirmative
    """
    rule = rule or SaleRuleConfig()

    if status:
        folded_status = _fold(status)
        if any(_fold(fragment) in folded_status for fragment in rule.statuses):
            return True

    if sale_made:
        folded_answer = _fold(sale_made)
        if any(folded_answer == _fold(answer) for answer in rule.affirmative):
            return True

    return False


def count_sales(leads: Iterable[LeadRecord]) -> int:
    return sum(1 for lead in leads if lead.is_sale)
