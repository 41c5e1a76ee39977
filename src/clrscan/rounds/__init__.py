"""Round reconciliation — lifecycle status and matching-pool accounting."""

from clrscan.rounds.contributions import ContributionTotals, get_total_contributed
from clrscan.rounds.funding_sources import active_funding_sources, get_approved_funding
from clrscan.rounds.lifecycle import (
    get_current_round,
    get_round_info,
    get_round_number,
)

__all__ = [
    "ContributionTotals",
    "get_total_contributed",
    "active_funding_sources",
    "get_approved_funding",
    "get_current_round",
    "get_round_info",
    "get_round_number",
]
