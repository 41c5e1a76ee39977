"""Live contribution totals of a funding round, summed from its Contribution events."""

from __future__ import annotations

from dataclasses import dataclass

from clrscan.ledger.context import LedgerContext
from clrscan.models.events import Contribution


@dataclass(frozen=True)
class ContributionTotals:
    amount: int
    count: int


async def get_total_contributed(ctx: LedgerContext, round_address: str) -> ContributionTotals:
    """Sum every contribution made to the round so far.

    ``count`` is the number of contributions; contributors can contribute
    once per round.
    """
    events = await ctx.scanner.scan(round_address, "FundingRound", Contribution)
    return ContributionTotals(
        amount=sum(event.amount for event in events),
        count=len(events),
    )
