"""Funding source ledger — matching funds approved but not yet pulled in.

A funding source is active when it has a FundingSourceAdded event and no
FundingSourceRemoved event for the same address. An active source can
contribute at most min(allowance to the factory, balance).

Known limitation: removal matching is by address only, first match. A
source that was added, removed and added again stays excluded, and a
source added twice without a removal is counted twice. Block order of
repeated additions is not considered.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from clrscan.ledger.client import same_address
from clrscan.ledger.context import LedgerContext
from clrscan.models.events import FundingSourceAdded, FundingSourceRemoved


logger = logging.getLogger(__name__)


def active_funding_sources(
    added: List[FundingSourceAdded],
    removed: List[FundingSourceRemoved],
) -> List[str]:
    """Replay add/remove events and return the sources still counted.

    One entry per add event without a matching removal.
    """
    active: List[str] = []
    for event in added:
        removal: Optional[FundingSourceRemoved] = next(
            (r for r in removed if same_address(r.source, event.source)),
            None,
        )
        if removal is not None:
            logger.debug(
                "Skipping funding source %s: removed at block %d",
                event.source, removal.block_number,
            )
            continue
        active.append(event.source)
    return active


async def get_source_contribution(
    ctx: LedgerContext, token_address: str, source: str
) -> int:
    """What one source can still contribute: min(allowance, balance)."""
    allowance, balance = await asyncio.gather(
        ctx.client.call(token_address, "ERC20", "allowance", source, ctx.factory_address),
        ctx.client.call(token_address, "ERC20", "balanceOf", source),
    )
    return min(allowance, balance)


async def get_approved_funding(ctx: LedgerContext, token_address: str) -> int:
    """Total raw amount active funding sources have approved and hold."""
    scanner = ctx.scanner
    added, removed = await asyncio.gather(
        scanner.scan(ctx.factory_address, "FundingRoundFactory", FundingSourceAdded),
        scanner.scan(ctx.factory_address, "FundingRoundFactory", FundingSourceRemoved),
    )
    sources = active_funding_sources(added, removed)
    contributions = await asyncio.gather(
        *(get_source_contribution(ctx, token_address, source) for source in sources)
    )
    total = sum(contributions)
    logger.info(
        "Approved funding: %d from %d active sources (%d added, %d removed)",
        total, len(sources), len(added), len(removed),
    )
    return total
