"""Round lifecycle reconstructor — status and headline totals of a funding round.

The round record is rebuilt from scratch on every call:

1. Round number: position of the round in the factory's RoundStarted
   history, offset by the rounds created outside the factory.
2. Round configuration and flags, then (once the voting contract address
   is known) its timing and tree depths together with the native token's
   symbol and decimals. Reads within each group run concurrently.
3. Status and accounting, by precedence:
   - Cancelled: contributions = 0, matching pool = 0.
   - Finalized: contributions = totalSpent * voiceCreditFactor,
     matching pool = recorded matchingPoolSize.
   - Otherwise Contributing / Reallocating / Tallying by deadline, with
     contributions = live contribution total and matching pool = tokens
     held by the factory + funding still approved by active sources.
4. total_funds = matching_pool + contributions.

Reads are not transactionally consistent with the event scans; a round
can change status between two calls.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from clrscan.errors import RoundNotFound
from clrscan.ledger.client import same_address
from clrscan.ledger.context import LedgerContext
from clrscan.models.amounts import TokenAmount
from clrscan.models.events import RoundStarted
from clrscan.models.round import (
    CoordinatorPubKey,
    RoundRecord,
    RoundStatus,
    derive_round_status,
)
from clrscan.rounds.contributions import get_total_contributed
from clrscan.rounds.funding_sources import get_approved_funding


logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


async def get_current_round(ctx: LedgerContext) -> Optional[str]:
    """Return the factory's current round, or None if no round was deployed."""
    round_address = await ctx.client.call(
        ctx.factory_address, "FundingRoundFactory", "getCurrentRound"
    )
    if same_address(round_address, ZERO_ADDRESS):
        return None
    return round_address


async def get_round_number(ctx: LedgerContext, round_address: str) -> int:
    """Return the ordinal of the round.

    Raises:
        RoundNotFound: If the factory never started this round.
    """
    events = await ctx.scanner.scan(
        ctx.factory_address, "FundingRoundFactory", RoundStarted
    )
    for position, event in enumerate(events):
        if same_address(event.round_address, round_address):
            return position + len(ctx.extra_rounds)
    raise RoundNotFound(round_address)


def estimate_end_block(
    start_block: int,
    sign_up_duration: int,
    voting_duration: int,
    block_time_seconds: int,
) -> int:
    """Approximate last block of the round from the average block time."""
    return start_block + (sign_up_duration + voting_duration) // block_time_seconds


def _utc(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


async def get_round_info(
    ctx: LedgerContext,
    round_address: str,
    now: Optional[datetime] = None,
) -> RoundRecord:
    """Reconstruct the round's current record.

    Args:
        ctx: Ledger context.
        round_address: FundingRound contract address.
        now: Evaluation instant (defaults to UTC now).

    Raises:
        RoundNotFound: If the address is not a round of this factory.
        LedgerUnavailable: On transport failure of any read.
    """
    round_number = await get_round_number(ctx, round_address)
    client = ctx.client

    (
        maci_address,
        native_token_address,
        user_registry_address,
        start_block,
        voice_credit_factor,
        is_finalized,
        is_cancelled,
    ) = await asyncio.gather(
        client.call(round_address, "FundingRound", "maci"),
        client.call(round_address, "FundingRound", "nativeToken"),
        client.call(round_address, "FundingRound", "userRegistry"),
        client.call(round_address, "FundingRound", "startBlock"),
        client.call(round_address, "FundingRound", "voiceCreditFactor"),
        client.call(round_address, "FundingRound", "isFinalized"),
        client.call(round_address, "FundingRound", "isCancelled"),
    )

    (
        tree_depths,
        sign_up_timestamp,
        sign_up_duration,
        voting_duration,
        coordinator_pub_key,
        token_symbol,
        token_decimals,
    ) = await asyncio.gather(
        client.call(maci_address, "MACI", "treeDepths"),
        client.call(maci_address, "MACI", "signUpTimestamp"),
        client.call(maci_address, "MACI", "signUpDurationSeconds"),
        client.call(maci_address, "MACI", "votingDurationSeconds"),
        client.call(maci_address, "MACI", "coordinatorPubKey"),
        client.call(native_token_address, "ERC20", "symbol"),
        client.call(native_token_address, "ERC20", "decimals"),
    )

    sign_up_deadline = _utc(sign_up_timestamp + sign_up_duration)
    voting_deadline = _utc(sign_up_timestamp + sign_up_duration + voting_duration)
    end_block = estimate_end_block(
        start_block, sign_up_duration, voting_duration, ctx.block_time_seconds
    )

    if now is None:
        now = datetime.now(timezone.utc)
    status = derive_round_status(
        now, sign_up_deadline, voting_deadline, is_finalized, is_cancelled
    )

    contribution_totals = await get_total_contributed(ctx, round_address)
    if status == RoundStatus.CANCELLED:
        contributions = 0
        matching_pool = 0
    elif status == RoundStatus.FINALIZED:
        total_spent, matching_pool = await asyncio.gather(
            client.call(round_address, "FundingRound", "totalSpent"),
            client.call(round_address, "FundingRound", "matchingPoolSize"),
        )
        contributions = total_spent * voice_credit_factor
    else:
        contributions = contribution_totals.amount
        locked_funding, approved_funding = await asyncio.gather(
            client.call(native_token_address, "ERC20", "balanceOf", ctx.factory_address),
            get_approved_funding(ctx, native_token_address),
        )
        matching_pool = locked_funding + approved_funding

    contributions_amount = TokenAmount(raw=contributions, decimals=token_decimals)
    matching_pool_amount = TokenAmount(raw=matching_pool, decimals=token_decimals)

    logger.info(
        "Round %s (#%d) is %s", round_address, round_number, status.value
    )
    return RoundRecord(
        address=round_address,
        round_number=round_number,
        user_registry_address=user_registry_address,
        maci_address=maci_address,
        recipient_tree_depth=tree_depths[2],
        start_block=start_block,
        end_block=end_block,
        coordinator_pub_key=CoordinatorPubKey(*coordinator_pub_key),
        native_token_address=native_token_address,
        native_token_symbol=token_symbol,
        native_token_decimals=token_decimals,
        voice_credit_factor=voice_credit_factor,
        status=status,
        sign_up_deadline=sign_up_deadline,
        voting_deadline=voting_deadline,
        is_finalized=is_finalized,
        is_cancelled=is_cancelled,
        contributions=contributions_amount,
        matching_pool=matching_pool_amount,
        total_funds=matching_pool_amount + contributions_amount,
        contributors=contribution_totals.count,
    )
