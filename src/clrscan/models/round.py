"""Funding round models — lifecycle status and the reconstructed round record.

Status lifecycle (read-derived, never triggered from here):
    Contributing → Reallocating → Tallying → Finalized
    Any non-terminal status → Cancelled

Finalized and Cancelled are terminal and override the time-based statuses.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, NamedTuple

from clrscan.models.amounts import TokenAmount


class RoundStatus(str, enum.Enum):
    CONTRIBUTING = "Contributing"
    REALLOCATING = "Reallocating"
    TALLYING = "Tallying"
    FINALIZED = "Finalized"
    CANCELLED = "Cancelled"


def derive_round_status(
    now: datetime,
    sign_up_deadline: datetime,
    voting_deadline: datetime,
    is_finalized: bool,
    is_cancelled: bool,
) -> RoundStatus:
    """Return the single status that holds at ``now``.

    Precedence: cancel flag, finalize flag, then the two deadlines.
    """
    if is_cancelled:
        return RoundStatus.CANCELLED
    if is_finalized:
        return RoundStatus.FINALIZED
    if now < sign_up_deadline:
        return RoundStatus.CONTRIBUTING
    if now < voting_deadline:
        return RoundStatus.REALLOCATING
    return RoundStatus.TALLYING


class CoordinatorPubKey(NamedTuple):
    x: int
    y: int


@dataclass(frozen=True)
class RoundRecord:
    """Snapshot of a funding round at query time.

    ``end_block`` is estimated from the average block time. It is a display
    hint and must not be used for eligibility decisions.
    """
    address: str
    round_number: int
    user_registry_address: str
    maci_address: str
    recipient_tree_depth: int
    start_block: int
    end_block: int
    coordinator_pub_key: CoordinatorPubKey
    native_token_address: str
    native_token_symbol: str
    native_token_decimals: int
    voice_credit_factor: int
    status: RoundStatus
    sign_up_deadline: datetime
    voting_deadline: datetime
    is_finalized: bool
    is_cancelled: bool
    contributions: TokenAmount
    matching_pool: TokenAmount
    total_funds: TokenAmount
    contributors: int

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe view for the CLI."""
        return {
            "address": self.address,
            "round_number": self.round_number,
            "user_registry_address": self.user_registry_address,
            "maci_address": self.maci_address,
            "recipient_tree_depth": self.recipient_tree_depth,
            "start_block": self.start_block,
            "end_block": self.end_block,
            "coordinator_pub_key": [
                str(self.coordinator_pub_key.x),
                str(self.coordinator_pub_key.y),
            ],
            "native_token_address": self.native_token_address,
            "native_token_symbol": self.native_token_symbol,
            "native_token_decimals": self.native_token_decimals,
            "voice_credit_factor": str(self.voice_credit_factor),
            "status": self.status.value,
            "sign_up_deadline": self.sign_up_deadline.isoformat(),
            "voting_deadline": self.voting_deadline.isoformat(),
            "is_finalized": self.is_finalized,
            "is_cancelled": self.is_cancelled,
            "contributions": str(self.contributions),
            "matching_pool": str(self.matching_pool),
            "total_funds": str(self.total_funds),
            "contributors": self.contributors,
        }
