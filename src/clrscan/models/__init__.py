"""Data models for clrscan."""

from clrscan.models.amounts import TokenAmount
from clrscan.models.events import (
    Contribution,
    FundingSourceAdded,
    FundingSourceRemoved,
    ItemSubmitted,
    LedgerEvent,
    MetaEvidence,
    RawLog,
    RecipientAdded,
    RecipientRemoved,
    RoundStarted,
)
from clrscan.models.project import ProjectExtra, ProjectRecord, TcrColumn, TcrItemStatus
from clrscan.models.round import (
    CoordinatorPubKey,
    RoundRecord,
    RoundStatus,
    derive_round_status,
)

__all__ = [
    "TokenAmount",
    "Contribution",
    "FundingSourceAdded",
    "FundingSourceRemoved",
    "ItemSubmitted",
    "LedgerEvent",
    "MetaEvidence",
    "RawLog",
    "RecipientAdded",
    "RecipientRemoved",
    "RoundStarted",
    "ProjectExtra",
    "ProjectRecord",
    "TcrColumn",
    "TcrItemStatus",
    "CoordinatorPubKey",
    "RoundRecord",
    "RoundStatus",
    "derive_round_status",
]
