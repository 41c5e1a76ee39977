"""Typed ledger event records.

Raw logs arrive as schemaless argument bags. Each event kind below is
decoded at the boundary: every declared argument must be present and of
the right shape, otherwise EventDecodeError is raised. Nothing downstream
reads raw argument names.

Ledger order is (block_number, log_index).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, Mapping, Tuple, Type, TypeVar

from clrscan.errors import EventDecodeError


@dataclass(frozen=True)
class RawLog:
    """An undecoded event as returned by a ledger client."""
    event: str
    block_number: int
    log_index: int
    args: Mapping[str, Any] = field(default_factory=dict)


# ------------------------------------------------------------------
# Argument converters
# ------------------------------------------------------------------

def _address(value: Any) -> str:
    if not isinstance(value, str) or not value.startswith("0x") or len(value) != 42:
        raise ValueError(f"expected a 20-byte hex address, got {value!r}")
    int(value, 16)
    return value


def _bytes32_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise ValueError(f"expected 32 bytes, got {len(value)}")
        return "0x" + bytes(value).hex()
    if isinstance(value, str):
        text = value.lower()
        if not text.startswith("0x"):
            text = "0x" + text
        if len(text) != 66:
            raise ValueError(f"expected 32 bytes of hex, got {value!r}")
        int(text, 16)
        return text
    raise ValueError(f"expected bytes32, got {type(value).__name__}")


def _bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        text = value[2:] if value.startswith("0x") else value
        return bytes.fromhex(text)
    raise ValueError(f"expected bytes, got {type(value).__name__}")


def _uint(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    if value < 0:
        raise ValueError(f"expected an unsigned integer, got {value}")
    return value


def _text(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    return value


def normalize_item_id(item_id: Any) -> str:
    """Canonical form of a registry item id: lowercase 0x-prefixed hex."""
    try:
        return _bytes32_hex(item_id)
    except ValueError as exc:
        raise EventDecodeError(f"Invalid item id {item_id!r}: {exc}") from exc


E = TypeVar("E", bound="LedgerEvent")


@dataclass(frozen=True)
class LedgerEvent:
    """Base of all typed events.

    Subclasses declare EVENT_NAME and ARGS, a mapping of
    attribute name -> (raw argument name, converter).
    """
    block_number: int
    log_index: int

    EVENT_NAME: ClassVar[str] = ""
    SCHEMA_VERSION: ClassVar[int] = 1
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {}

    @classmethod
    def from_log(cls: Type[E], log: RawLog) -> E:
        if log.event != cls.EVENT_NAME:
            raise EventDecodeError(
                f"Expected {cls.EVENT_NAME} event, got {log.event}"
            )
        values: Dict[str, Any] = {}
        for attr, (arg_name, convert) in cls.ARGS.items():
            if arg_name not in log.args:
                raise EventDecodeError(
                    f"{cls.EVENT_NAME} v{cls.SCHEMA_VERSION} at block {log.block_number} "
                    f"is missing argument {arg_name}"
                )
            try:
                values[attr] = convert(log.args[arg_name])
            except (ValueError, TypeError) as exc:
                raise EventDecodeError(
                    f"{cls.EVENT_NAME} v{cls.SCHEMA_VERSION} at block {log.block_number}: "
                    f"bad {arg_name}: {exc}"
                ) from exc
        return cls(block_number=log.block_number, log_index=log.log_index, **values)

    @property
    def ledger_position(self) -> Tuple[int, int]:
        return (self.block_number, self.log_index)


# ------------------------------------------------------------------
# FundingRoundFactory
# ------------------------------------------------------------------

@dataclass(frozen=True)
class RoundStarted(LedgerEvent):
    round_address: str

    EVENT_NAME: ClassVar[str] = "RoundStarted"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "round_address": ("_round", _address),
    }


@dataclass(frozen=True)
class FundingSourceAdded(LedgerEvent):
    source: str

    EVENT_NAME: ClassVar[str] = "FundingSourceAdded"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "source": ("_source", _address),
    }


@dataclass(frozen=True)
class FundingSourceRemoved(LedgerEvent):
    source: str

    EVENT_NAME: ClassVar[str] = "FundingSourceRemoved"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "source": ("_source", _address),
    }


# ------------------------------------------------------------------
# FundingRound
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Contribution(LedgerEvent):
    contributor: str
    amount: int

    EVENT_NAME: ClassVar[str] = "Contribution"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "contributor": ("_sender", _address),
        "amount": ("_amount", _uint),
    }


# ------------------------------------------------------------------
# KlerosGTCRAdapter (local recipient registry)
# ------------------------------------------------------------------

@dataclass(frozen=True)
class RecipientAdded(LedgerEvent):
    item_id: str
    metadata: bytes
    index: int

    EVENT_NAME: ClassVar[str] = "RecipientAdded"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "item_id": ("_tcrItemId", _bytes32_hex),
        "metadata": ("_metadata", _bytes),
        "index": ("_index", _uint),
    }


@dataclass(frozen=True)
class RecipientRemoved(LedgerEvent):
    item_id: str

    EVENT_NAME: ClassVar[str] = "RecipientRemoved"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "item_id": ("_tcrItemId", _bytes32_hex),
    }


# ------------------------------------------------------------------
# KlerosGTCR (curated list)
# ------------------------------------------------------------------

@dataclass(frozen=True)
class ItemSubmitted(LedgerEvent):
    item_id: str

    EVENT_NAME: ClassVar[str] = "ItemSubmitted"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "item_id": ("_itemID", _bytes32_hex),
    }


@dataclass(frozen=True)
class MetaEvidence(LedgerEvent):
    meta_evidence_id: int
    evidence: str

    EVENT_NAME: ClassVar[str] = "MetaEvidence"
    ARGS: ClassVar[Dict[str, Tuple[str, Callable[[Any], Any]]]] = {
        "meta_evidence_id": ("_metaEvidenceID", _uint),
        "evidence": ("_evidence", _text),
    }
