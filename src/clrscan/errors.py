"""Error kinds raised by the reconciliation engines.

Structural errors (missing round, missing schema) abort the whole
operation. Per-item decode errors are caught where they occur and
downgraded; they never fail a batch.
"""

from __future__ import annotations


class ClrScanError(Exception):
    """Base class for every error raised by clrscan."""


class ConfigError(ClrScanError):
    """Raised when required configuration is missing or invalid."""


class RoundNotFound(ClrScanError):
    """The address was never started by the canonical factory."""

    def __init__(self, round_address: str) -> None:
        super().__init__(f"Round does not exist: {round_address}")
        self.round_address = round_address


class SchemaUnavailable(ClrScanError):
    """The curated-list column schema event or document is missing."""


class LedgerUnavailable(ClrScanError):
    """Transport failure or timeout on a ledger read.

    Callers should retry with backoff; nothing in clrscan retries.
    """


class DocumentUnavailable(ClrScanError):
    """An off-ledger document could not be fetched or published."""


class EventDecodeError(ClrScanError):
    """A ledger event payload is missing a field or has the wrong shape."""


class MetadataDecodeFailure(ClrScanError):
    """A curated-list item field could not be decoded."""


class TallyEngineFailure(ClrScanError):
    """The external tally engine returned no result."""
