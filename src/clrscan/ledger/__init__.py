"""Ledger access — client, event scanner, and the injected query context."""

from clrscan.ledger.client import LedgerClient, Web3LedgerClient, same_address
from clrscan.ledger.context import LedgerContext
from clrscan.ledger.scanner import EventScanner, ScanCursor

__all__ = [
    "LedgerClient",
    "Web3LedgerClient",
    "same_address",
    "LedgerContext",
    "EventScanner",
    "ScanCursor",
]
