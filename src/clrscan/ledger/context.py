"""Ledger context — the collaborators every query runs against.

Constructed once per process and passed explicitly into each operation.
Holds no query state, so concurrent operations can share it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from clrscan.config import (
    DEFAULT_BLOCK_TIME_SECONDS,
    DEFAULT_CURATE_URL,
    DEFAULT_IPFS_GATEWAY_URL,
    ClrConfig,
)
from clrscan.ipfs import DocumentStore, IpfsDocumentStore
from clrscan.ledger.client import LedgerClient, Web3LedgerClient
from clrscan.ledger.scanner import EventScanner


@dataclass(frozen=True)
class LedgerContext:
    client: LedgerClient
    documents: DocumentStore
    factory_address: str
    extra_rounds: Tuple[str, ...] = field(default_factory=tuple)
    block_time_seconds: int = DEFAULT_BLOCK_TIME_SECONDS
    ipfs_gateway_url: str = DEFAULT_IPFS_GATEWAY_URL
    curate_url: str = DEFAULT_CURATE_URL
    scan_chunk_size: Optional[int] = None

    @property
    def scanner(self) -> EventScanner:
        return EventScanner(self.client, chunk_size=self.scan_chunk_size)

    @classmethod
    def from_config(cls, config: ClrConfig) -> "LedgerContext":
        return cls(
            client=Web3LedgerClient(
                config.rpc_url, request_timeout=config.rpc_timeout_seconds
            ),
            documents=IpfsDocumentStore(config.ipfs_gateway_url, config.ipfs_api_url),
            factory_address=config.factory_address,
            extra_rounds=config.extra_rounds,
            block_time_seconds=config.block_time_seconds,
            ipfs_gateway_url=config.ipfs_gateway_url,
            curate_url=config.curate_url,
        )
