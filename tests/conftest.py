"""Shared fixtures: an in-memory ledger and document store."""

from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest

from clrscan.errors import DocumentUnavailable
from clrscan.ipfs import DocumentStore
from clrscan.ledger.client import BlockId, LedgerClient
from clrscan.ledger.context import LedgerContext
from clrscan.models.events import RawLog


FACTORY = "0xFaC7000000000000000000000000000000000001"
GATEWAY = "https://ipfs.test"
CURATE_URL = "https://curate.test/tcr/0xList"


def _norm(value: Any) -> Any:
    if isinstance(value, str):
        return value.lower()
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value


class FakeLedgerClient(LedgerClient):
    """LedgerClient over dictionaries.

    Reads not set up with set() raise KeyError, so tests fail loudly on
    unexpected calls. A value that is an exception instance is raised.
    """

    def __init__(self, head: int = 10_000) -> None:
        self.head = head
        self._state: Dict[Tuple[str, str, Tuple[Any, ...]], Any] = {}
        self._logs: Dict[Tuple[str, str], List[RawLog]] = {}
        self.calls: List[Tuple[str, str, Tuple[Any, ...]]] = []
        self.log_queries: List[Tuple[str, str, BlockId, BlockId]] = []

    def set(self, address: str, function: str, value: Any, *args: Any) -> None:
        key = (address.lower(), function, tuple(_norm(a) for a in args))
        self._state[key] = value

    def emit(
        self,
        address: str,
        event: str,
        block: int,
        log_index: int = 0,
        **args: Any,
    ) -> None:
        self._logs.setdefault((address.lower(), event), []).append(
            RawLog(event=event, block_number=block, log_index=log_index, args=args)
        )

    async def call(self, address: str, abi_name: str, function: str, *args: Any) -> Any:
        key = (address.lower(), function, tuple(_norm(a) for a in args))
        self.calls.append(key)
        if key not in self._state:
            raise KeyError(f"Unexpected read: {abi_name}.{function}{args} at {address}")
        value = self._state[key]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_logs(
        self,
        address: str,
        abi_name: str,
        event: str,
        argument_filters: Optional[Mapping[str, Any]] = None,
        from_block: BlockId = 0,
        to_block: BlockId = "latest",
    ) -> List[RawLog]:
        self.log_queries.append((address.lower(), event, from_block, to_block))
        upper = self.head if to_block == "latest" else int(to_block)
        matches = []
        for log in self._logs.get((address.lower(), event), []):
            if not int(from_block) <= log.block_number <= upper:
                continue
            if argument_filters and any(
                _norm(log.args.get(name)) != _norm(value)
                for name, value in argument_filters.items()
            ):
                continue
            matches.append(log)
        return matches

    async def block_number(self) -> int:
        return self.head


class FakeDocumentStore(DocumentStore):
    def __init__(self) -> None:
        self.documents: Dict[str, Any] = {}
        self.published: List[Any] = []

    async def fetch_json(self, path: str) -> Any:
        if path not in self.documents:
            raise DocumentUnavailable(f"not found: {path}")
        return self.documents[path]

    async def publish_json(self, document: Any) -> str:
        self.published.append(document)
        return f"QmPublished{len(self.published)}"


@pytest.fixture
def ledger() -> FakeLedgerClient:
    return FakeLedgerClient()


@pytest.fixture
def documents() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture
def ctx(ledger: FakeLedgerClient, documents: FakeDocumentStore) -> LedgerContext:
    return LedgerContext(
        client=ledger,
        documents=documents,
        factory_address=FACTORY,
        ipfs_gateway_url=GATEWAY,
        curate_url=CURATE_URL,
    )
