"""Ledger client — read-only access to contract state and historical logs.

The reconciliation engines only talk to the abstract LedgerClient.
Web3LedgerClient is the production implementation on top of web3's
async provider; tests substitute an in-memory client.

Requests are not retried (web3's built-in retry is switched off) and give
up after the configured timeout. Transport failures surface as
LedgerUnavailable and the caller decides whether to back off.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import aiohttp
from web3 import AsyncWeb3
from web3.exceptions import ProviderConnectionError, TimeExhausted
from web3.providers import AsyncHTTPProvider

from clrscan.errors import LedgerUnavailable
from clrscan.ledger.abi import get_abi
from clrscan.models.events import RawLog


logger = logging.getLogger(__name__)

BlockId = Union[int, str]

_TRANSPORT_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ConnectionError,
    ProviderConnectionError,
    TimeExhausted,
)


def same_address(a: str, b: str) -> bool:
    """Ledger addresses compare case-insensitively."""
    return a.lower() == b.lower()


class LedgerClient(abc.ABC):
    """Point-in-time reads and historical log scans."""

    @abc.abstractmethod
    async def call(self, address: str, abi_name: str, function: str, *args: Any) -> Any:
        """Call a view function at the latest block."""

    @abc.abstractmethod
    async def get_logs(
        self,
        address: str,
        abi_name: str,
        event: str,
        argument_filters: Optional[Mapping[str, Any]] = None,
        from_block: BlockId = 0,
        to_block: BlockId = "latest",
    ) -> List[RawLog]:
        """Return raw logs of one event kind within [from_block, to_block]."""

    @abc.abstractmethod
    async def block_number(self) -> int:
        """Return the current ledger height."""


class Web3LedgerClient(LedgerClient):
    """LedgerClient backed by web3.AsyncWeb3 over HTTP JSON-RPC.

    Usage:
        client = Web3LedgerClient("https://rpc.gnosischain.com")
        maci = await client.call(round_address, "FundingRound", "maci")
    """

    def __init__(self, rpc_url: str, request_timeout: Optional[float] = None) -> None:
        self.rpc_url = rpc_url
        self.request_timeout = request_timeout
        request_kwargs: Dict[str, Any] = {}
        if request_timeout is not None:
            request_kwargs["timeout"] = aiohttp.ClientTimeout(total=request_timeout)
        provider = AsyncHTTPProvider(
            rpc_url,
            request_kwargs=request_kwargs,
            exception_retry_configuration=None,
        )
        self._w3 = AsyncWeb3(provider)

    def _contract(self, address: str, abi_name: str) -> Any:
        return self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=get_abi(abi_name),
        )

    async def call(self, address: str, abi_name: str, function: str, *args: Any) -> Any:
        contract = self._contract(address, abi_name)
        try:
            return await getattr(contract.functions, function)(*args).call()
        except _TRANSPORT_ERRORS as exc:
            raise LedgerUnavailable(
                f"{abi_name}.{function} at {address} failed: {exc}"
            ) from exc

    async def get_logs(
        self,
        address: str,
        abi_name: str,
        event: str,
        argument_filters: Optional[Mapping[str, Any]] = None,
        from_block: BlockId = 0,
        to_block: BlockId = "latest",
    ) -> List[RawLog]:
        contract = self._contract(address, abi_name)
        event_type = getattr(contract.events, event)
        try:
            entries = await event_type().get_logs(
                argument_filters=dict(argument_filters) if argument_filters else None,
                from_block=from_block,
                to_block=to_block,
            )
        except _TRANSPORT_ERRORS as exc:
            raise LedgerUnavailable(
                f"{abi_name}.{event} logs at {address} failed: {exc}"
            ) from exc
        logger.debug(
            "Fetched %d %s logs from %s [%s, %s]",
            len(entries), event, address, from_block, to_block,
        )
        return [
            RawLog(
                event=entry["event"],
                block_number=entry["blockNumber"],
                log_index=entry["logIndex"],
                args=dict(entry["args"]),
            )
            for entry in entries
        ]

    async def block_number(self) -> int:
        try:
            return await self._w3.eth.block_number
        except _TRANSPORT_ERRORS as exc:
            raise LedgerUnavailable(f"block number read failed: {exc}") from exc
