"""Event scanner — typed historical event queries over a block range.

Every query replays from the requested start block (genesis by default);
there is no cache. ScanCursor and scan_since() are the hook for an
incremental scanner that keeps the last scanned height between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar

from clrscan.ledger.client import BlockId, LedgerClient
from clrscan.models.events import LedgerEvent


logger = logging.getLogger(__name__)

E = TypeVar("E", bound=LedgerEvent)


@dataclass(frozen=True)
class ScanCursor:
    """Position of an incremental scan: the last block already covered."""
    last_block: int = -1

    @property
    def next_block(self) -> int:
        return self.last_block + 1


class EventScanner:
    """Decodes raw logs into typed events in ledger order.

    Args:
        client: The ledger client to read from.
        chunk_size: When set, block ranges are fetched in consecutive
            windows of at most this many blocks (some providers cap the
            range of a single log query). Requires a numeric to_block or a
            readable block height.
    """

    def __init__(self, client: LedgerClient, chunk_size: Optional[int] = None) -> None:
        if chunk_size is not None and chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._client = client
        self._chunk_size = chunk_size

    async def scan(
        self,
        address: str,
        abi_name: str,
        event_type: Type[E],
        argument_filters: Optional[Mapping[str, Any]] = None,
        from_block: int = 0,
        to_block: BlockId = "latest",
    ) -> List[E]:
        """Return all matching events, ordered by (block_number, log_index)."""
        if self._chunk_size is None:
            ranges: List[Tuple[int, BlockId]] = [(from_block, to_block)]
        else:
            if to_block == "latest":
                to_block = await self._client.block_number()
            ranges = list(_split_range(from_block, int(to_block), self._chunk_size))

        raw_logs = []
        for start, end in ranges:
            raw_logs.extend(
                await self._client.get_logs(
                    address,
                    abi_name,
                    event_type.EVENT_NAME,
                    argument_filters=argument_filters,
                    from_block=start,
                    to_block=end,
                )
            )

        events = [event_type.from_log(log) for log in raw_logs]
        events.sort(key=lambda e: e.ledger_position)
        logger.debug(
            "Scanned %d %s events at %s from block %s",
            len(events), event_type.EVENT_NAME, address, from_block,
        )
        return events

    async def scan_since(
        self,
        cursor: ScanCursor,
        address: str,
        abi_name: str,
        event_type: Type[E],
        argument_filters: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[List[E], ScanCursor]:
        """Scan only the blocks after ``cursor`` and return the advanced cursor."""
        head = await self._client.block_number()
        if head < cursor.next_block:
            return [], cursor
        events = await self.scan(
            address,
            abi_name,
            event_type,
            argument_filters=argument_filters,
            from_block=cursor.next_block,
            to_block=head,
        )
        return events, ScanCursor(last_block=head)


def _split_range(start: int, end: int, size: int):
    current = start
    while current <= end:
        upper = min(current + size - 1, end)
        yield current, upper
        current = upper + 1
