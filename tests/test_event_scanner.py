"""Tests for the event scanner — ledger order, chunking, incremental cursor."""

import asyncio

import pytest

from clrscan.ledger.scanner import EventScanner, ScanCursor
from clrscan.models.events import RecipientRemoved, RoundStarted


REGISTRY = "0x2222222222222222222222222222222222222222"


def _round(n: int) -> str:
    return "0x" + f"{n:040x}"


def _item(n: int) -> str:
    return "0x" + f"{n:064x}"


class TestScan:
    def test_events_sorted_by_block_then_log_index(self, ledger, ctx) -> None:
        ledger.emit(ctx.factory_address, "RoundStarted", 20, 0, _round=_round(3))
        ledger.emit(ctx.factory_address, "RoundStarted", 10, 1, _round=_round(2))
        ledger.emit(ctx.factory_address, "RoundStarted", 10, 0, _round=_round(1))

        events = asyncio.run(
            EventScanner(ledger).scan(ctx.factory_address, "FundingRoundFactory", RoundStarted)
        )
        assert [e.round_address for e in events] == [_round(1), _round(2), _round(3)]

    def test_block_range(self, ledger, ctx) -> None:
        for block in (5, 15, 25):
            ledger.emit(ctx.factory_address, "RoundStarted", block, _round=_round(block))
        events = asyncio.run(EventScanner(ledger).scan(
            ctx.factory_address, "FundingRoundFactory", RoundStarted,
            from_block=10, to_block=20,
        ))
        assert [e.block_number for e in events] == [15]

    def test_argument_filter(self, ledger) -> None:
        ledger.emit(REGISTRY, "RecipientRemoved", 1, _tcrItemId=_item(1))
        ledger.emit(REGISTRY, "RecipientRemoved", 2, _tcrItemId=_item(2))
        events = asyncio.run(EventScanner(ledger).scan(
            REGISTRY, "KlerosGTCRAdapter", RecipientRemoved, {"_tcrItemId": _item(2)},
        ))
        assert [e.item_id for e in events] == [_item(2)]

    def test_empty_scan(self, ledger, ctx) -> None:
        events = asyncio.run(
            EventScanner(ledger).scan(ctx.factory_address, "FundingRoundFactory", RoundStarted)
        )
        assert events == []


class TestChunking:
    def test_range_split_into_windows(self, ledger, ctx) -> None:
        ledger.head = 25
        ledger.emit(ctx.factory_address, "RoundStarted", 3, _round=_round(1))
        ledger.emit(ctx.factory_address, "RoundStarted", 24, _round=_round(2))

        events = asyncio.run(EventScanner(ledger, chunk_size=10).scan(
            ctx.factory_address, "FundingRoundFactory", RoundStarted,
        ))
        assert [e.round_address for e in events] == [_round(1), _round(2)]
        windows = [(q[2], q[3]) for q in ledger.log_queries]
        assert windows == [(0, 9), (10, 19), (20, 25)]

    def test_invalid_chunk_size(self, ledger) -> None:
        with pytest.raises(ValueError):
            EventScanner(ledger, chunk_size=0)


class TestCursor:
    def test_scan_since_returns_only_new_events(self, ledger, ctx) -> None:
        scanner = EventScanner(ledger)
        ledger.head = 10
        ledger.emit(ctx.factory_address, "RoundStarted", 5, _round=_round(1))

        first, cursor = asyncio.run(scanner.scan_since(
            ScanCursor(), ctx.factory_address, "FundingRoundFactory", RoundStarted,
        ))
        assert [e.round_address for e in first] == [_round(1)]
        assert cursor == ScanCursor(last_block=10)

        ledger.head = 20
        ledger.emit(ctx.factory_address, "RoundStarted", 15, _round=_round(2))
        second, cursor = asyncio.run(scanner.scan_since(
            cursor, ctx.factory_address, "FundingRoundFactory", RoundStarted,
        ))
        assert [e.round_address for e in second] == [_round(2)]
        assert cursor.next_block == 21

    def test_cursor_ahead_of_head(self, ledger, ctx) -> None:
        ledger.head = 5
        events, cursor = asyncio.run(EventScanner(ledger).scan_since(
            ScanCursor(last_block=9), ctx.factory_address, "FundingRoundFactory", RoundStarted,
        ))
        assert events == []
        assert cursor.last_block == 9
