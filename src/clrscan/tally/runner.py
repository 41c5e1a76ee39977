"""Tally orchestration — process, tally, publish results, publish hash.

Coordinator state (round address and MACI private key) is read from the
CLRFUND_STATE environment variable, or from a state.json file:

    {"fundingRound": "0x...", "coordinatorPrivKey": "macisk..."}
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

from clrscan.errors import ConfigError
from clrscan.ledger.context import LedgerContext
from clrscan.tally.engine import TallyEngine, TallyRequest
from clrscan.tally.publish import PublishRecord, publish_tally_hash


logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = Path("state.json")


@dataclass(frozen=True)
class CoordinatorState:
    round_address: str
    coordinator_privkey: str


def load_coordinator_state(
    env: Optional[Mapping[str, str]] = None,
    state_file: Path = DEFAULT_STATE_FILE,
) -> CoordinatorState:
    """Read coordinator state from CLRFUND_STATE or ``state_file``.

    Raises:
        ConfigError: If neither source exists or a field is missing.
    """
    if env is None:
        env = os.environ
    raw = env.get("CLRFUND_STATE")
    if not raw:
        try:
            raw = state_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"No CLRFUND_STATE and cannot read {state_file}: {exc}") from exc
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise ConfigError(f"Coordinator state is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Coordinator state must be a JSON object")
    missing = [key for key in ("fundingRound", "coordinatorPrivKey") if not data.get(key)]
    if missing:
        raise ConfigError(f"Coordinator state is missing: {', '.join(missing)}")
    return CoordinatorState(
        round_address=data["fundingRound"],
        coordinator_privkey=data["coordinatorPrivKey"],
    )


async def run_tally(
    ctx: LedgerContext,
    state: CoordinatorState,
    engine: TallyEngine,
    rpc_url: str,
    coordinator_eth_pk: str,
    chain_id: int,
    tally_file: Path = Path("tally.json"),
    publisher: Callable[..., PublishRecord] = publish_tally_hash,
) -> str:
    """Run the tally for the coordinator's round and publish its hash.

    Returns the published tally hash.

    Raises:
        TallyEngineFailure: If processing or tallying yields no result.
        DocumentUnavailable: If the results cannot be stored.
    """
    maci_address = await ctx.client.call(state.round_address, "FundingRound", "maci")
    request = TallyRequest(
        maci_address=maci_address,
        provider_url=rpc_url,
        coordinator_eth_pk=coordinator_eth_pk,
        coordinator_privkey=state.coordinator_privkey,
        tally_file=tally_file,
    )

    random_state_leaf = await asyncio.to_thread(engine.process_messages, request)
    results = await asyncio.to_thread(engine.tally, request, random_state_leaf)

    tally_hash = await ctx.documents.publish_json(results)
    record = await asyncio.to_thread(
        publisher,
        state.round_address,
        tally_hash,
        rpc_url,
        coordinator_eth_pk,
        chain_id,
    )
    logger.info("Published tally hash %s in tx %s", tally_hash, record.tx_hash)
    return tally_hash
