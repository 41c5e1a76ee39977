"""Publishes a tally hash on chain.

Sends ``FundingRound.publishTallyHash(hash)`` signed with the coordinator
key. Waits for 1 confirmation and returns a PublishRecord.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from eth_account import Account
from web3 import HTTPProvider, Web3

from clrscan.errors import ClrScanError
from clrscan.ledger.abi import FUNDING_ROUND


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishRecord:
    """A confirmed tally hash publication."""
    round_address: str
    tally_hash: str
    tx_hash: str
    block_number: int
    chain_id: int


def publish_tally_hash(
    round_address: str,
    tally_hash: str,
    rpc_url: str,
    private_key: str,
    chain_id: int,
    timeout_seconds: int = 300,
    w3: Optional[Web3] = None,
) -> PublishRecord:
    """Record the tally hash in the funding round contract.

    Raises:
        ClrScanError: If the transaction is mined but reverted.
    """
    if w3 is None:
        w3 = Web3(HTTPProvider(rpc_url))
    acct = Account.from_key(private_key)
    funding_round = w3.eth.contract(
        address=Web3.to_checksum_address(round_address), abi=FUNDING_ROUND
    )

    tx = funding_round.functions.publishTallyHash(tally_hash).build_transaction({
        "from": acct.address,
        "nonce": w3.eth.get_transaction_count(acct.address),
        "chainId": chain_id,
    })
    signed = acct.sign_transaction(tx)
    tx_hash = Web3.to_hex(w3.eth.send_raw_transaction(signed.raw_transaction))
    logger.info("Sent publishTallyHash tx %s", tx_hash)

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout_seconds)
    if receipt["status"] != 1:
        raise ClrScanError(f"publishTallyHash reverted in tx {tx_hash}")
    logger.info("Tally hash confirmed in block %d", receipt["blockNumber"])

    return PublishRecord(
        round_address=round_address,
        tally_hash=tally_hash,
        tx_hash=tx_hash,
        block_number=receipt["blockNumber"],
        chain_id=chain_id,
    )
