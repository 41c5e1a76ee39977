"""Minimal contract ABIs — only the functions and events clrscan touches."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple


def _params(params: Sequence[Tuple[str, str]]) -> List[Dict[str, Any]]:
    return [{"name": name, "type": type_} for name, type_ in params]


def _view(
    name: str,
    inputs: Sequence[Tuple[str, str]] = (),
    outputs: Sequence[Tuple[str, str]] = (("", "uint256"),),
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": _params(inputs),
        "outputs": _params(outputs),
    }


def _event(name: str, inputs: Sequence[Tuple[str, str, bool]]) -> Dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [
            {"name": arg, "type": type_, "indexed": indexed}
            for arg, type_, indexed in inputs
        ],
    }


FUNDING_ROUND_FACTORY = [
    _view("getCurrentRound", outputs=[("", "address")]),
    _event("RoundStarted", [("_round", "address", False)]),
    _event("FundingSourceAdded", [("_source", "address", False)]),
    _event("FundingSourceRemoved", [("_source", "address", False)]),
]

FUNDING_ROUND = [
    _view("maci", outputs=[("", "address")]),
    _view("nativeToken", outputs=[("", "address")]),
    _view("userRegistry", outputs=[("", "address")]),
    _view("startBlock"),
    _view("voiceCreditFactor"),
    _view("isFinalized", outputs=[("", "bool")]),
    _view("isCancelled", outputs=[("", "bool")]),
    _view("totalSpent"),
    _view("matchingPoolSize"),
    {
        "type": "function",
        "name": "publishTallyHash",
        "stateMutability": "nonpayable",
        "inputs": _params([("_tallyHash", "string")]),
        "outputs": [],
    },
    _event("Contribution", [("_sender", "address", True), ("_amount", "uint256", False)]),
]

MACI = [
    _view(
        "treeDepths",
        outputs=[
            ("stateTreeDepth", "uint8"),
            ("messageTreeDepth", "uint8"),
            ("voteOptionTreeDepth", "uint8"),
        ],
    ),
    _view("signUpTimestamp"),
    _view("signUpDurationSeconds"),
    _view("votingDurationSeconds"),
    _view("coordinatorPubKey", outputs=[("x", "uint256"), ("y", "uint256")]),
]

ERC20 = [
    _view("symbol", outputs=[("", "string")]),
    _view("decimals", outputs=[("", "uint8")]),
    _view("balanceOf", inputs=[("account", "address")]),
    _view("allowance", inputs=[("owner", "address"), ("spender", "address")]),
]

USER_REGISTRY = [
    _view("isVerifiedUser", inputs=[("_user", "address")], outputs=[("", "bool")]),
]

KLEROS_GTCR = [
    _view(
        "getItemInfo",
        inputs=[("_itemID", "bytes32")],
        outputs=[("data", "bytes"), ("status", "uint8"), ("numberOfRequests", "uint256")],
    ),
    _event(
        "ItemSubmitted",
        [
            ("_itemID", "bytes32", True),
            ("_submitter", "address", True),
            ("_evidenceGroupID", "uint256", True),
            ("_data", "bytes", False),
        ],
    ),
    _event(
        "MetaEvidence",
        [("_metaEvidenceID", "uint256", True), ("_evidence", "string", False)],
    ),
]

KLEROS_GTCR_ADAPTER = [
    _view("tcr", outputs=[("", "address")]),
    _event(
        "RecipientAdded",
        [
            ("_tcrItemId", "bytes32", True),
            ("_metadata", "bytes", False),
            ("_index", "uint256", False),
        ],
    ),
    _event("RecipientRemoved", [("_tcrItemId", "bytes32", True)]),
]


ABIS: Dict[str, List[Dict[str, Any]]] = {
    "FundingRoundFactory": FUNDING_ROUND_FACTORY,
    "FundingRound": FUNDING_ROUND,
    "MACI": MACI,
    "ERC20": ERC20,
    "UserRegistry": USER_REGISTRY,
    "KlerosGTCR": KLEROS_GTCR,
    "KlerosGTCRAdapter": KLEROS_GTCR_ADAPTER,
}


def get_abi(name: str) -> List[Dict[str, Any]]:
    try:
        return ABIS[name]
    except KeyError:
        raise ValueError(f"Unknown contract ABI: {name}") from None
