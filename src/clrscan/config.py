"""Runtime configuration, read from the environment (and an optional .env file).

Variables:
    ETH_RPC_URL               JSON-RPC endpoint of the chain (required)
    CLRFUND_FACTORY_ADDRESS   canonical FundingRoundFactory address (required)
    IPFS_GATEWAY_URL          gateway prefix for fetching documents
    IPFS_API_URL              IPFS HTTP API used to publish documents
    CLRFUND_EXTRA_ROUNDS      comma-separated rounds created outside the factory
    AVERAGE_BLOCK_TIME        seconds per block, used for the end-block estimate
    RPC_TIMEOUT               seconds before a JSON-RPC request gives up
    KLEROS_CURATE_URL         browsing URL of the curated list
    COORDINATOR_ETH_PK        coordinator key for publishing the tally hash
    CHAIN_ID                  chain id used when signing
    MACI_CLI                  tally engine executable
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from clrscan.errors import ConfigError


DEFAULT_IPFS_GATEWAY_URL = "https://ipfs.io"
DEFAULT_IPFS_API_URL = "http://127.0.0.1:5001"
DEFAULT_CURATE_URL = (
    "https://curate.kleros.io/tcr/0x2E3B10aBf091cdc53cC892A50daBDb432e220398"
)
DEFAULT_BLOCK_TIME_SECONDS = 15
DEFAULT_RPC_TIMEOUT_SECONDS = 30
DEFAULT_CHAIN_ID = 100  # xDai
DEFAULT_MACI_CLI = "maci-cli"


@dataclass(frozen=True)
class ClrConfig:
    """Process-wide settings. Built once and handed to LedgerContext."""
    rpc_url: str
    factory_address: str
    ipfs_gateway_url: str = DEFAULT_IPFS_GATEWAY_URL
    ipfs_api_url: str = DEFAULT_IPFS_API_URL
    extra_rounds: tuple[str, ...] = field(default_factory=tuple)
    block_time_seconds: int = DEFAULT_BLOCK_TIME_SECONDS
    rpc_timeout_seconds: int = DEFAULT_RPC_TIMEOUT_SECONDS
    curate_url: str = DEFAULT_CURATE_URL
    coordinator_eth_pk: Optional[str] = None
    chain_id: int = DEFAULT_CHAIN_ID
    maci_cli: str = DEFAULT_MACI_CLI

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Path] = None,
    ) -> "ClrConfig":
        """Build a config from environment variables.

        When ``env`` is omitted, a .env file is loaded first (without
        overriding variables already set) and os.environ is used.

        Raises:
            ConfigError: If a required variable is missing or a numeric
                variable does not parse.
        """
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        rpc_url = env.get("ETH_RPC_URL", "").strip()
        factory_address = env.get("CLRFUND_FACTORY_ADDRESS", "").strip()
        missing = [
            name for name, value in (
                ("ETH_RPC_URL", rpc_url),
                ("CLRFUND_FACTORY_ADDRESS", factory_address),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

        extra_rounds = tuple(
            address.strip()
            for address in env.get("CLRFUND_EXTRA_ROUNDS", "").split(",")
            if address.strip()
        )

        return cls(
            rpc_url=rpc_url,
            factory_address=factory_address,
            ipfs_gateway_url=env.get("IPFS_GATEWAY_URL") or DEFAULT_IPFS_GATEWAY_URL,
            ipfs_api_url=env.get("IPFS_API_URL") or DEFAULT_IPFS_API_URL,
            extra_rounds=extra_rounds,
            block_time_seconds=_positive_int(
                env, "AVERAGE_BLOCK_TIME", DEFAULT_BLOCK_TIME_SECONDS
            ),
            rpc_timeout_seconds=_positive_int(
                env, "RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT_SECONDS
            ),
            curate_url=(env.get("KLEROS_CURATE_URL") or DEFAULT_CURATE_URL).rstrip("/"),
            coordinator_eth_pk=env.get("COORDINATOR_ETH_PK") or None,
            chain_id=_positive_int(env, "CHAIN_ID", DEFAULT_CHAIN_ID),
            maci_cli=env.get("MACI_CLI") or DEFAULT_MACI_CLI,
        )


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value
