"""clrscan CLI — query round and registry state, run the tally.

Usage:
    clrscan current-round
    clrscan round-info --round 0xRound
    clrscan projects --registry 0xRegistry --start-block 100 --end-block 200
    clrscan project --registry 0xRegistry --id 0xItemId
    clrscan login-message
    clrscan tally --state-file state.json

Configuration comes from the environment or a .env file (see
clrscan.config). Exit code is 0 on success and 1 on any error.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from clrscan.config import ClrConfig
from clrscan.errors import ConfigError
from clrscan.ledger.context import LedgerContext
from clrscan.registry import get_project, get_projects
from clrscan.rounds import get_current_round, get_round_info
from clrscan.tally import TallyEngine, load_coordinator_state, run_tally
from clrscan.users import login_message


logger = logging.getLogger("clrscan")


def _load_config(args: argparse.Namespace) -> ClrConfig:
    return ClrConfig.from_env(dotenv_path=args.env_file)


def _make_context(config: ClrConfig) -> LedgerContext:
    return LedgerContext.from_config(config)


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def cmd_current_round(args: argparse.Namespace) -> int:
    ctx = _make_context(_load_config(args))
    round_address = asyncio.run(get_current_round(ctx))
    _print_json({"round": round_address})
    return 0


def cmd_round_info(args: argparse.Namespace) -> int:
    ctx = _make_context(_load_config(args))
    round_address = args.round or asyncio.run(get_current_round(ctx))
    if round_address is None:
        print("No current round", file=sys.stderr)
        return 1
    record = asyncio.run(get_round_info(ctx, round_address))
    _print_json(record.to_dict())
    return 0


def cmd_projects(args: argparse.Namespace) -> int:
    ctx = _make_context(_load_config(args))
    projects = asyncio.run(
        get_projects(ctx, args.registry, args.start_block, args.end_block)
    )
    _print_json([project.to_dict() for project in projects])
    return 0


def cmd_project(args: argparse.Namespace) -> int:
    ctx = _make_context(_load_config(args))
    project = asyncio.run(get_project(ctx, args.registry, args.id))
    _print_json(project.to_dict() if project is not None else None)
    return 0


def cmd_login_message(args: argparse.Namespace) -> int:
    config = _load_config(args)
    print(login_message(config.factory_address))
    return 0


def cmd_tally(args: argparse.Namespace) -> int:
    config = _load_config(args)
    if not config.coordinator_eth_pk:
        raise ConfigError("COORDINATOR_ETH_PK is required for tallying")
    ctx = _make_context(config)
    state = load_coordinator_state(state_file=args.state_file)
    tally_hash = asyncio.run(
        run_tally(
            ctx,
            state,
            TallyEngine(config.maci_cli),
            rpc_url=config.rpc_url,
            coordinator_eth_pk=config.coordinator_eth_pk,
            chain_id=config.chain_id,
            tally_file=args.tally_file,
        )
    )
    print(f"Tally hash is {tally_hash}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clrscan",
        description="clr.fund round and recipient registry reconstruction",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file (default: search from the working directory)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=None,
        help="Explicit log level; overrides -v",
    )
    sub = parser.add_subparsers(dest="command")

    # current-round
    sub.add_parser("current-round", help="Show the factory's current round")

    # round-info
    p_round = sub.add_parser("round-info", help="Reconstruct a round's status and totals")
    p_round.add_argument("--round", help="Round address (default: current round)")

    # projects
    p_projects = sub.add_parser("projects", help="List registry projects for a window")
    p_projects.add_argument("--registry", required=True, help="Recipient registry address")
    p_projects.add_argument("--start-block", type=int, help="Round start block")
    p_projects.add_argument("--end-block", type=int, help="Round end block")

    # project
    p_project = sub.add_parser("project", help="Look up a single project")
    p_project.add_argument("--registry", required=True, help="Recipient registry address")
    p_project.add_argument("--id", required=True, help="Curated list item id")

    # login-message
    sub.add_parser("login-message", help="Print the wallet login challenge")

    # tally
    p_tally = sub.add_parser("tally", help="Run the tally and publish its hash")
    p_tally.add_argument(
        "--state-file", type=Path, default=Path("state.json"),
        help="Coordinator state file, used when CLRFUND_STATE is unset",
    )
    p_tally.add_argument(
        "--tally-file", type=Path, default=Path("tally.json"),
        help="Where the tally engine writes its results",
    )

    return parser


def _log_level(verbosity: int, log_level: Optional[str] = None) -> int:
    if log_level:
        return getattr(logging, log_level)
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    return level


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(_log_level(args.verbose, args.log_level))

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "current-round": cmd_current_round,
        "round-info": cmd_round_info,
        "projects": cmd_projects,
        "project": cmd_project,
        "login-message": cmd_login_message,
        "tally": cmd_tally,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except Exception as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
