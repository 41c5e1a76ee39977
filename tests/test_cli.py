"""Tests for the clrscan CLI — parsing and dispatch over an in-memory ledger."""

import json
import logging

import pytest

from clrscan import cli
from clrscan.cli import _log_level, build_parser, main
from clrscan.config import ClrConfig
from clrscan.errors import ConfigError
from clrscan.rounds.lifecycle import ZERO_ADDRESS

from test_registry_reconciler import REGISTRY, _id, _metadata, _setup_registry


FACTORY = "0xFaC7000000000000000000000000000000000001"
ROUND = "0x1000000000000000000000000000000000000001"


@pytest.fixture
def wired(monkeypatch, ctx):
    """Route every command to the test context."""
    config = ClrConfig(rpc_url="http://localhost:8545", factory_address=FACTORY)
    monkeypatch.setattr(cli, "_load_config", lambda args: config)
    monkeypatch.setattr(cli, "_make_context", lambda config: ctx)
    return config


class TestCLIParsing:
    def test_projects_command(self) -> None:
        args = build_parser().parse_args([
            "projects", "--registry", REGISTRY, "--start-block", "50", "--end-block", "200",
        ])
        assert args.command == "projects"
        assert args.start_block == 50
        assert args.end_block == 200

    def test_round_info_defaults_to_current_round(self) -> None:
        args = build_parser().parse_args(["round-info"])
        assert args.round is None

    def test_log_level_option(self) -> None:
        args = build_parser().parse_args(["--log-level", "debug", "login-message"])
        assert args.log_level == "DEBUG"

    def test_log_level_rejects_unknown_names(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "chatty", "login-message"])

    @pytest.mark.parametrize("verbosity, log_level, expected", [
        (0, None, logging.WARNING),
        (1, None, logging.INFO),
        (2, None, logging.DEBUG),
        (2, "ERROR", logging.ERROR),
        (0, "DEBUG", logging.DEBUG),
    ])
    def test_log_level_resolution(self, verbosity, log_level, expected) -> None:
        assert _log_level(verbosity, log_level) == expected

    def test_project_requires_id(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["project", "--registry", REGISTRY])


class TestCLIExecution:
    def test_no_command_shows_help(self, capsys) -> None:
        assert main([]) == 0
        assert "clrscan" in capsys.readouterr().out

    def test_login_message(self, wired, capsys) -> None:
        assert main(["login-message"]) == 0
        assert FACTORY.lower() in capsys.readouterr().out

    def test_current_round(self, wired, ledger, capsys) -> None:
        ledger.set(FACTORY, "getCurrentRound", ROUND)
        assert main(["current-round"]) == 0
        assert json.loads(capsys.readouterr().out) == {"round": ROUND}

    def test_round_info_without_current_round(self, wired, ledger, capsys) -> None:
        ledger.set(FACTORY, "getCurrentRound", ZERO_ADDRESS)
        assert main(["round-info"]) == 1
        assert "No current round" in capsys.readouterr().err

    def test_unknown_round_is_an_error(self, wired, capsys) -> None:
        assert main(["round-info", "--round", ROUND]) == 1
        assert "Round does not exist" in capsys.readouterr().err

    def test_projects(self, wired, ledger, documents, capsys) -> None:
        _setup_registry(ledger, documents)
        ledger.emit(REGISTRY, "RecipientAdded", 20, _tcrItemId=_id(5), _metadata=_metadata("Water"), _index=2)
        ledger.emit(REGISTRY, "RecipientRemoved", 40, _tcrItemId=_id(5))

        assert main(["projects", "--registry", REGISTRY, "--start-block", "10", "--end-block", "200"]) == 0
        [project] = json.loads(capsys.readouterr().out)
        assert project["name"] == "Water"
        assert project["is_locked"] is True
        assert "extra" not in project

    def test_project_not_found_prints_null(self, wired, ledger, documents, capsys) -> None:
        _setup_registry(ledger, documents)
        ledger.set("0xB000000000000000000000000000000000000002", "getItemInfo", (b"", 0, 0), _id(99))

        assert main(["project", "--registry", REGISTRY, "--id", _id(99)]) == 0
        assert json.loads(capsys.readouterr().out) is None

    def test_tally_requires_coordinator_key(self, wired, capsys) -> None:
        assert main(["tally"]) == 1
        assert "COORDINATOR_ETH_PK" in capsys.readouterr().err

    def test_missing_configuration(self, monkeypatch, capsys) -> None:
        def fail(args):
            raise ConfigError("Missing required configuration: ETH_RPC_URL")

        monkeypatch.setattr(cli, "_load_config", fail)
        assert main(["current-round"]) == 1
        assert "ETH_RPC_URL" in capsys.readouterr().err
