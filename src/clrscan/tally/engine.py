"""Tally engine — runs the external MACI command-line tool.

Two steps, both in repeat mode (the tool retries until every batch is
done):
1. ``process`` processes the round's messages and prints a random state
   leaf.
2. ``tally`` tallies votes, seeded with that leaf, and writes the results
   JSON file.

Any step that produces no result raises TallyEngineFailure, so nothing is
published after a partial run.
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List

from clrscan.errors import TallyEngineFailure


logger = logging.getLogger(__name__)

_STATE_LEAF_PATTERN = re.compile(r"random state leaf:\s*(\S+)", re.IGNORECASE)

ZERO_SALT = "0x0"


@dataclass(frozen=True)
class TallyRequest:
    """Everything the engine needs for one round."""
    maci_address: str
    provider_url: str
    coordinator_eth_pk: str
    coordinator_privkey: str
    tally_file: Path = Path("tally.json")


class TallyEngine:
    """Invokes ``maci-cli`` as a subprocess.

    Usage:
        engine = TallyEngine("maci-cli")
        leaf = engine.process_messages(request)
        results = engine.tally(request, leaf)
    """

    def __init__(
        self,
        executable: str = "maci-cli",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self._executable = executable
        self._runner = runner

    def _common_args(self, request: TallyRequest) -> List[str]:
        return [
            "-x", request.maci_address,
            "-sk", request.coordinator_privkey,
            "-d", request.coordinator_eth_pk,
            "-e", request.provider_url,
            "-r",
        ]

    def _run(self, command: str, args: List[str]) -> str:
        argv = [self._executable, command, *args]
        logger.info("Running tally engine: %s %s", self._executable, command)
        try:
            completed = self._runner(argv, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise TallyEngineFailure(f"Cannot run {self._executable}: {exc}") from exc
        if completed.returncode != 0:
            raise TallyEngineFailure(
                f"{self._executable} {command} exited with {completed.returncode}: "
                f"{(completed.stderr or '').strip()}"
            )
        return completed.stdout or ""

    def process_messages(self, request: TallyRequest) -> str:
        """Process all messages; return the random state leaf.

        Raises:
            TallyEngineFailure: If the tool fails or prints no state leaf.
        """
        output = self._run("process", self._common_args(request))
        match = _STATE_LEAF_PATTERN.search(output)
        if match is None:
            raise TallyEngineFailure("message processing failed: no random state leaf")
        return match.group(1)

    def tally(self, request: TallyRequest, random_state_leaf: str) -> Dict[str, Any]:
        """Tally votes and return the parsed results file.

        Raises:
            TallyEngineFailure: If the tool fails or writes no usable file.
        """
        args = self._common_args(request) + [
            "-c", ZERO_SALT,
            "-tvc", ZERO_SALT,
            "-pvc", ZERO_SALT,
            "-z", random_state_leaf,
            "-t", str(request.tally_file),
        ]
        self._run("tally", args)
        try:
            results = json.loads(request.tally_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise TallyEngineFailure(
                f"tally produced no results in {request.tally_file}: {exc}"
            ) from exc
        if not results:
            raise TallyEngineFailure(f"tally results in {request.tally_file} are empty")
        return results
