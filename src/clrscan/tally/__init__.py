"""Tally orchestration glue around the external MACI tally engine."""

from clrscan.tally.engine import TallyEngine, TallyRequest
from clrscan.tally.publish import PublishRecord, publish_tally_hash
from clrscan.tally.runner import CoordinatorState, load_coordinator_state, run_tally

__all__ = [
    "TallyEngine",
    "TallyRequest",
    "PublishRecord",
    "publish_tally_hash",
    "CoordinatorState",
    "load_coordinator_state",
    "run_tally",
]
