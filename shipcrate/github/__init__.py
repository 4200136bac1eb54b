"""GitHub Actions integration: trigger events and step outputs."""

from .event import CiEvent, TriggerDecision, branch_matches, load_event, should_release
from .outputs import set_output, write_output

__all__ = [
    "CiEvent",
    "TriggerDecision",
    "branch_matches",
    "load_event",
    "set_output",
    "should_release",
    "write_output",
]
