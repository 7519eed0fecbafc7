"""Correlation lifecycle. Transitions are validated."""

from enum import Enum
from typing import Dict, FrozenSet

from matter_diff.domain.exceptions import InvalidStateTransitionError


class CorrelationState(str, Enum):
    """State of one correlation worker run."""

    POLLING = "polling"
    MATCHED = "matched"
    STORED = "stored"  # Terminal success
    EXHAUSTED = "exhausted"  # Terminal: no matching activity within the retry schedule
    STORE_FAILED = "store_failed"  # Terminal: matched but the diff store rejected the write


_STATE_TRANSITIONS: Dict[CorrelationState, FrozenSet[CorrelationState]] = {
    CorrelationState.POLLING: frozenset({CorrelationState.MATCHED, CorrelationState.EXHAUSTED}),
    CorrelationState.MATCHED: frozenset({CorrelationState.STORED, CorrelationState.STORE_FAILED}),
    CorrelationState.STORED: frozenset(),
    CorrelationState.EXHAUSTED: frozenset(),
    CorrelationState.STORE_FAILED: frozenset(),
}


def validate_transition(current: CorrelationState, new: CorrelationState) -> None:
    """Validate that transition from current to new is allowed. Raises if invalid."""
    allowed = _STATE_TRANSITIONS.get(current, frozenset())
    if new not in allowed:
        raise InvalidStateTransitionError(
            f"Invalid correlation transition from {current.value} to {new.value}"
        )
