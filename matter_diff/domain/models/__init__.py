"""Domain models. Pure business entities."""

from matter_diff.domain.models.activity import (
    ENTITY_UPDATED_ACTION,
    ActivityEntry,
    Candidate,
    DiffEntry,
    epoch_ms_to_iso,
    parse_timestamp_ms,
)
from matter_diff.domain.models.correlation import CorrelationState, validate_transition

__all__ = [
    "ENTITY_UPDATED_ACTION",
    "ActivityEntry",
    "Candidate",
    "CorrelationState",
    "DiffEntry",
    "epoch_ms_to_iso",
    "parse_timestamp_ms",
    "validate_transition",
]
