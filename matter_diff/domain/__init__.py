"""Domain layer: snapshot diffing, activity models, validators, exceptions. Pure logic only."""

from matter_diff.domain.differ import TRACKED_FIELDS, compute_changed_fields
from matter_diff.domain.exceptions import (
    DomainError,
    DomainValidationError,
    InvalidStateTransitionError,
)
from matter_diff.domain.models import (
    ActivityEntry,
    Candidate,
    CorrelationState,
    DiffEntry,
)

__all__ = [
    "ActivityEntry",
    "Candidate",
    "CorrelationState",
    "DiffEntry",
    "DomainError",
    "DomainValidationError",
    "InvalidStateTransitionError",
    "TRACKED_FIELDS",
    "compute_changed_fields",
]
