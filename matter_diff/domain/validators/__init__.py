"""Domain validators. Pure validation functions."""

from matter_diff.domain.validators.diff_validator import normalize_activity_ids, normalize_diff_entries

__all__ = [
    "normalize_activity_ids",
    "normalize_diff_entries",
]
