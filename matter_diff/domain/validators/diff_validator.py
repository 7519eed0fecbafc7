"""Validators for diff store input. Pure functions, no infrastructure access."""

from typing import Any, Iterable, List, Optional

from matter_diff.domain.exceptions import DomainValidationError
from matter_diff.domain.models.activity import DiffEntry, epoch_ms_to_iso


def _clean_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _normalize_created_at(value: Any) -> Optional[str]:
    """Epoch milliseconds become ISO-8601 UTC; strings pass through; anything else is dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return epoch_ms_to_iso(value)
    if isinstance(value, str):
        return value
    return None


def normalize_diff_entries(matter_id: str, raw_entries: Iterable[Any]) -> List[DiffEntry]:
    """
    Turn raw diff entry dicts into DiffEntry objects scoped to matter_id.
    Entries missing an activity id, belonging to another matter, or without fields are skipped.
    Raises DomainValidationError if no entry survives.
    """
    entries: List[DiffEntry] = []
    for raw in raw_entries:
        if not isinstance(raw, dict):
            continue
        activity_id = _clean_str(raw.get("activity_id"))
        entry_matter_id = _clean_str(raw.get("matter_id")) or matter_id
        if not activity_id or entry_matter_id != matter_id:
            continue
        fields = raw.get("fields")
        if not isinstance(fields, list):
            continue
        fields = [f for f in fields if isinstance(f, str) and f.strip()]
        if not fields:
            continue
        user_id = raw.get("user_id")
        entries.append(
            DiffEntry(
                activity_id=activity_id,
                matter_id=matter_id,
                fields=fields,
                user_id=user_id if isinstance(user_id, str) else None,
                created_at=_normalize_created_at(raw.get("created_at")),
            )
        )
    if not entries:
        raise DomainValidationError("No valid diff entries provided")
    return entries


def normalize_activity_ids(raw_ids: Iterable[Any]) -> List[str]:
    """Non-blank string ids, trimmed, first occurrence order kept."""
    seen = {}
    for raw in raw_ids:
        activity_id = _clean_str(raw)
        if activity_id:
            seen.setdefault(activity_id, None)
    return list(seen)
