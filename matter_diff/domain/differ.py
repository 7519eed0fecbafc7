"""Snapshot differ: which tracked matter fields differ between two snapshots. Pure functions."""

import json
from typing import Any, Dict, List, Optional

ASSIGNEE_FIELD = "assignee_ids"

# Check order is output order.
TRACKED_FIELDS = (
    "title",
    "status",
    "client_id",
    "description",
    "billing_type",
    "admin_hourly_rate",
    "attorney_hourly_rate",
    "practice_service_id",
    "payment_frequency",
    "total_fixed_price",
    "contingency_percentage",
    "settlement_amount",
    ASSIGNEE_FIELD,
)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _kind(value: Any) -> str:
    # bool is checked before number because bool subclasses int.
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (dict, list, tuple)):
        return "object"
    return type(value).__name__


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def are_equivalent(left: Any, right: Any) -> bool:
    """Empty values match each other; composites compare by canonical JSON with keys sorted."""
    if _is_empty(left) and _is_empty(right):
        return True
    if _kind(left) != _kind(right):
        return False
    if _kind(left) == "object":
        try:
            return _canonical(left) == _canonical(right)
        except (TypeError, ValueError):
            return False
    return left == right


def extract_assignee_ids(snapshot: Dict[str, Any]) -> List[str]:
    """Assignee ids from `assignee_ids`, else from `assignees` (ids or objects carrying an id)."""
    assignee_ids = snapshot.get("assignee_ids")
    if isinstance(assignee_ids, list):
        return [i for i in assignee_ids if isinstance(i, str) and i.strip()]
    assignees = snapshot.get("assignees")
    if not isinstance(assignees, list):
        return []
    ids = []
    for assignee in assignees:
        if isinstance(assignee, dict):
            assignee = assignee.get("id")
        if isinstance(assignee, str) and assignee.strip():
            ids.append(assignee)
    return ids


def _field_changed(name: str, before: Dict[str, Any], after: Dict[str, Any]) -> bool:
    if name == ASSIGNEE_FIELD:
        return sorted(extract_assignee_ids(before)) != sorted(extract_assignee_ids(after))
    return not are_equivalent(before.get(name), after.get(name))


def compute_changed_fields(
    before: Optional[Dict[str, Any]],
    after: Optional[Dict[str, Any]],
) -> List[str]:
    """
    Return tracked field names whose values differ, in TRACKED_FIELDS order.

    before=None means no prior state: every tracked field is reported.
    after=None is a caller error upstream; it yields no changes rather than raising.
    """
    if after is None:
        return []
    if before is None:
        return list(TRACKED_FIELDS)
    before = before if isinstance(before, dict) else {}
    after = after if isinstance(after, dict) else {}
    return [name for name in TRACKED_FIELDS if _field_changed(name, before, after)]
