"""Activity and diff entities. Activity entries are owned by the backend; diff entries by this service."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

# Only activity entries with this action can be correlated with a write.
ENTITY_UPDATED_ACTION = "matter_updated"


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def epoch_ms_to_iso(value: Any) -> Optional[str]:
    """ISO-8601 UTC for epoch milliseconds, or None when the value is not a representable instant."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def parse_timestamp_ms(value: Union[str, int, float, None]) -> Optional[float]:
    """
    Convert an ISO-8601 string or epoch milliseconds to epoch milliseconds.
    Returns None when the value is absent, unparseable, or not positive.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        millis = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        millis = parsed.timestamp() * 1000
    else:
        return None
    return millis if millis > 0 else None


@dataclass(frozen=True)
class ActivityEntry:
    """Immutable audit record read from the backend activity log."""

    id: Optional[str]
    matter_id: Optional[str] = None
    user_id: Optional[str] = None
    action: Optional[str] = None
    created_at: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, item: Dict[str, Any]) -> "ActivityEntry":
        """Build from a backend activity item, dropping values of the wrong type."""
        created_at = item.get("created_at")
        if isinstance(created_at, (int, float)):
            created_at = epoch_ms_to_iso(created_at)
        metadata = item.get("metadata")
        return cls(
            id=_optional_str(item.get("id")),
            matter_id=_optional_str(item.get("matter_id")),
            user_id=_optional_str(item.get("user_id")),
            action=_optional_str(item.get("action")),
            created_at=_optional_str(created_at),
            metadata=metadata if isinstance(metadata, dict) else None,
        )

    @property
    def created_at_ms(self) -> Optional[float]:
        return parse_timestamp_ms(self.created_at)


@dataclass(frozen=True)
class DiffEntry:
    """Link between one activity entry and the fields its write changed. One per activity_id."""

    activity_id: str
    matter_id: str
    fields: List[str] = field(default_factory=list)
    user_id: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_id": self.activity_id,
            "matter_id": self.matter_id,
            "fields": list(self.fields),
            "user_id": self.user_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiffEntry":
        return cls(
            activity_id=data["activity_id"],
            matter_id=data["matter_id"],
            fields=list(data.get("fields") or []),
            user_id=data.get("user_id"),
            created_at=data.get("created_at"),
        )


@dataclass(frozen=True)
class Candidate:
    """An activity entry under consideration during one polling attempt. Never persisted."""

    activity: ActivityEntry
    time_delta_ms: float
    score: int = 0
