"""Helpers for the backend's loosely enveloped JSON payloads (matters and activity lists)."""

from typing import Any, Dict, List, Mapping, Optional, Sequence


def extract_matter(payload: Any) -> Optional[Dict[str, Any]]:
    """Unwrap a matter from a bare object, a list, `{"matter": {...}}` or `{"data": ...}`."""
    if isinstance(payload, list):
        return next((item for item in payload if isinstance(item, dict)), None)
    if not isinstance(payload, dict):
        return None
    if isinstance(payload.get("matter"), dict):
        return payload["matter"]
    if payload.get("data"):
        return extract_matter(payload["data"])
    return payload


def extract_activity_items(payload: Any) -> List[Dict[str, Any]]:
    """Activity items from a bare list, `{"activity": [...]}` or a `{"data": ...}` envelope."""
    if isinstance(payload, list):
        return [item for item in payload if isinstance(item, dict)]
    if not isinstance(payload, dict):
        return []
    if isinstance(payload.get("activity"), list):
        return [item for item in payload["activity"] if isinstance(item, dict)]
    if payload.get("data"):
        return extract_activity_items(payload["data"])
    return []


def enrich_activity_payload(payload: Any, diffs: Mapping[str, Sequence[str]]) -> Any:
    """
    Return a copy of payload with `metadata.changed_fields` set on items whose id has a diff.
    Envelope structure, ordering and all other keys are preserved.
    """
    if isinstance(payload, list):
        return [enrich_activity_payload(item, diffs) for item in payload]
    if not isinstance(payload, dict):
        return payload
    if isinstance(payload.get("activity"), list):
        return {
            **payload,
            "activity": [enrich_activity_payload(item, diffs) for item in payload["activity"]],
        }
    if payload.get("data"):
        return {**payload, "data": enrich_activity_payload(payload["data"], diffs)}

    activity_id = payload.get("id")
    fields = diffs.get(activity_id.strip()) if isinstance(activity_id, str) else None
    if not fields:
        return payload
    metadata = payload.get("metadata") if isinstance(payload.get("metadata"), dict) else {}
    return {**payload, "metadata": {**metadata, "changed_fields": list(fields)}}
