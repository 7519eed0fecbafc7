"""Enrichment reader: joins stored diffs onto activity-log responses."""

import json
import logging

from matter_diff.application.diff_repository import DiffRepository
from matter_diff.application.exceptions import ApplicationError
from matter_diff.domain.activity_payload import enrich_activity_payload, extract_activity_items
from matter_diff.domain.validators.diff_validator import normalize_activity_ids

logger = logging.getLogger(__name__)


class EnrichmentReader:
    """Anything that prevents enrichment (bad JSON, no ids, store failure) returns the payload untouched."""

    def __init__(self, diff_repository: DiffRepository) -> None:
        self._repository = diff_repository

    async def enrich_activity_list(self, matter_id: str, raw: bytes) -> bytes:
        """Attach `metadata.changed_fields` to activity items with a stored diff. One batch lookup."""
        try:
            payload = json.loads(raw)
        except (ValueError, UnicodeDecodeError):
            return raw

        activity_ids = normalize_activity_ids(item.get("id") for item in extract_activity_items(payload))
        if not activity_ids:
            return raw

        try:
            diffs = await self._repository.lookup(matter_id, activity_ids)
        except ApplicationError as e:
            logger.error("diff_lookup_failed", extra={"matter_id": matter_id, "error": e.message})
            return raw

        logger.info(
            "diff_lookup",
            extra={"matter_id": matter_id, "requested": len(activity_ids), "found": len(diffs)},
        )
        if not diffs:
            return raw
        return json.dumps(enrich_activity_payload(payload, diffs)).encode()
