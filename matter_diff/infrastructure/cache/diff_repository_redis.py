"""Redis-backed diff store. One hash per matter; hash field = activity id, value = JSON diff entry."""

import json
import logging
from typing import Dict, List, Sequence

from redis.exceptions import RedisError

from matter_diff.application.exceptions import DiffStoreError
from matter_diff.domain.models.activity import DiffEntry
from matter_diff.infrastructure.cache.redis_client import RedisClient

logger = logging.getLogger(__name__)

DIFF_STORE_PREFIX = "matter_diffs:"


def diff_store_key(matter_id: str) -> str:
    """Stable routing key: every operation for one matter goes through the same hash."""
    return f"{DIFF_STORE_PREFIX}{matter_id}"


class RedisDiffRepository:
    """Implements DiffRepository. Redis runs each command atomically, so writes to one matter serialize."""

    def __init__(self, redis_client: RedisClient) -> None:
        self._redis = redis_client

    async def append(self, matter_id: str, entries: Sequence[DiffEntry]) -> int:
        """Upsert entries by activity_id in a single HSET. Last write wins."""
        mapping = {entry.activity_id: json.dumps(entry.to_dict()) for entry in entries}
        if not mapping:
            return 0
        try:
            await self._redis.hset_many(diff_store_key(matter_id), mapping)
        except RedisError as e:
            raise DiffStoreError(f"Diff append failed for matter {matter_id}: {e}") from e
        return len(mapping)

    async def lookup(self, matter_id: str, activity_ids: Sequence[str]) -> Dict[str, List[str]]:
        """Fields for each activity id that has a stored diff; absent ids are omitted."""
        ids = list(dict.fromkeys(activity_ids))
        if not ids:
            return {}
        try:
            values = await self._redis.hmget(diff_store_key(matter_id), ids)
        except RedisError as e:
            raise DiffStoreError(f"Diff lookup failed for matter {matter_id}: {e}") from e

        diffs: Dict[str, List[str]] = {}
        for activity_id, raw in zip(ids, values):
            if not raw:
                continue
            try:
                entry = DiffEntry.from_dict(json.loads(raw))
            except (ValueError, KeyError, TypeError):
                logger.warning(
                    "diff_entry_unreadable",
                    extra={"matter_id": matter_id, "activity_id": activity_id},
                )
                continue
            if entry.fields:
                diffs[activity_id] = list(entry.fields)
        return diffs
