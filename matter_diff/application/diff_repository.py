"""Diff store protocol. Application layer depends on this; infrastructure implements it."""

from typing import Dict, List, Protocol, Sequence

from matter_diff.domain.models.activity import DiffEntry


class DiffRepository(Protocol):
    """Matter-scoped store of diff entries keyed by activity id."""

    async def append(self, matter_id: str, entries: Sequence[DiffEntry]) -> int:
        """Upsert entries by activity_id (last write wins). Returns number written. Raises DiffStoreError."""
        ...

    async def lookup(self, matter_id: str, activity_ids: Sequence[str]) -> Dict[str, List[str]]:
        """Return {activity_id: fields} for ids that have a stored diff. Raises DiffStoreError."""
        ...
