"""Internal diff store API: batch append and batch lookup, scoped by matter id."""

from typing import Annotated

from fastapi import APIRouter, Depends

from matter_diff.api.dependencies import get_diff_repository
from matter_diff.domain.schemas.diff import (
    DiffAppendRequest,
    DiffAppendResponse,
    DiffLookupRequest,
    DiffLookupResponse,
    StoredDiff,
)
from matter_diff.domain.validators.diff_validator import normalize_activity_ids, normalize_diff_entries
from matter_diff.infrastructure.cache.diff_repository_redis import RedisDiffRepository

router = APIRouter()


@router.post("/matters/{matter_id}/diffs", response_model=DiffAppendResponse)
async def append_diffs(
    matter_id: str,
    body: DiffAppendRequest,
    repository: Annotated[RedisDiffRepository, Depends(get_diff_repository)] = ...,
):
    """Upsert diff entries by activity id. Invalid entries are skipped; none valid is a 422."""
    entries = normalize_diff_entries(matter_id, body.entries)
    stored = await repository.append(matter_id, entries)
    return DiffAppendResponse(stored=stored)


@router.post("/matters/{matter_id}/diffs/lookup", response_model=DiffLookupResponse)
async def lookup_diffs(
    matter_id: str,
    body: DiffLookupRequest,
    repository: Annotated[RedisDiffRepository, Depends(get_diff_repository)] = ...,
):
    """Changed fields for the requested activity ids that have a stored diff."""
    activity_ids = normalize_activity_ids(body.activity_ids)
    diffs = await repository.lookup(matter_id, activity_ids)
    return DiffLookupResponse(diffs={k: StoredDiff(fields=v) for k, v in diffs.items()})
