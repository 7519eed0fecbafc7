"""Pydantic schemas for diff store append/lookup. Entry-level validation lives in the domain validators."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class DiffAppendRequest(BaseModel):
    """Batch of diff entries for one matter. Invalid entries are skipped, not rejected."""

    entries: List[Any] = Field(default_factory=list)


class DiffLookupRequest(BaseModel):
    """Activity ids to look up in one matter's diff store."""

    activity_ids: List[Any] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class DiffAppendResponse(BaseModel):
    success: bool = True
    stored: int


class StoredDiff(BaseModel):
    fields: List[str]


class DiffLookupResponse(BaseModel):
    """Only ids that have a stored diff appear in `diffs`."""

    success: bool = True
    diffs: Dict[str, StoredDiff] = Field(default_factory=dict)
