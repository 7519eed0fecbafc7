"""Pydantic schemas for the internal diff store API."""

from matter_diff.domain.schemas.diff import (
    DiffAppendRequest,
    DiffAppendResponse,
    DiffLookupRequest,
    DiffLookupResponse,
    StoredDiff,
)

__all__ = [
    "DiffAppendRequest",
    "DiffAppendResponse",
    "DiffLookupRequest",
    "DiffLookupResponse",
    "StoredDiff",
]
