"""Unit tests for EnrichmentReader: pass-through on bad input, single batch lookup, annotation."""

import json
from unittest.mock import AsyncMock

import pytest

from matter_diff.application.enrichment import EnrichmentReader
from matter_diff.application.exceptions import DiffStoreError


@pytest.fixture
def repository():
    r = AsyncMock()
    r.lookup = AsyncMock(return_value={})
    return r


@pytest.fixture
def reader(repository):
    return EnrichmentReader(diff_repository=repository)


@pytest.mark.parametrize("raw", [b"not json", b"{\"truncated\": ", b"\xff\xfe", b""])
async def test_malformed_payload_is_returned_byte_for_byte(reader, repository, raw):
    assert await reader.enrich_activity_list("M1", raw) is raw
    repository.lookup.assert_not_awaited()


async def test_unexpected_shape_is_returned_unchanged(reader, repository):
    raw = b'{"message":  "no activity here"}'
    assert await reader.enrich_activity_list("M1", raw) is raw
    repository.lookup.assert_not_awaited()


async def test_matched_entries_get_changed_fields(reader, repository):
    payload = {
        "data": {
            "activity": [
                {"id": "a-1", "action": "matter_updated", "metadata": {"ip": "x"}},
                {"id": "a-2", "action": "matter_updated"},
                {"id": "a-3", "action": "note_added"},
            ],
            "pagination": {"cursor": "abc"},
        }
    }
    repository.lookup.return_value = {"a-1": ["status", "title"], "a-3": ["description"]}

    enriched = json.loads(await reader.enrich_activity_list("M1", json.dumps(payload).encode()))

    repository.lookup.assert_awaited_once_with("M1", ["a-1", "a-2", "a-3"])
    items = enriched["data"]["activity"]
    assert items[0]["metadata"] == {"ip": "x", "changed_fields": ["status", "title"]}
    assert items[1] == {"id": "a-2", "action": "matter_updated"}
    assert items[2]["metadata"] == {"changed_fields": ["description"]}
    assert enriched["data"]["pagination"] == {"cursor": "abc"}


async def test_bare_list_payload(reader, repository):
    repository.lookup.return_value = {"a-1": ["title"]}
    raw = json.dumps([{"id": "a-1"}]).encode()
    assert json.loads(await reader.enrich_activity_list("M1", raw)) == [
        {"id": "a-1", "metadata": {"changed_fields": ["title"]}}
    ]


async def test_no_matches_returns_original_bytes(reader, repository):
    raw = b'[{"id": "a-1"},   {"id": "a-2"}]'
    assert await reader.enrich_activity_list("M1", raw) is raw
    repository.lookup.assert_awaited_once()


async def test_lookup_failure_passes_through(reader, repository):
    repository.lookup.side_effect = DiffStoreError("redis down")
    raw = b'[{"id": "a-1"}]'
    assert await reader.enrich_activity_list("M1", raw) is raw


async def test_items_without_ids_skip_lookup(reader, repository):
    raw = b'[{"action": "matter_updated"}, {"id": ""}]'
    assert await reader.enrich_activity_list("M1", raw) is raw
    repository.lookup.assert_not_awaited()


async def test_whitespace_padded_id_is_looked_up_and_annotated(reader, repository):
    repository.lookup.return_value = {"a-1": ["title"]}
    raw = json.dumps([{"id": " a-1 "}]).encode()

    enriched = json.loads(await reader.enrich_activity_list("M1", raw))

    repository.lookup.assert_awaited_once_with("M1", ["a-1"])
    assert enriched == [{"id": " a-1 ", "metadata": {"changed_fields": ["title"]}}]
