"""Tests for the snapshot differ: equivalence rules, list-field sets, ordering, degenerate inputs."""

import pytest

from matter_diff.domain.differ import (
    TRACKED_FIELDS,
    are_equivalent,
    compute_changed_fields,
    extract_assignee_ids,
)


def _matter(**overrides) -> dict:
    base = {
        "id": "m-1",
        "title": "Smith v. Jones",
        "status": "open",
        "client_id": "c-1",
        "description": "Contract dispute",
        "billing_type": "hourly",
        "admin_hourly_rate": 100,
        "attorney_hourly_rate": 250.5,
        "practice_service_id": "svc-1",
        "payment_frequency": "monthly",
        "total_fixed_price": None,
        "contingency_percentage": None,
        "settlement_amount": {"amount": 1000, "currency": "USD"},
        "assignee_ids": ["u-1", "u-2"],
    }
    base.update(overrides)
    return base


def test_identical_snapshot_has_no_changes():
    snapshot = _matter()
    assert compute_changed_fields(snapshot, snapshot) == []


def test_equal_copies_have_no_changes():
    assert compute_changed_fields(_matter(), _matter()) == []


def test_nested_key_order_does_not_matter():
    before = _matter(settlement_amount={"amount": 1000, "currency": "USD"})
    after = _matter(settlement_amount={"currency": "USD", "amount": 1000})
    assert compute_changed_fields(before, after) == []


def test_assignee_reorder_is_not_a_change():
    before = _matter(assignee_ids=["u-1", "u-2", "u-3"])
    after = _matter(assignee_ids=["u-3", "u-1", "u-2"])
    assert compute_changed_fields(before, after) == []


def test_assignee_membership_change_flags_only_assignees():
    before = _matter(assignee_ids=["u-1", "u-2"])
    after = _matter(assignee_ids=["u-1", "u-3"])
    assert compute_changed_fields(before, after) == ["assignee_ids"]


def test_assignees_objects_compare_with_assignee_ids():
    before = _matter()
    del before["assignee_ids"]
    before["assignees"] = [{"id": "u-2", "name": "B"}, {"id": "u-1", "name": "A"}]
    after = _matter(assignee_ids=["u-1", "u-2"])
    assert compute_changed_fields(before, after) == []


def test_output_follows_tracked_field_order():
    before = _matter()
    after = _matter(title="Smith v. Jones (amended)", status="closed", assignee_ids=["u-9"], client_id="c-2")
    assert compute_changed_fields(before, after) == ["title", "status", "client_id", "assignee_ids"]


def test_status_and_title_change():
    changed = compute_changed_fields(_matter(), _matter(status="closed", title="New title"))
    assert changed == ["title", "status"]


@pytest.mark.parametrize("left,right", [(None, ""), ("", None), (None, None)])
def test_empty_values_are_equivalent(left, right):
    assert are_equivalent(left, right)


def test_missing_field_equals_null():
    before = _matter()
    del before["description"]
    after = _matter(description=None)
    assert compute_changed_fields(before, after) == []


def test_missing_vs_value_is_a_change():
    before = _matter()
    del before["description"]
    assert compute_changed_fields(before, _matter()) == ["description"]


def test_different_kinds_are_not_equivalent():
    assert not are_equivalent("100", 100)
    assert not are_equivalent(True, 1)
    assert not are_equivalent(0, "")


def test_int_and_float_with_same_value_are_equivalent():
    assert compute_changed_fields(_matter(admin_hourly_rate=100), _matter(admin_hourly_rate=100.0)) == []


def test_array_order_matters_for_plain_composites():
    assert not are_equivalent([1, 2], [2, 1])
    assert are_equivalent([{"b": 1, "a": 2}], [{"a": 2, "b": 1}])


def test_untracked_fields_are_ignored():
    before = _matter(updated_at="2024-01-01T00:00:00Z", notes="x")
    after = _matter(updated_at="2024-06-01T00:00:00Z", notes="y")
    assert compute_changed_fields(before, after) == []


def test_before_none_reports_every_tracked_field():
    assert compute_changed_fields(None, _matter()) == list(TRACKED_FIELDS)


def test_after_none_reports_nothing():
    assert compute_changed_fields(_matter(), None) == []


def test_non_dict_snapshot_is_treated_as_empty():
    assert compute_changed_fields("garbage", {"title": "x"}) == ["title"]


def test_extract_assignee_ids_skips_blank_and_non_string():
    assert extract_assignee_ids({"assignee_ids": ["u-1", "", "  ", 5, None, "u-2"]}) == ["u-1", "u-2"]
    assert extract_assignee_ids({"assignees": ["u-1", {"id": "u-2"}, {"name": "no id"}, 7]}) == ["u-1", "u-2"]
    assert extract_assignee_ids({}) == []
