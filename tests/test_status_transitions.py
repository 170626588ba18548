"""Tests for the status transition table and role permissions."""

import pytest

from app.models.enums import BoxStatus, MemberRole
from app.rules.permissions import can_change_status, get_available_transitions, status_permission_error
from app.rules.status_transitions import (
    STATUS_TRANSITIONS,
    get_advance_transitions,
    get_primary_advance,
    get_revert_transitions,
    get_status_label,
    is_revert,
    is_valid_transition,
    requires_reason,
)


def _edges():
    for current, config in STATUS_TRANSITIONS.items():
        for transition in config["advance"] + config["revert"]:
            yield current, transition["to"]


def test_every_status_has_a_config():
    assert set(STATUS_TRANSITIONS) == set(BoxStatus)


def test_only_listed_edges_are_valid():
    edges = set(_edges())
    for current in BoxStatus:
        for target in BoxStatus:
            assert is_valid_transition(current, target) == ((current, target) in edges)


def test_no_self_transitions():
    for status in BoxStatus:
        assert not is_valid_transition(status, status)


def test_every_revert_requires_a_reason():
    for current in BoxStatus:
        for transition in get_revert_transitions(current):
            assert transition["requires_reason"]
            assert requires_reason(current, transition["to"])
            assert is_revert(current, transition["to"])


def test_advances_do_not_require_a_reason():
    for current in BoxStatus:
        for transition in get_advance_transitions(current):
            assert not requires_reason(current, transition["to"])
            assert not is_revert(current, transition["to"])


def test_unknown_edge_does_not_require_reason():
    assert not is_valid_transition(BoxStatus.DRAFT, BoxStatus.COMPLETED)
    assert not requires_reason(BoxStatus.DRAFT, BoxStatus.COMPLETED)


def test_main_path():
    assert is_valid_transition(BoxStatus.DRAFT, BoxStatus.SUBMITTED)
    assert is_valid_transition(BoxStatus.SUBMITTED, BoxStatus.PENDING)
    assert is_valid_transition(BoxStatus.PENDING, BoxStatus.COMPLETED)
    assert is_valid_transition(BoxStatus.COMPLETED, BoxStatus.PENDING)
    assert not is_valid_transition(BoxStatus.COMPLETED, BoxStatus.DRAFT)


def test_primary_advance():
    assert get_primary_advance(BoxStatus.DRAFT)["to"] == BoxStatus.SUBMITTED
    assert get_primary_advance(BoxStatus.PENDING)["to"] == BoxStatus.COMPLETED
    assert get_primary_advance(BoxStatus.COMPLETED) is None


def test_status_labels():
    assert get_status_label(BoxStatus.PENDING) == "In review"
    assert get_status_label(BoxStatus.NEED_DOCS) == "Needs documents"


@pytest.mark.parametrize("role", [MemberRole.STAFF, MemberRole.ACCOUNTING])
def test_only_elevated_roles_reopen_completed_box(role):
    assert not can_change_status(role, BoxStatus.COMPLETED, BoxStatus.PENDING)
    assert get_available_transitions(role, BoxStatus.COMPLETED) == []


@pytest.mark.parametrize("role", [MemberRole.OWNER, MemberRole.ADMIN])
def test_elevated_roles_reopen_completed_box(role):
    transitions = get_available_transitions(role, BoxStatus.COMPLETED)
    assert [t["to"] for t in transitions] == [BoxStatus.PENDING]


def test_staff_cannot_set_review_outcomes():
    for target in (BoxStatus.PENDING, BoxStatus.NEED_DOCS, BoxStatus.COMPLETED):
        assert status_permission_error(MemberRole.STAFF, BoxStatus.SUBMITTED, target) is not None
    assert can_change_status(MemberRole.ACCOUNTING, BoxStatus.PENDING, BoxStatus.COMPLETED)


def test_staff_transitions_from_submitted():
    transitions = get_available_transitions(MemberRole.STAFF, BoxStatus.SUBMITTED)
    assert [t["to"] for t in transitions] == [BoxStatus.DRAFT]


def test_accounting_transitions_from_submitted():
    transitions = get_available_transitions(MemberRole.ACCOUNTING, BoxStatus.SUBMITTED)
    assert [t["to"] for t in transitions] == [BoxStatus.PENDING, BoxStatus.NEED_DOCS, BoxStatus.DRAFT]
