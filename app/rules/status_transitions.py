"""
Box status transition table.

DRAFT -> SUBMITTED -> PENDING -> COMPLETED
             |  ^        |
             v  |        v
            NEED_DOCS <--+

Every backward edge requires a reason. The table is role-agnostic; role
checks live in app.rules.permissions.
"""
from typing import Dict, List, Optional, TypedDict
from app.models.enums import BoxStatus


class StatusTransition(TypedDict):
    to: BoxStatus
    label: str
    requires_reason: bool


class StatusConfig(TypedDict):
    label: str
    description: str
    advance: List[StatusTransition]
    revert: List[StatusTransition]


STATUS_TRANSITIONS: Dict[BoxStatus, StatusConfig] = {
    BoxStatus.DRAFT: {
        "label": "Draft",
        "description": "Created, documents are still being collected",
        "advance": [
            {"to": BoxStatus.SUBMITTED, "label": "Submit to accounting", "requires_reason": False},
        ],
        "revert": [],
    },
    BoxStatus.SUBMITTED: {
        "label": "Submitted",
        "description": "Sent to accounting, waiting for review",
        "advance": [
            {"to": BoxStatus.PENDING, "label": "Start review", "requires_reason": False},
            {"to": BoxStatus.NEED_DOCS, "label": "Request more documents", "requires_reason": False},
        ],
        "revert": [
            {"to": BoxStatus.DRAFT, "label": "Back to draft", "requires_reason": True},
        ],
    },
    BoxStatus.PENDING: {
        "label": "In review",
        "description": "Accounting is checking the documents",
        "advance": [
            {"to": BoxStatus.COMPLETED, "label": "Mark as booked", "requires_reason": False},
            {"to": BoxStatus.NEED_DOCS, "label": "Request more documents", "requires_reason": False},
        ],
        "revert": [
            {"to": BoxStatus.DRAFT, "label": "Back to draft", "requires_reason": True},
        ],
    },
    BoxStatus.NEED_DOCS: {
        "label": "Needs documents",
        "description": "Accounting asked for additional documents",
        "advance": [
            {"to": BoxStatus.SUBMITTED, "label": "Resubmit", "requires_reason": False},
        ],
        "revert": [
            {"to": BoxStatus.DRAFT, "label": "Back to draft", "requires_reason": True},
        ],
    },
    BoxStatus.COMPLETED: {
        "label": "Completed",
        "description": "Booked in the ledger",
        "advance": [],
        "revert": [
            {"to": BoxStatus.PENDING, "label": "Reopen", "requires_reason": True},
        ],
    },
}


def get_status_config(status: BoxStatus) -> StatusConfig:
    return STATUS_TRANSITIONS[status]


def get_advance_transitions(status: BoxStatus) -> List[StatusTransition]:
    """Forward transitions out of a status"""
    config = STATUS_TRANSITIONS.get(status)
    return list(config["advance"]) if config else []


def get_revert_transitions(status: BoxStatus) -> List[StatusTransition]:
    """Backward transitions out of a status"""
    config = STATUS_TRANSITIONS.get(status)
    return list(config["revert"]) if config else []


def _find_transition(current: BoxStatus, target: BoxStatus) -> Optional[StatusTransition]:
    for transition in get_advance_transitions(current) + get_revert_transitions(current):
        if transition["to"] == target:
            return transition
    return None


def is_valid_transition(current: BoxStatus, target: BoxStatus) -> bool:
    """Check whether the table has an edge from current to target."""
    return _find_transition(current, target) is not None


def requires_reason(current: BoxStatus, target: BoxStatus) -> bool:
    """Check whether moving from current to target needs a reason.

    Unknown edges return False; callers check validity first.
    """
    transition = _find_transition(current, target)
    return bool(transition and transition["requires_reason"])


def is_revert(current: BoxStatus, target: BoxStatus) -> bool:
    return any(t["to"] == target for t in get_revert_transitions(current))


def get_primary_advance(status: BoxStatus) -> Optional[StatusTransition]:
    transitions = get_advance_transitions(status)
    return transitions[0] if transitions else None


def get_status_label(status: BoxStatus) -> str:
    config = STATUS_TRANSITIONS.get(status)
    return config["label"] if config else str(status)
