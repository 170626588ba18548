"""
Role-based permission checks layered on top of the status transition table
"""
from typing import List, Optional
from app.models.enums import BoxStatus, MemberRole
from app.rules.status_transitions import (
    StatusTransition,
    get_advance_transitions,
    get_revert_transitions,
)

ELEVATED_ROLES = (MemberRole.OWNER, MemberRole.ADMIN)
ACCOUNTING_ROLES = (MemberRole.OWNER, MemberRole.ADMIN, MemberRole.ACCOUNTING)

# Review outcomes only accounting roles may set
ACCOUNTING_TARGETS = (BoxStatus.PENDING, BoxStatus.NEED_DOCS, BoxStatus.COMPLETED)


def can_manage_members(role: MemberRole) -> bool:
    return role in ELEVATED_ROLES


def can_manage_contacts(role: MemberRole) -> bool:
    return role in ACCOUNTING_ROLES


def status_permission_error(role: MemberRole, current: BoxStatus, target: BoxStatus) -> Optional[str]:
    """Return why the role may not make this move, or None when allowed.

    Does not check that the move exists in the transition table.
    """
    if current == BoxStatus.COMPLETED and role not in ELEVATED_ROLES:
        return "Only an owner or admin can reopen a completed box"
    if target in ACCOUNTING_TARGETS and role not in ACCOUNTING_ROLES:
        return f"Only accounting roles can move a box to {target.value}"
    return None


def can_change_status(role: MemberRole, current: BoxStatus, target: BoxStatus) -> bool:
    return status_permission_error(role, current, target) is None


def get_available_transitions(role: MemberRole, current: BoxStatus) -> List[StatusTransition]:
    """List the transitions out of current that this role is allowed to pick"""
    candidates = get_advance_transitions(current) + get_revert_transitions(current)
    return [t for t in candidates if can_change_status(role, current, t["to"])]
