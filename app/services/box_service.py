"""Box lifecycle service: loading snapshots and the authorized mutations."""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError
from app.models.box import Box
from app.models.enums import BoxStatus, ErrorKind, PaymentStatus, NO_CASH_RECEIPT
from app.models.organization import Membership
from app.rules.checklist import TOGGLEABLE_ITEMS, find_item, get_box_checklist
from app.rules.permissions import status_permission_error
from app.rules.status_transitions import get_status_label, is_valid_transition, requires_reason
from app.schemas.box import BoxSnapshot
from app.schemas.common import ActionResult
from app.services.activity_log import log_activity

logger = logging.getLogger(__name__)


async def get_box(db: AsyncSession, organization_id: str, box_id: str) -> Optional[Box]:
    """Load a box with its contact and documents, scoped to one organization."""
    result = await db.execute(
        select(Box)
        .options(selectinload(Box.documents), selectinload(Box.contact))
        .where(Box.id == box_id, Box.organization_id == organization_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def to_snapshot(box: Box) -> BoxSnapshot:
    return BoxSnapshot.model_validate(box)


async def load_box_snapshot(db: AsyncSession, organization_id: str, box_id: str) -> Optional[BoxSnapshot]:
    box = await get_box(db, organization_id, box_id)
    return to_snapshot(box) if box else None


def _apply_status_timestamps(box: Box, target: BoxStatus, now: datetime) -> None:
    if target == BoxStatus.DRAFT:
        box.submitted_at = None
        box.booked_at = None
    elif target == BoxStatus.SUBMITTED:
        box.submitted_at = box.submitted_at or now
        box.booked_at = None
    elif target == BoxStatus.COMPLETED:
        box.booked_at = now
    else:
        box.booked_at = None


async def _commit(db: AsyncSession, box_id: str) -> Optional[ActionResult]:
    """Commit the pending change; a concurrent update surfaces as a stale write."""
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning("Stale write on box %s, concurrent update detected", box_id)
        return ActionResult.fail(ErrorKind.STALE_WRITE, "Box was changed by someone else, reload and try again")
    return None


async def change_box_status(
    db: AsyncSession,
    member: Membership,
    box_id: str,
    target: BoxStatus,
    reason: Optional[str] = None,
    expected_version: Optional[int] = None,
) -> ActionResult:
    """Move a box to another status.

    Checks run in order: box exists in the caller's organization, version
    matches, role allows the move, the edge exists, a reason is given when
    the edge needs one. The status update and its STATUS_CHANGED log entry
    are committed together.

    Args:
        db: Database session
        member: Caller's membership (organization and role)
        box_id: Box UUID
        target: Requested status
        reason: Free text, required for backward moves
        expected_version: Box version the caller last read

    Returns:
        ActionResult; failures carry error_kind
    """
    box = await get_box(db, member.organization_id, box_id)
    if box is None:
        return ActionResult.fail(ErrorKind.NOT_FOUND, f"Box with id {box_id} not found")

    if expected_version is not None and expected_version != box.version:
        logger.info("Rejected status change on box %s: version %s, caller had %s",
                    box.id, box.version, expected_version)
        return ActionResult.fail(ErrorKind.STALE_WRITE, "Box was changed by someone else, reload and try again")

    current = box.status
    denied = status_permission_error(member.role, current, target)
    if denied:
        logger.info("Denied status change on box %s for %s (%s): %s -> %s",
                    box.id, member.user_id, member.role.value, current.value, target.value)
        return ActionResult.fail(ErrorKind.PERMISSION_DENIED, denied)

    if not is_valid_transition(current, target):
        return ActionResult.fail(
            ErrorKind.INVALID_TRANSITION,
            f"Cannot move a box from {get_status_label(current)} to {get_status_label(target)}",
        )

    reason = reason.strip() if reason else None
    if requires_reason(current, target) and not reason:
        return ActionResult.fail(ErrorKind.REASON_REQUIRED, "A reason is required to move the box back")

    box.status = target
    _apply_status_timestamps(box, target, datetime.utcnow())
    log_activity(db, box.id, member.user_id, "STATUS_CHANGED", {
        "from": current.value,
        "to": target.value,
        "reason": reason,
    })

    stale = await _commit(db, box_id)
    if stale:
        return stale

    logger.info("Box %s moved %s -> %s by %s", box.box_number, current.value, target.value, member.user_id)
    return ActionResult.ok(
        f"Status changed to {get_status_label(target)}",
        data={"box_id": box.id, "status": target.value, "version": box.version},
    )


async def toggle_checklist_item(
    db: AsyncSession,
    member: Membership,
    box_id: str,
    item_id: str,
    expected_version: Optional[int] = None,
) -> ActionResult:
    """Flip the persisted flag behind a toggleable checklist item.

    isPaid switches the payment status between PAID and UNPAID, whtSent
    flips the sent flag (only once the certificate is issued), and
    hasCashReceipt records or clears the "no cash receipt" confirmation.
    """
    box = await get_box(db, member.organization_id, box_id)
    if box is None:
        return ActionResult.fail(ErrorKind.NOT_FOUND, f"Box with id {box_id} not found")

    if expected_version is not None and expected_version != box.version:
        return ActionResult.fail(ErrorKind.STALE_WRITE, "Box was changed by someone else, reload and try again")

    items = get_box_checklist(to_snapshot(box))
    item = find_item(items, item_id)
    if item is None or item_id not in TOGGLEABLE_ITEMS:
        return ActionResult.fail(ErrorKind.UNKNOWN_ITEM, f"Checklist item {item_id} cannot be toggled on this box")

    if not item.can_toggle:
        blockers = ", ".join(b.label for b in items if b.id in item.blocked_by)
        return ActionResult.fail(ErrorKind.CHECKLIST_BLOCKED, f"{item.label} is blocked until {blockers} is complete")

    if item_id == "isPaid":
        value = not box.is_paid
        box.payment_status = PaymentStatus.PAID if value else PaymentStatus.UNPAID
        box.paid_amount = box.total_amount if value else 0
        action = "MARK_PAID" if value else "MARK_UNPAID"
    elif item_id == "whtSent":
        value = not box.wht_sent
        box.wht_sent = value
        action = "WHT_SENT" if value else "WHT_UNSENT"
    else:
        value = not box.no_cash_receipt_confirmed
        box.no_receipt_reason = NO_CASH_RECEIPT if value else None
        action = "NO_CASH_RECEIPT" if value else "HAS_CASH_RECEIPT"

    log_activity(db, box.id, member.user_id, action, {"item": item_id, "value": value})

    stale = await _commit(db, box_id)
    if stale:
        return stale

    logger.info("Box %s checklist %s set to %s by %s", box.box_number, item_id, value, member.user_id)
    return ActionResult.ok(
        f"{item.label} updated",
        data={"box_id": box.id, "item_id": item_id, "value": value, "version": box.version},
    )
