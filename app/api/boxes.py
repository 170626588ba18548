"""
Box API endpoints
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from app.core.database import get_db
from app.models.activity_log import ActivityLog
from app.models.box import Box
from app.models.enums import BoxType, BoxStatus
from app.models.organization import Contact, Membership
from app.rules.checklist import get_box_checklist
from app.rules.permissions import get_available_transitions
from app.rules.process import (
    build_process_context,
    calculate_process_status,
    calculate_progress,
    get_current_step,
    get_process_steps,
)
from app.rules.requirements import check_completeness, get_required_documents
from app.rules.status_transitions import get_primary_advance, get_status_config, get_status_label, is_revert
from app.rules.validation import filter_dismissed, validate_box
from app.schemas.activity import ActivityLogResponse
from app.schemas.box import (
    BoxCreate,
    BoxSnapshot,
    BoxSummary,
    StatusChangeRequest,
    TransitionOption,
    TransitionsResponse,
)
from app.schemas.common import ActionResult
from app.schemas.process import ProcessResponse
from app.schemas.requirements import RequirementsResponse
from app.schemas.validation import DuplicateScanResponse, ValidationResult
from app.services.activity_log import log_activity
from app.services.box_service import change_box_status
from app.services.duplicate_service import find_duplicate_candidates, scan_duplicates
from app.api.deps import get_current_member, get_snapshot_or_404, result_response

logger = logging.getLogger(__name__)

router = APIRouter()

BOX_NUMBER_PREFIXES = {
    BoxType.EXPENSE: "EXP",
    BoxType.INCOME: "INC",
    BoxType.ADJUSTMENT: "ADJ",
}


async def _next_box_number(db: AsyncSession, organization_id: str, box_data: BoxCreate) -> str:
    result = await db.execute(
        select(func.count(Box.id)).where(
            Box.organization_id == organization_id,
            Box.box_type == box_data.box_type
        )
    )
    sequence = result.scalar_one() + 1
    prefix = BOX_NUMBER_PREFIXES[box_data.box_type]
    return f"{prefix}-{box_data.box_date:%Y%m}-{sequence:04d}"


@router.post("", response_model=BoxSnapshot, status_code=201)
async def create_box(
    box_data: BoxCreate,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new box in DRAFT status.

    Args:
        box_data: Box type, tax flags, amounts and counterparty
        member: Caller's membership
        db: Database session

    Returns:
        BoxSnapshot of the created box

    Raises:
        HTTPException 404: If the contact does not belong to the organization
        HTTPException 409: If the box number is already taken
    """
    if box_data.contact_id:
        result = await db.execute(
            select(Contact).where(
                Contact.id == box_data.contact_id,
                Contact.organization_id == member.organization_id
            )
        )
        if not result.scalar_one_or_none():
            raise HTTPException(
                status_code=404,
                detail=f"Contact with id {box_data.contact_id} not found"
            )

    fields = box_data.model_dump()
    box_number = fields.pop("box_number") or await _next_box_number(db, member.organization_id, box_data)
    box = Box(organization_id=member.organization_id, box_number=box_number, **fields)
    db.add(box)

    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=409,
            detail=f"Box number {box_number} already exists"
        )

    log_activity(db, box.id, member.user_id, "CREATED", {"box_number": box_number})
    await db.commit()
    logger.info("Box %s created by %s", box_number, member.user_id)

    return await get_snapshot_or_404(db, member, box.id)


@router.get("", response_model=List[BoxSummary])
async def list_boxes(
    status: Optional[BoxStatus] = Query(None, description="Filter by status"),
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """List the organization's boxes, newest first."""
    query = select(Box).where(Box.organization_id == member.organization_id)
    if status:
        query = query.where(Box.status == status)
    result = await db.execute(query.order_by(Box.created_at.desc()))
    return [BoxSummary.model_validate(box) for box in result.scalars().all()]


@router.get("/{box_id}", response_model=BoxSnapshot)
async def get_box_detail(
    box_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a box with its contact and documents.

    Raises:
        HTTPException 404: If box not found in the caller's organization
    """
    return await get_snapshot_or_404(db, member, box_id)


@router.get("/{box_id}/transitions", response_model=TransitionsResponse)
async def get_box_transitions(
    box_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """List the status moves the caller's role may make from the current status."""
    box = await get_snapshot_or_404(db, member, box_id)
    primary = get_primary_advance(box.status)
    options = [
        TransitionOption(
            to=t["to"],
            label=t["label"],
            requires_reason=t["requires_reason"],
            direction="revert" if is_revert(box.status, t["to"]) else "advance",
            primary=primary is not None and primary["to"] == t["to"],
        )
        for t in get_available_transitions(member.role, box.status)
    ]
    return TransitionsResponse(
        box_id=box.id,
        status=box.status,
        status_label=get_status_label(box.status),
        status_description=get_status_config(box.status)["description"],
        version=box.version,
        transitions=options,
    )


@router.post("/{box_id}/status", response_model=ActionResult)
async def change_status(
    box_id: str,
    request: StatusChangeRequest,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Move a box to another status.

    The body is always an ActionResult. Failures use 404 (not found),
    403 (permission denied), 409 (stale write) or 422 (invalid transition,
    missing reason).
    """
    result = await change_box_status(
        db,
        member,
        box_id,
        request.target_status,
        reason=request.reason,
        expected_version=request.expected_version,
    )
    return result_response(result)


@router.get("/{box_id}/requirements", response_model=RequirementsResponse)
async def get_box_requirements(
    box_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Required documents for the box and which of them are present."""
    box = await get_snapshot_or_404(db, member, box_id)
    requirements = get_required_documents(box.box_type, box.expense_type, box.has_vat, box.has_wht)
    return RequirementsResponse(
        box_id=box.id,
        requirements=requirements,
        completeness=check_completeness(requirements, box.uploaded_doc_types),
    )


@router.get("/{box_id}/process", response_model=ProcessResponse)
async def get_box_process(
    box_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Process timeline with the current step and overall progress."""
    box = await get_snapshot_or_404(db, member, box_id)
    steps = get_process_steps(box.box_type, box.expense_type, box.has_vat, box.has_wht)
    ctx = build_process_context(box, get_box_checklist(box))
    current = get_current_step(steps, ctx)
    return ProcessResponse(
        box_id=box.id,
        steps=calculate_process_status(steps, ctx),
        current_step_id=current.id if current else None,
        progress=calculate_progress(steps, ctx),
    )


@router.get("/{box_id}/validation", response_model=ValidationResult)
async def get_box_validation(
    box_id: str,
    dismissed: List[str] = Query([], description="Issue ids the caller has dismissed"),
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Run the validation rules against the box.

    Dismissals are not stored; callers pass the ids they have dismissed and
    dismissible issues with those ids are left out.
    """
    box = await get_snapshot_or_404(db, member, box_id)
    candidates = await find_duplicate_candidates(db, box)
    result = validate_box(box, box.documents, other_boxes=candidates)
    if dismissed:
        result = filter_dismissed(result, dismissed)
    return result


@router.get("/{box_id}/duplicates", response_model=DuplicateScanResponse)
async def get_box_duplicates(
    box_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Soft duplicates and exact file-hash duplicates within the organization."""
    box = await get_snapshot_or_404(db, member, box_id)
    return await scan_duplicates(db, box)


@router.get("/{box_id}/activity", response_model=List[ActivityLogResponse])
async def get_box_activity(
    box_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Audit trail of the box, oldest first."""
    box = await get_snapshot_or_404(db, member, box_id)
    result = await db.execute(
        select(ActivityLog)
        .where(ActivityLog.box_id == box.id)
        .order_by(ActivityLog.created_at, ActivityLog.id)
    )
    return result.scalars().all()
