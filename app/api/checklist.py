"""
Checklist API endpoints
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.models.organization import Membership
from app.rules.checklist import (
    calculate_completion_percent,
    determine_doc_status,
    get_box_checklist,
    is_all_required_complete,
)
from app.schemas.checklist import ChecklistResponse
from app.schemas.common import ActionResult
from app.services.box_service import toggle_checklist_item
from app.api.deps import get_current_member, get_snapshot_or_404, result_response

router = APIRouter()


@router.get("/{box_id}/checklist", response_model=ChecklistResponse)
async def get_box_checklist_status(
    box_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the checklist of a box.

    Items are derived from the box flags and its documents on every call.

    Args:
        box_id: Box UUID
        member: Caller's membership
        db: Database session

    Returns:
        ChecklistResponse with all items and overall completion

    Raises:
        HTTPException 404: If box not found
    """
    box = await get_snapshot_or_404(db, member, box_id)
    items = get_box_checklist(box)

    return ChecklistResponse(
        box_id=box.id,
        items=items,
        completion_percent=calculate_completion_percent(items),
        is_complete=is_all_required_complete(items),
        doc_status=determine_doc_status(items, box.no_receipt_reason),
    )


@router.post("/{box_id}/checklist/{item_id}/toggle", response_model=ActionResult)
async def toggle_box_checklist_item(
    box_id: str,
    item_id: str,
    expected_version: Optional[int] = Query(None, ge=1, description="Box version the caller last saw"),
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """
    Toggle a manually confirmable checklist item (isPaid, whtSent, hasCashReceipt).

    Blocked items (whtSent before the certificate is issued) are rejected
    with error_kind checklist_blocked.
    """
    result = await toggle_checklist_item(db, member, box_id, item_id, expected_version=expected_version)
    return result_response(result)
