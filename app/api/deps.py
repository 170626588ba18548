"""
Shared API dependencies
"""
from fastapi import Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.models.enums import ErrorKind
from app.models.organization import Membership
from app.schemas.box import BoxSnapshot
from app.schemas.common import ActionResult
from app.services.box_service import load_box_snapshot

ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.STALE_WRITE: 409,
}


async def get_current_member(
    x_user_id: str = Header(..., description="Authenticated user id"),
    x_organization_id: str = Header(..., description="Active organization id"),
    db: AsyncSession = Depends(get_db)
) -> Membership:
    """
    Resolve the caller's membership in the active organization.

    Authentication happens upstream; these headers carry its result.

    Raises:
        HTTPException 403: If the user is not a member of the organization
    """
    result = await db.execute(
        select(Membership).where(
            Membership.organization_id == x_organization_id,
            Membership.user_id == x_user_id
        )
    )
    member = result.scalar_one_or_none()

    if not member:
        raise HTTPException(
            status_code=403,
            detail=f"User {x_user_id} is not a member of organization {x_organization_id}"
        )

    return member


def result_response(result: ActionResult) -> JSONResponse:
    """Serialize an ActionResult, mapping failure kinds to HTTP status codes."""
    if result.success:
        status_code = 200
    else:
        status_code = ERROR_STATUS_CODES.get(result.error_kind, 422)
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


async def get_snapshot_or_404(db: AsyncSession, member: Membership, box_id: str) -> BoxSnapshot:
    snapshot = await load_box_snapshot(db, member.organization_id, box_id)
    if not snapshot:
        raise HTTPException(
            status_code=404,
            detail=f"Box with id {box_id} not found"
        )
    return snapshot
