"""Duplicate detection queries."""

from datetime import timedelta
from decimal import Decimal
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.models.box import Box
from app.models.document import Document
from app.rules.duplicates import find_checksum_duplicates, find_possible_duplicates
from app.schemas.box import BoxSnapshot, BoxSummary
from app.schemas.validation import DuplicateScanResponse


async def find_duplicate_candidates(
    db: AsyncSession,
    box: BoxSummary,
    window_days: int = settings.DUPLICATE_WINDOW_DAYS,
    amount_tolerance: Decimal = settings.DUPLICATE_AMOUNT_TOLERANCE,
) -> List[BoxSummary]:
    """Load boxes of the same organization that could be soft duplicates.

    The range query is a pre-filter on idx_box_duplicate_lookup; the final
    decision is made by app.rules.duplicates.
    """
    if box.total_amount <= 0:
        return []

    low = box.total_amount * (1 - amount_tolerance)
    high = box.total_amount / (1 - amount_tolerance)
    result = await db.execute(
        select(Box).where(
            Box.organization_id == box.organization_id,
            Box.id != box.id,
            Box.total_amount >= low,
            Box.total_amount <= high,
            Box.box_date >= box.box_date - timedelta(days=window_days),
            Box.box_date <= box.box_date + timedelta(days=window_days),
        )
    )
    return [BoxSummary.model_validate(row) for row in result.scalars().all()]


async def scan_duplicates(db: AsyncSession, box: BoxSnapshot) -> DuplicateScanResponse:
    """Soft duplicates by amount/counterparty/date plus exact file-hash matches."""
    candidates = await find_duplicate_candidates(db, box)
    matches = find_possible_duplicates(
        box,
        candidates,
        window_days=settings.DUPLICATE_WINDOW_DAYS,
        amount_tolerance=settings.DUPLICATE_AMOUNT_TOLERANCE,
    )

    checksums = [doc.checksum for doc in box.documents if doc.checksum]
    if checksums:
        result = await db.execute(
            select(Box.id, Box.box_number, Document.checksum)
            .join(Document, Document.box_id == Box.id)
            .where(
                Box.organization_id == box.organization_id,
                Box.id != box.id,
                Document.checksum.in_(checksums),
            )
        )
        exact = find_checksum_duplicates(box.documents, result.all())
        exact_ids = {m.box_id for m in exact}
        matches = exact + [m for m in matches if m.box_id not in exact_ids]

    return DuplicateScanResponse(box_id=box.id, possible_duplicate=bool(matches), matches=matches)
