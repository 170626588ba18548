"""Document registration and re-classification API endpoints."""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.core.database import get_db
from app.models.box import Box
from app.models.document import Document
from app.models.organization import Membership
from app.schemas.document import DocumentCreate, DocumentReclassify, DocumentResponse
from app.services.activity_log import log_activity
from app.api.deps import get_current_member

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_document_or_404(db: AsyncSession, member: Membership, document_id: str) -> Document:
    result = await db.execute(
        select(Document)
        .join(Box, Box.id == Document.box_id)
        .where(Document.id == document_id, Box.organization_id == member.organization_id)
    )
    document = result.scalar_one_or_none()

    if not document:
        raise HTTPException(
            status_code=404,
            detail=f"Document with id {document_id} not found"
        )
    return document


@router.post("/boxes/{box_id}/documents", response_model=DocumentResponse, status_code=201)
async def add_document(
    box_id: str,
    document_data: DocumentCreate,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Attach an evidence document to a box.

    File storage and OCR happen elsewhere; this records the document type,
    the entered amounts, the AI-extracted fields and the file hash.

    Args:
        box_id: Box UUID
        document_data: Document metadata
        member: Caller's membership
        db: Database session

    Returns:
        DocumentResponse with the stored document

    Raises:
        HTTPException 404: If box not found
        HTTPException 409: If the same file is already attached to this box
    """
    result = await db.execute(
        select(Box).where(Box.id == box_id, Box.organization_id == member.organization_id)
    )
    box = result.scalar_one_or_none()

    if not box:
        raise HTTPException(
            status_code=404,
            detail=f"Box with id {box_id} not found"
        )

    if document_data.checksum:
        result = await db.execute(
            select(Document).where(
                Document.box_id == box_id,
                Document.checksum == document_data.checksum
            )
        )
        existing_doc = result.scalar_one_or_none()
        if existing_doc:
            raise HTTPException(
                status_code=409,
                detail=f"Document with hash {document_data.checksum} already exists in this box (filename: {existing_doc.filename})"
            )

    document = Document(box_id=box_id, **document_data.model_dump())
    db.add(document)
    await db.flush()

    log_activity(db, box_id, member.user_id, "DOCUMENT_ADDED", {
        "document_id": document.id,
        "doc_type": document.doc_type.value,
    })
    await db.flush()
    await db.refresh(document)

    logger.info("Document %s (%s) added to box %s", document.id, document.doc_type.value, box.box_number)
    return document


@router.patch("/documents/{document_id}", response_model=DocumentResponse)
async def reclassify_document(
    document_id: str,
    reclassify: DocumentReclassify,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Change the type of a document.

    Raises:
        HTTPException 404: If document not found
    """
    document = await _get_document_or_404(db, member, document_id)

    previous = document.doc_type
    if previous != reclassify.doc_type:
        document.doc_type = reclassify.doc_type
        log_activity(db, document.box_id, member.user_id, "DOCUMENT_RECLASSIFIED", {
            "document_id": document.id,
            "from": previous.value,
            "to": reclassify.doc_type.value,
        })
        await db.flush()
        await db.refresh(document)

    return document


@router.delete("/documents/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    member: Membership = Depends(get_current_member),
    db: AsyncSession = Depends(get_db)
):
    """Remove a document from its box.

    Raises:
        HTTPException 404: If document not found
    """
    document = await _get_document_or_404(db, member, document_id)

    log_activity(db, document.box_id, member.user_id, "DOCUMENT_REMOVED", {
        "document_id": document.id,
        "doc_type": document.doc_type.value,
    })
    await db.delete(document)
    await db.flush()
