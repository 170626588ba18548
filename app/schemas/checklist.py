"""
Checklist Pydantic schemas
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from app.models.enums import DocType, DocStatus


class ChecklistItem(BaseModel):
    """One derived checklist entry, recomputed on every read"""
    id: str = Field(..., description="Stable item id (isPaid, hasTaxInvoice, ...)")
    label: str
    description: str
    required: bool
    completed: bool
    related_doc_type: Optional[DocType] = Field(None, description="Document type that satisfies this item")
    can_toggle: bool = Field(False, description="Whether a member may mark it without evidence")
    blocked_by: List[str] = Field(default_factory=list, description="Incomplete prerequisite item ids")


class ChecklistResponse(BaseModel):
    """Schema for a box checklist"""
    box_id: str
    items: List[ChecklistItem]
    completion_percent: int = Field(..., ge=0, le=100)
    is_complete: bool
    doc_status: DocStatus
