"""
Document Pydantic schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from app.models.enums import DocType


class DocumentCreate(BaseModel):
    """Schema for attaching a document to a box"""
    doc_type: DocType = Field(DocType.OTHER, description="Document classification")
    filename: Optional[str] = Field(None, max_length=255)
    checksum: Optional[str] = Field(None, pattern=r"^[0-9a-f]{64}$", description="SHA256 hash of file content")
    amount: Optional[Decimal] = Field(None, ge=0, description="Manually entered amount")
    vat_amount: Optional[Decimal] = Field(None, ge=0)
    doc_number: Optional[str] = None
    doc_date: Optional[date] = None
    ai_extracted: Optional[Dict[str, Any]] = Field(None, description="Fields read by OCR/AI")


class DocumentReclassify(BaseModel):
    """Schema for changing the document type"""
    doc_type: DocType


class DocumentSnapshot(BaseModel):
    """Document as seen by the rule modules"""
    id: str
    doc_type: DocType
    filename: Optional[str] = None
    checksum: Optional[str] = None
    amount: Optional[Decimal] = None
    vat_amount: Optional[Decimal] = None
    doc_number: Optional[str] = None
    doc_date: Optional[date] = None
    ai_extracted: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True

    def ai_value(self, key: str) -> Optional[Any]:
        """Read one AI-extracted field, None when absent or empty"""
        if not self.ai_extracted:
            return None
        value = self.ai_extracted.get(key)
        return value if value not in ("", None) else None


class DocumentResponse(DocumentSnapshot):
    """Schema for document response"""
    box_id: str
    created_at: datetime
