"""
Validation and duplicate detection Pydantic schemas
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from app.models.enums import Severity


class ValidationIssue(BaseModel):
    id: str = Field(..., description="Stable per box, used by callers to dismiss")
    severity: Severity
    code: str
    message: str
    suggestion: Optional[str] = None
    field: Optional[str] = None
    can_dismiss: bool = False


class ValidationSummary(BaseModel):
    errors: int = 0
    warnings: int = 0
    info: int = 0


class ValidationResult(BaseModel):
    is_valid: bool
    has_warnings: bool
    issues: List[ValidationIssue]
    summary: ValidationSummary


class DuplicateMatch(BaseModel):
    box_id: str
    box_number: str
    similarity: int = Field(..., ge=0, le=100)
    reason: str
    match_type: str = Field("similar", description="similar (soft) or exact (file hash)")


class DuplicateScanResponse(BaseModel):
    """Schema for duplicate detection on one box"""
    box_id: str
    possible_duplicate: bool
    matches: List[DuplicateMatch]
