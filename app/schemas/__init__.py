"""
Pydantic schemas for request/response validation
"""
from app.schemas.common import ActionResult
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    MemberCreate,
    MemberResponse,
    ContactCreate,
    ContactResponse,
)
from app.schemas.document import DocumentCreate, DocumentReclassify, DocumentSnapshot, DocumentResponse
from app.schemas.box import BoxCreate, BoxSummary, BoxSnapshot, StatusChangeRequest, TransitionsResponse
from app.schemas.checklist import ChecklistItem, ChecklistResponse
from app.schemas.requirements import RequiredDocument, CompletenessResult, RequirementsResponse
from app.schemas.process import StepState, ProcessResponse
from app.schemas.validation import ValidationIssue, ValidationResult, DuplicateMatch, DuplicateScanResponse
from app.schemas.activity import ActivityLogResponse

__all__ = [
    "ActionResult",
    "OrganizationCreate",
    "OrganizationResponse",
    "MemberCreate",
    "MemberResponse",
    "ContactCreate",
    "ContactResponse",
    "DocumentCreate",
    "DocumentReclassify",
    "DocumentSnapshot",
    "DocumentResponse",
    "BoxCreate",
    "BoxSummary",
    "BoxSnapshot",
    "StatusChangeRequest",
    "TransitionsResponse",
    "ChecklistItem",
    "ChecklistResponse",
    "RequiredDocument",
    "CompletenessResult",
    "RequirementsResponse",
    "StepState",
    "ProcessResponse",
    "ValidationIssue",
    "ValidationResult",
    "DuplicateMatch",
    "DuplicateScanResponse",
    "ActivityLogResponse",
]
