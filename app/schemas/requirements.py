"""
Required document Pydantic schemas
"""
from typing import List
from pydantic import BaseModel, Field
from app.models.enums import DocType


class RequiredDocument(BaseModel):
    id: str
    doc_type: DocType = Field(..., description="Primary document type for this requirement")
    label: str
    description: str = ""
    required: bool = True
    matching_doc_types: List[DocType] = Field(..., min_length=1, description="Any of these satisfies it")


class CompletenessResult(BaseModel):
    is_complete: bool
    missing: List[RequiredDocument]
    completed: List[RequiredDocument]


class RequirementsResponse(BaseModel):
    """Schema for the requirements view of a box"""
    box_id: str
    requirements: List[RequiredDocument]
    completeness: CompletenessResult
