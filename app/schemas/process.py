"""
Process step Pydantic schemas
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from app.models.enums import StepStatus


class StepState(BaseModel):
    id: str
    label: str
    description: str
    status: StepStatus


class ProcessResponse(BaseModel):
    """Schema for the process timeline of a box"""
    box_id: str
    steps: List[StepState]
    current_step_id: Optional[str] = None
    progress: int = Field(..., ge=0, le=100)
