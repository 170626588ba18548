"""
Activity log Pydantic schemas
"""
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel


class ActivityLogResponse(BaseModel):
    id: str
    box_id: str
    user_id: str
    action: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True
