"""
Discriminated result returned by every box mutation
"""
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from app.models.enums import ErrorKind


class ActionResult(BaseModel):
    """Uniform mutation outcome.

    Rejected preconditions (illegal transition, missing reason, missing role,
    stale version, box not found) come back as `success=False` with a human
    message instead of an exception, so callers always branch on `success`.
    """
    success: bool
    message: Optional[str] = Field(None, description="Human readable outcome on success")
    error: Optional[str] = Field(None, description="Human readable reason on failure")
    error_kind: Optional[ErrorKind] = Field(None, description="Machine readable failure category")
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def ok(cls, message: str, data: Optional[Dict[str, Any]] = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error_kind: ErrorKind, error: str) -> "ActionResult":
        return cls(success=False, error=error, error_kind=error_kind)
