"""
Database models package
"""
from app.models.enums import (
    BoxType,
    ExpenseType,
    BoxStatus,
    PaymentStatus,
    DocStatus,
    DocType,
    MemberRole,
    Severity,
    StepStatus,
    ErrorKind,
)
from app.models.organization import Organization, Membership, Contact
from app.models.box import Box
from app.models.document import Document
from app.models.activity_log import ActivityLog

__all__ = [
    "BoxType",
    "ExpenseType",
    "BoxStatus",
    "PaymentStatus",
    "DocStatus",
    "DocType",
    "MemberRole",
    "Severity",
    "StepStatus",
    "ErrorKind",
    "Organization",
    "Membership",
    "Contact",
    "Box",
    "Document",
    "ActivityLog",
]
