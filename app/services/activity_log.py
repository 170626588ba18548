"""Activity log service."""

from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.activity_log import ActivityLog


def log_activity(
    db: AsyncSession,
    box_id: str,
    user_id: str,
    action: str,
    details: Optional[Dict[str, Any]] = None,
) -> ActivityLog:
    """Append an audit entry to the caller's transaction.

    Nothing is flushed here; the entry is written by the same commit as the
    change it records.

    Args:
        db: Database session
        box_id: Box the action applies to
        user_id: Acting user
        action: Action name (STATUS_CHANGED, MARK_PAID, ...)
        details: JSON-serializable details
    """
    entry = ActivityLog(box_id=box_id, user_id=user_id, action=action, details=details)
    db.add(entry)
    return entry
