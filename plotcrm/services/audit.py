"""
Activity log service.
Append-only trail of every mutating action.
"""
import uuid
from typing import List

import structlog
from sqlalchemy.orm import Session

from ..errors import ValidationError
from ..models.models import ActivityLog, ACTIVITY_ENTITY_TYPES, utcnow
from .permissions import Caller

MAX_ACTIVITY_LIMIT = 100

logger = structlog.get_logger()


def record(
    db: Session,
    actor: Caller,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID,
    details: str,
) -> ActivityLog:
    """
    Append an activity entry to the current unit of work.

    The entry is flushed but not committed: it becomes visible together with
    the mutation it describes, and a failure here fails that mutation too.

    Args:
        db: Database session (inside ``unit_of_work``)
        actor: Caller performing the action
        action: Human-readable action name (e.g. "Created Booking")
        entity_type: lead|plot|project|payment|user
        entity_id: ID of the affected entity
        details: Human-readable summary

    Returns:
        The flushed ActivityLog row
    """
    if entity_type not in ACTIVITY_ENTITY_TYPES:
        raise ValidationError(f"Unknown activity entity type: {entity_type}")
    entry = ActivityLog(
        user_id=actor.id,
        user_name=actor.email,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        created_at=utcnow(),
    )
    db.add(entry)
    db.flush()
    logger.info("activity_recorded", action=action, entity_type=entity_type, entity_id=str(entity_id), user_id=str(actor.id))
    return entry


def recent_activity(db: Session, limit: int = 20) -> List[ActivityLog]:
    """Newest entries first, bounded by ``limit``."""
    limit = min(max(1, limit), MAX_ACTIVITY_LIMIT)
    return (
        db.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
