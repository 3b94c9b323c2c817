import json
from typing import List, Optional, Union

from sqlalchemy.orm import Session, joinedload

from logger import get_logger
from models import ActivityLog

logger = get_logger("activity")


def record_activity(
    db: Session,
    action: str,
    entity: str,
    user_id: str,
    entity_id: Optional[str] = None,
    details: Union[str, dict, None] = None,
    task_id: Optional[str] = None,
) -> None:
    """Append an audit entry.

    Best effort: a failure is logged and the session rolled back, but the
    caller's operation carries on as if the write had succeeded.
    """
    try:
        if isinstance(details, dict):
            details = json.dumps(details, default=str)
        db.add(ActivityLog(
            action=action,
            entity=entity,
            entity_id=entity_id,
            details=details,
            user_id=user_id,
            task_id=task_id,
        ))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to log activity %s on %s %s", action, entity, entity_id)


def list_activity(db: Session, user_id: str, limit: int) -> List[ActivityLog]:
    return (
        db.query(ActivityLog)
        .options(joinedload(ActivityLog.task))
        .filter(ActivityLog.user_id == user_id)
        .order_by(ActivityLog.created_at.desc())
        .limit(limit)
        .all()
    )
