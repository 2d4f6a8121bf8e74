"""Activity log writer for administrative actions."""
from typing import Optional

from sqlalchemy.orm import Session

from .models import ActivityLog
from .schemas import TokenData


def record_activity(
    db: Session,
    actor: TokenData,
    action: str,
    details: str,
    gym_id: Optional[int] = None,
) -> ActivityLog:
    """Stage an activity entry in the caller's transaction; the caller commits."""
    entry = ActivityLog(
        action=action,
        details=details,
        actor_role=actor.role.value,
        actor_id=actor.account_id,
        gym_id=gym_id,
    )
    db.add(entry)
    return entry
