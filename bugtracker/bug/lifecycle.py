# bugtracker/bug/lifecycle.py
import math
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from bugtracker.bug.models import Bug, utcnow

DAY = timedelta(days=1)
HOUR = timedelta(hours=1)


async def resolve(db: AsyncSession, bug: Bug, resolved_by: str, resolution: str) -> Bug:
    """Mark ``bug`` resolved now, replacing any earlier resolution timestamp."""
    bug.status = "resolved"
    bug.resolved_by = resolved_by
    bug.resolution = resolution
    bug.resolved_at = utcnow()
    await db.flush()
    return bug


async def assign_to(db: AsyncSession, bug: Bug, assignee: str) -> Bug:
    """Hand ``bug`` to ``assignee``; open bugs move to in-progress."""
    bug.assignee = assignee
    if bug.status == "open":
        bug.status = "in-progress"
    await db.flush()
    return bug


def age_in_days(created_at: datetime | None, now: datetime | None = None) -> int | None:
    if created_at is None:
        return None
    now = now or utcnow()
    return math.ceil(abs(now - created_at) / DAY)


def resolution_time_in_hours(created_at: datetime | None, resolved_at: datetime | None) -> int | None:
    if created_at is None or resolved_at is None:
        return None
    return math.ceil(abs(resolved_at - created_at) / HOUR)
