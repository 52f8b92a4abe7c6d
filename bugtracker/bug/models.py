# bugtracker/bug/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String, Text, event, inspect
from sqlalchemy.types import TypeDecorator

from bugtracker.core.database import Base

STATUSES = ("open", "in-progress", "resolved", "closed")
PRIORITIES = ("low", "medium", "high", "critical")
CATEGORIES = ("frontend", "backend", "database", "api", "ui/ux", "performance", "security", "other")
SEVERITIES = ("minor", "major", "critical", "blocker")
ENVIRONMENTS = ("development", "staging", "production")

RESOLVED_STATUSES = ("resolved", "closed")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_bug_id() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetimes, even on backends (sqlite) that drop tzinfo."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Bug(Base):
    __tablename__ = "bugs"

    id = Column(String(36), primary_key=True, default=new_bug_id)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="open")
    priority = Column(String(20), nullable=False, default="medium")
    assignee = Column(String(50), nullable=True, index=True)
    reporter = Column(String(50), nullable=False, index=True)
    category = Column(String(20), nullable=False, default="other", index=True)
    severity = Column(String(20), nullable=False, default="major")
    environment = Column(String(20), nullable=False, default="development")
    steps_to_reproduce = Column(JSON, nullable=False, default=list)
    expected_behavior = Column(String(500), nullable=True)
    actual_behavior = Column(String(500), nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    resolution = Column(String(1000), nullable=True)
    resolved_at = Column(UTCDateTime, nullable=True)
    resolved_by = Column(String(50), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("ix_bugs_status_priority", "status", "priority"),)

    def __repr__(self) -> str:
        return f"<Bug {self.id} {self.status!r} {self.title!r}>"


def apply_status_side_effects(bug: Bug, status_changed: bool) -> None:
    """Keep the resolution fields consistent with the bug's status.

    Resolved/closed bugs get a ``resolved_at`` the first time the status moves
    there; an existing timestamp is kept. Open/in-progress bugs never carry
    resolution data.
    """
    if bug.status in RESOLVED_STATUSES:
        if status_changed and bug.resolved_at is None:
            bug.resolved_at = utcnow()
    else:
        bug.resolved_at = None
        bug.resolved_by = None
        bug.resolution = None


@event.listens_for(Bug, "before_insert")
def _bug_before_insert(mapper, connection, target: Bug) -> None:
    if target.status is None:
        target.status = "open"
    apply_status_side_effects(target, status_changed=True)


@event.listens_for(Bug, "before_update")
def _bug_before_update(mapper, connection, target: Bug) -> None:
    status_changed = inspect(target).attrs.status.history.has_changes()
    apply_status_side_effects(target, status_changed=status_changed)
