# bugtracker/bug/services.py
import math
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bugtracker.bug import lifecycle
from bugtracker.bug.models import Bug
from bugtracker.bug.schemas import BugStats, PriorityCounts, StatusCounts
from bugtracker.bug.validation import (
    ENUM_RULES,
    LENGTH_RULES,
    LIST_FIELDS,
    normalize_bug_fields,
    validate_assignment,
    validate_bug,
    validate_list_query,
    validate_resolution,
)
from bugtracker.core.errors import InvalidIdentifier, NotFound, ValidationError, persistence_guard
from bugtracker.core.events import EventSink, NullEventSink

EDITABLE_FIELDS = (*LENGTH_RULES, *ENUM_RULES, *LIST_FIELDS, "attachments")
REPORTED_PRIORITIES = ("high", "critical")


@dataclass
class BugPage:
    items: list[Bug]
    total: int
    page: int
    limit: int

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def parse_bug_id(raw: Any) -> str:
    try:
        return str(uuid.UUID(str(raw)))
    except ValueError:
        raise InvalidIdentifier()


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _snapshot(bug: Bug) -> dict[str, Any]:
    return {field: getattr(bug, field) for field in EDITABLE_FIELDS}


class BugService:
    def __init__(self, db: AsyncSession, events: EventSink | None = None):
        self.db = db
        self.events = events or NullEventSink()

    @persistence_guard("Server error while fetching bugs")
    async def list_bugs(
        self,
        status: str | None = None,
        priority: str | None = None,
        category: str | None = None,
        assignee: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> BugPage:
        errors = validate_list_query(status, priority, category, assignee, search, page, limit)
        if errors:
            raise ValidationError(errors)

        conditions = []
        if status:
            conditions.append(Bug.status == status)
        if priority:
            conditions.append(Bug.priority == priority)
        if category:
            conditions.append(Bug.category == category)
        if assignee:
            conditions.append(Bug.assignee == assignee.strip())
        if search:
            pattern = f"%{_escape_like(search.strip().lower())}%"
            conditions.append(
                or_(
                    func.lower(Bug.title).like(pattern, escape="\\"),
                    func.lower(Bug.description).like(pattern, escape="\\"),
                )
            )

        count_query = select(func.count()).select_from(Bug).where(*conditions)
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            select(Bug)
            .where(*conditions)
            .order_by(Bug.created_at.desc(), Bug.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list((await self.db.execute(query)).scalars().all())

        self.events.emit("bugs.listed", page=page, count=len(items), total=total)
        return BugPage(items=items, total=total, page=page, limit=limit)

    async def _load(self, bug_id: Any) -> Bug:
        bug = await self.db.get(Bug, parse_bug_id(bug_id))
        if bug is None:
            raise NotFound()
        return bug

    @persistence_guard("Server error while fetching bug")
    async def get_bug(self, bug_id: Any) -> Bug:
        bug = await self._load(bug_id)
        self.events.emit("bug.retrieved", bug_id=bug.id)
        return bug

    @persistence_guard("Server error while creating bug")
    async def create_bug(self, fields: dict[str, Any]) -> Bug:
        data = {
            key: value
            for key, value in normalize_bug_fields(fields).items()
            if key in EDITABLE_FIELDS and value is not None
        }
        errors = validate_bug(data)
        if errors:
            raise ValidationError(errors)

        bug = Bug(**data)
        self.db.add(bug)
        await self.db.commit()
        await self.db.refresh(bug)
        self.events.emit("bug.created", bug_id=bug.id, status=bug.status, priority=bug.priority)
        return bug

    @persistence_guard("Server error while updating bug")
    async def update_bug(self, bug_id: Any, fields: dict[str, Any]) -> Bug:
        bug = await self._load(bug_id)
        changes = {key: value for key, value in normalize_bug_fields(fields).items() if key in EDITABLE_FIELDS}

        errors = validate_bug({**_snapshot(bug), **changes})
        if errors:
            raise ValidationError(errors)

        for field, value in changes.items():
            setattr(bug, field, value)
        await self.db.commit()
        await self.db.refresh(bug)
        self.events.emit("bug.updated", bug_id=bug.id, fields=sorted(changes))
        return bug

    @persistence_guard("Server error while deleting bug")
    async def delete_bug(self, bug_id: Any) -> None:
        bug = await self._load(bug_id)
        await self.db.delete(bug)
        await self.db.commit()
        self.events.emit("bug.deleted", bug_id=bug.id)

    @persistence_guard("Server error while assigning bug")
    async def assign_bug(self, bug_id: Any, assignee: Any) -> Bug:
        bug_id = parse_bug_id(bug_id)
        errors = validate_assignment(assignee)
        if errors:
            raise ValidationError(errors)

        bug = await self._load(bug_id)
        await lifecycle.assign_to(self.db, bug, assignee.strip())
        await self.db.commit()
        await self.db.refresh(bug)
        self.events.emit("bug.assigned", bug_id=bug.id, assignee=bug.assignee, status=bug.status)
        return bug

    @persistence_guard("Server error while resolving bug")
    async def resolve_bug(self, bug_id: Any, resolved_by: Any, resolution: Any) -> Bug:
        bug_id = parse_bug_id(bug_id)
        errors = validate_resolution(resolved_by, resolution)
        if errors:
            raise ValidationError(errors)

        bug = await self._load(bug_id)
        await lifecycle.resolve(self.db, bug, resolved_by.strip(), resolution.strip())
        await self.db.commit()
        await self.db.refresh(bug)
        self.events.emit("bug.resolved", bug_id=bug.id, resolved_by=bug.resolved_by)
        return bug

    @persistence_guard("Server error while fetching bug statistics")
    async def get_stats(self) -> BugStats:
        total = (await self.db.execute(select(func.count()).select_from(Bug))).scalar() or 0

        status_rows = await self.db.execute(select(Bug.status, func.count()).group_by(Bug.status))
        by_status = dict(status_rows.all())

        priority_rows = await self.db.execute(
            select(Bug.priority, func.count())
            .where(Bug.priority.in_(REPORTED_PRIORITIES))
            .group_by(Bug.priority)
        )
        by_priority = dict(priority_rows.all())

        self.events.emit("bugs.stats", total=total)
        return BugStats(
            total=total,
            by_status=StatusCounts(
                open=by_status.get("open", 0),
                in_progress=by_status.get("in-progress", 0),
                resolved=by_status.get("resolved", 0),
                closed=by_status.get("closed", 0),
            ),
            by_priority=PriorityCounts(
                high=by_priority.get("high", 0),
                critical=by_priority.get("critical", 0),
            ),
        )
