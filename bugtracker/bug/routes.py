# bugtracker/bug/routes.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bugtracker.bug.schemas import (
    BugAssign,
    BugCreate,
    BugListResponse,
    BugOut,
    BugResolve,
    BugResponse,
    BugStatsResponse,
    BugUpdate,
    MessageResponse,
)
from bugtracker.bug.services import BugService
from bugtracker.core.database import get_db
from bugtracker.core.events import EventSink, get_event_sink

router = APIRouter(prefix="/api/bugs", tags=["Bugs"])


def get_bug_service(
    db: AsyncSession = Depends(get_db),
    events: EventSink = Depends(get_event_sink),
) -> BugService:
    return BugService(db, events)


# must be registered before /{bug_id}
@router.get("/stats", response_model=BugStatsResponse)
async def stats(service: BugService = Depends(get_bug_service)):
    return BugStatsResponse(data=await service.get_stats())


@router.get("", response_model=BugListResponse)
async def list_all(
    status: str | None = Query(default=None, description="open, in-progress, resolved or closed"),
    priority: str | None = Query(default=None, description="low, medium, high or critical"),
    category: str | None = Query(default=None),
    assignee: str | None = Query(default=None),
    search: str | None = Query(default=None, description="Case-insensitive match on title or description"),
    page: int = Query(default=1),
    limit: int = Query(default=10),
    service: BugService = Depends(get_bug_service),
):
    result = await service.list_bugs(
        status=status,
        priority=priority,
        category=category,
        assignee=assignee,
        search=search,
        page=page,
        limit=limit,
    )
    return BugListResponse(
        count=result.count,
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
        data=[BugOut.model_validate(bug) for bug in result.items],
    )


@router.get("/{bug_id}", response_model=BugResponse)
async def get(bug_id: str, service: BugService = Depends(get_bug_service)):
    bug = await service.get_bug(bug_id)
    return BugResponse(data=BugOut.model_validate(bug))


@router.post("", response_model=BugResponse, status_code=201)
async def create(payload: BugCreate, service: BugService = Depends(get_bug_service)):
    bug = await service.create_bug(payload.model_dump(exclude_unset=True))
    return BugResponse(data=BugOut.model_validate(bug))


@router.put("/{bug_id}", response_model=BugResponse)
async def update(bug_id: str, payload: BugUpdate, service: BugService = Depends(get_bug_service)):
    bug = await service.update_bug(bug_id, payload.model_dump(exclude_unset=True))
    return BugResponse(data=BugOut.model_validate(bug))


@router.delete("/{bug_id}", response_model=MessageResponse)
async def delete(bug_id: str, service: BugService = Depends(get_bug_service)):
    await service.delete_bug(bug_id)
    return MessageResponse(message="Bug deleted successfully")


@router.put("/{bug_id}/assign", response_model=BugResponse)
async def assign(bug_id: str, payload: BugAssign, service: BugService = Depends(get_bug_service)):
    bug = await service.assign_bug(bug_id, payload.assignee)
    return BugResponse(data=BugOut.model_validate(bug))


@router.put("/{bug_id}/resolve", response_model=BugResponse)
async def resolve(bug_id: str, payload: BugResolve, service: BugService = Depends(get_bug_service)):
    bug = await service.resolve_bug(bug_id, payload.resolved_by, payload.resolution)
    return BugResponse(data=BugOut.model_validate(bug))
