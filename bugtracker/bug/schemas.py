# bugtracker/bug/schemas.py
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from bugtracker.bug import lifecycle


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# Request bodies accept any JSON value per field; types and field rules are
# checked together in bugtracker.bug.validation so every violation is reported
# in one response.
class BugCreate(CamelModel):
    title: Any = None
    description: Any = None
    status: Any = None
    priority: Any = None
    assignee: Any = None
    reporter: Any = None
    category: Any = None
    severity: Any = None
    environment: Any = None
    steps_to_reproduce: Any = None
    expected_behavior: Any = None
    actual_behavior: Any = None
    attachments: Any = None
    tags: Any = None


class BugUpdate(BugCreate):
    resolution: Any = None
    resolved_by: Any = None


class BugAssign(CamelModel):
    assignee: Any = None


class BugResolve(CamelModel):
    resolved_by: Any = None
    resolution: Any = None


class BugOut(CamelModel):
    id: str
    title: str
    description: str
    status: str
    priority: str
    assignee: str | None = None
    reporter: str
    category: str
    severity: str
    environment: str
    steps_to_reproduce: list[str] = []
    expected_behavior: str | None = None
    actual_behavior: str | None = None
    attachments: list[str] = []
    tags: list[str] = []
    resolution: str | None = None
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field(alias="ageInDays")
    @property
    def age_in_days(self) -> int | None:
        return lifecycle.age_in_days(self.created_at)

    @computed_field(alias="resolutionTimeInHours")
    @property
    def resolution_time_in_hours(self) -> int | None:
        return lifecycle.resolution_time_in_hours(self.created_at, self.resolved_at)


class BugResponse(CamelModel):
    success: bool = True
    data: BugOut


class BugListResponse(CamelModel):
    success: bool = True
    count: int
    total: int
    page: int
    total_pages: int
    data: list[BugOut]


class StatusCounts(CamelModel):
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0


class PriorityCounts(CamelModel):
    high: int = 0
    critical: int = 0


class BugStats(CamelModel):
    total: int
    by_status: StatusCounts
    by_priority: PriorityCounts


class BugStatsResponse(CamelModel):
    success: bool = True
    data: BugStats


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ErrorDetail(CamelModel):
    field: str
    message: str


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    details: list[ErrorDetail] | None = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
