"""Project schemas for request/response serialization."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .base import BaseSchema

TEXT_FIELDS = (
    "name",
    "assigned_to",
    "client_name",
    "client_address",
    "client_country",
    "tech_stack",
    "milestone",
    "next_action",
    "end_date_notes",
    "remarks",
)


class ProjectStatus(str, Enum):
    active = "active"
    completed = "completed"
    waiting = "waiting"
    cancelled = "cancelled"


class StatusFilter(str, Enum):
    all = "all"
    active = "active"
    completed = "completed"
    waiting = "waiting"
    cancelled = "cancelled"


class SortField(str, Enum):
    name = "name"
    budget = "budget"
    next_meeting = "nextMeeting"
    start_date = "startDate"
    end_date = "endDate"
    completion_percentage = "completionPercentage"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class LoadState(str, Enum):
    loading = "loading"
    ready = "ready"
    failed = "failed"


class ProjectSchema(BaseSchema):
    """Base for project schemas: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ProjectFormData(ProjectSchema):
    """Candidate project as submitted by the create/edit form.

    Constraints are not enforced here; ``validate`` in the project domain
    decides validity so that every violation can be reported at once.
    """

    name: str = ""
    assigned_to: str = ""
    client_name: str = ""
    client_address: str = ""
    client_country: str = ""
    tech_stack: str = ""
    milestone: str = ""
    next_action: str = ""
    next_meeting: datetime | None = None
    budget: float = 0
    start_date: date | None = None
    end_date: date | None = None
    end_date_notes: str = ""
    remarks: str = ""
    status: ProjectStatus = ProjectStatus.active
    completion_percentage: float = 0

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def none_to_empty(cls, v):
        """Treat missing text as the empty string."""
        return "" if v is None else v

    @field_validator("next_meeting")
    @classmethod
    def validate_next_meeting(cls, v: datetime | None) -> datetime | None:
        """Interpret naive meeting times as UTC."""
        return _aware(v)


class Project(ProjectFormData):
    """A persisted project record with its store-assigned id."""

    model_config = ConfigDict(frozen=True)

    id: str
    start_date: date


class ProjectUpdate(ProjectSchema):
    """Schema for updating a project.

    Only explicitly supplied fields form the patch; ``None`` clears the
    optional date fields.
    """

    name: str | None = None
    assigned_to: str | None = None
    client_name: str | None = None
    client_address: str | None = None
    client_country: str | None = None
    tech_stack: str | None = None
    milestone: str | None = None
    next_action: str | None = None
    next_meeting: datetime | None = None
    budget: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    end_date_notes: str | None = None
    remarks: str | None = None
    status: ProjectStatus | None = None
    completion_percentage: float | None = None

    @field_validator("next_meeting")
    @classmethod
    def validate_next_meeting(cls, v: datetime | None) -> datetime | None:
        return _aware(v)

    def patch(self) -> dict:
        """Return the explicitly supplied fields."""
        return self.model_dump(exclude_unset=True)


class DateRange(ProjectSchema):
    model_config = ConfigDict(frozen=True)

    start: date | None = None
    end: date | None = None


class ProjectFilters(ProjectSchema):
    """Conjunctive filter over the canonical collection."""

    model_config = ConfigDict(frozen=True)

    date_range: DateRange = Field(default_factory=DateRange)
    assigned_to: str = ""
    status: StatusFilter = StatusFilter.all
    upcoming_meetings: bool = False


class SortConfig(ProjectSchema):
    model_config = ConfigDict(frozen=True)

    field: SortField = SortField.name
    direction: SortDirection = SortDirection.asc


class ProjectListResponse(ProjectSchema):
    """Schema for the derived project list."""

    projects: list[Project]
    total: int
    load_state: LoadState
    load_error: str | None = None


class AssigneesResponse(ProjectSchema):
    assignees: list[str]
