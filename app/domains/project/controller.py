"""Project API controller with FastAPI endpoints."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Query

from app.core.dependencies import get_project_service
from app.domains.project.service import ProjectService
from app.exceptions.project import ProjectNotFoundError
from app.schemas.base import ResponseSchema
from app.schemas.project import (
    AssigneesResponse,
    DateRange,
    Project,
    ProjectFilters,
    ProjectFormData,
    ProjectListResponse,
    ProjectUpdate,
    SortConfig,
    SortDirection,
    SortField,
    StatusFilter,
)
from app.shared.result import OperationResult, Outcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _dump(project: Optional[Project]) -> Optional[dict]:
    return project.model_dump(mode="json", by_alias=True) if project is not None else None


def _respond(result: OperationResult, success_message: str) -> ResponseSchema:
    """Turn a collection result into a response, raising its error on failure."""
    value = result.unwrap()
    if result.outcome == Outcome.applied:
        message = success_message
    elif result.outcome == Outcome.not_found:
        message = f"{result.error.message}; nothing changed"
    else:
        message = "Collection closed before the change was applied"
    data = _dump(value) if isinstance(value, Project) else None
    return ResponseSchema(status="success", message=message, data=data)


@router.get("/", response_model=ProjectListResponse)
async def get_projects(
    assigned_to: str = Query("", alias="assignedTo"),
    status: StatusFilter = Query(StatusFilter.all),
    start: Optional[date] = Query(None, description="Date range start"),
    end: Optional[date] = Query(None, description="Date range end"),
    upcoming_meetings: bool = Query(False, alias="upcomingMeetings"),
    sort_field: SortField = Query(SortField.name, alias="sortField"),
    sort_direction: SortDirection = Query(SortDirection.asc, alias="sortDirection"),
    service: ProjectService = Depends(get_project_service),
):
    """Get the filtered and sorted project list."""

    filters = ProjectFilters(
        date_range=DateRange(start=start, end=end),
        assigned_to=assigned_to,
        status=status,
        upcoming_meetings=upcoming_meetings,
    )
    sort = SortConfig(field=sort_field, direction=sort_direction)
    projects = service.derive_view(filters, sort)

    return ProjectListResponse(
        projects=list(projects),
        total=len(projects),
        load_state=service.load_state,
        load_error=service.load_error,
    )


@router.get("/assignees", response_model=AssigneesResponse)
async def get_assignees(service: ProjectService = Depends(get_project_service)):
    """Distinct assignees, for populating filter choices."""
    return AssigneesResponse(assignees=sorted(service.unique_assignees()))


@router.post("/reload", response_model=ResponseSchema)
async def reload_projects(service: ProjectService = Depends(get_project_service)):
    """Re-fetch the collection from the store."""
    result = await service.load()
    result.unwrap()
    return ResponseSchema(
        status="success",
        message="Projects reloaded",
        data={"total": len(service.projects), "load_state": service.load_state.value},
    )


@router.get("/{project_id}", response_model=ResponseSchema)
async def get_project(
    project_id: str = Path(..., description="Project ID"),
    service: ProjectService = Depends(get_project_service),
):
    """Get a specific project by ID."""

    project = service.get(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)

    return ResponseSchema(status="success", message="Project retrieved", data=_dump(project))


@router.post("/", response_model=ResponseSchema, status_code=201)
async def create_project(
    project_data: ProjectFormData,
    service: ProjectService = Depends(get_project_service),
):
    """Create a new project."""

    result = await service.add(project_data)
    return _respond(result, "Project created successfully")


@router.put("/{project_id}", response_model=ResponseSchema)
async def replace_project(
    project_id: str = Path(..., description="Project ID"),
    project_data: ProjectFormData = Body(...),
    service: ProjectService = Depends(get_project_service),
):
    """Full-form edit of a project."""

    result = await service.update(project_id, project_data)
    return _respond(result, "Project updated successfully")


@router.patch("/{project_id}", response_model=ResponseSchema)
async def update_project(
    project_id: str = Path(..., description="Project ID"),
    project_data: ProjectUpdate = Body(...),
    service: ProjectService = Depends(get_project_service),
):
    """Inline edit of one or more project fields."""

    result = await service.update(project_id, project_data)
    return _respond(result, "Project updated successfully")


@router.delete("/{project_id}", response_model=ResponseSchema)
async def delete_project(
    project_id: str = Path(..., description="Project ID"),
    service: ProjectService = Depends(get_project_service),
):
    """Delete a project."""

    result = await service.remove(project_id)
    response = _respond(result, "Project deleted successfully")
    # Deletion returns no record body
    response.data = None
    return response
