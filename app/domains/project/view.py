"""Filtering and sorting of the project collection.

Everything here is pure: inputs are never mutated and the current time is
passed in by the caller.
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from app.schemas.project import (
    Project,
    ProjectFilters,
    SortConfig,
    SortDirection,
    SortField,
    StatusFilter,
)

ALL = "all"

# (missing, value): missing values compare above every present value
SortKey = tuple[int, Any]


def _present(value: Any) -> SortKey:
    return (0, value)


def _optional(value: Any) -> SortKey:
    return (1, 0) if value is None else (0, value)


SORT_KEYS: dict[SortField, Callable[[Project], SortKey]] = {
    SortField.name: lambda p: _present(p.name),
    SortField.budget: lambda p: _present(p.budget),
    SortField.next_meeting: lambda p: _optional(p.next_meeting),
    SortField.start_date: lambda p: _present(p.start_date),
    SortField.end_date: lambda p: _optional(p.end_date),
    SortField.completion_percentage: lambda p: _present(p.completion_percentage),
}

if set(SORT_KEYS) != set(SortField):  # pragma: no cover
    raise RuntimeError("Every sort field needs a sort key")


def apply_filters(
    projects: Sequence[Project], filters: ProjectFilters, now: datetime
) -> list[Project]:
    """Narrow ``projects`` by each active constraint, in a fixed order."""
    result = list(projects)

    if filters.assigned_to and filters.assigned_to != ALL:
        needle = filters.assigned_to.lower()
        result = [p for p in result if needle in p.assigned_to.lower()]

    if filters.status != StatusFilter.all:
        result = [p for p in result if p.status.value == filters.status.value]

    start = filters.date_range.start
    if start is not None:
        result = [
            p
            for p in result
            if p.start_date >= start or (p.end_date is not None and p.end_date >= start)
        ]

    end = filters.date_range.end
    if end is not None:
        result = [
            p
            for p in result
            if p.start_date <= end or (p.end_date is not None and p.end_date <= end)
        ]

    if filters.upcoming_meetings:
        result = [p for p in result if p.next_meeting is not None and p.next_meeting > now]

    return result


def sort_projects(projects: Sequence[Project], sort: SortConfig) -> list[Project]:
    """Stable sort; absent dates sort as the latest possible value."""
    key = SORT_KEYS[sort.field]
    if sort.direction == SortDirection.asc:
        return sorted(projects, key=key)
    if sort.direction == SortDirection.desc:
        # reverse=True keeps equal keys in their original order
        return sorted(projects, key=key, reverse=True)
    raise ValueError(f"Unknown sort direction: {sort.direction}")


def derive_view(
    projects: Sequence[Project], filters: ProjectFilters, sort: SortConfig, now: datetime
) -> list[Project]:
    return sort_projects(apply_filters(projects, filters, now), sort)
