"""Field rules a candidate project must satisfy before it is persisted."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.schemas.project import ProjectFormData, ProjectUpdate

NAME_REQUIRED = "Project name is required"
ASSIGNEE_REQUIRED = "Assigned person is required"
CLIENT_REQUIRED = "Client name is required"
BUDGET_NEGATIVE = "Budget cannot be negative"
BUDGET_NOT_A_NUMBER = "Budget must be a finite number"
START_DATE_REQUIRED = "Start date is required"
COMPLETION_OUT_OF_RANGE = "Completion percentage must be between 0 and 100"
END_BEFORE_START = "End date cannot be before start date"

_FIELD_BY_ALIAS = {info.alias or name: name for name, info in ProjectFormData.model_fields.items()}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of ``validate``: valid when ``field_errors`` is empty."""

    field_errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.field_errors


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate(candidate: ProjectFormData) -> ValidationResult:
    """
    Check a candidate project against every field rule.

    All violations are collected; nothing short-circuits, so a caller can
    highlight each offending field at once.

    Args:
        candidate: Project form data (a ``Project`` is accepted as well)

    Returns:
        ValidationResult with one message per violated field
    """
    errors: dict[str, str] = {}

    if _blank(candidate.name):
        errors["name"] = NAME_REQUIRED
    if _blank(candidate.assigned_to):
        errors["assigned_to"] = ASSIGNEE_REQUIRED
    if _blank(candidate.client_name):
        errors["client_name"] = CLIENT_REQUIRED
    if candidate.budget is None or not math.isfinite(candidate.budget):
        errors["budget"] = BUDGET_NOT_A_NUMBER
    elif candidate.budget < 0:
        errors["budget"] = BUDGET_NEGATIVE
    if candidate.start_date is None:
        errors["start_date"] = START_DATE_REQUIRED
    if (
        candidate.completion_percentage is None
        or not 0 <= candidate.completion_percentage <= 100
    ):
        errors["completion_percentage"] = COMPLETION_OUT_OF_RANGE
    if (
        candidate.end_date is not None
        and candidate.start_date is not None
        and candidate.end_date < candidate.start_date
    ):
        errors["end_date"] = END_BEFORE_START

    return ValidationResult(errors)


def field_errors_from(exc: PydanticValidationError) -> dict[str, str]:
    """Flatten a pydantic error into one message per field name."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("__root__",)
        field_name = _FIELD_BY_ALIAS.get(str(loc[0]), str(loc[0]))
        errors.setdefault(field_name, str(error.get("msg", "Invalid value")))
    return errors


def coerce_form(data: ProjectFormData | Mapping[str, Any]) -> tuple[ProjectFormData | None, dict[str, str]]:
    """Parse raw form data, turning type errors into field errors."""
    if isinstance(data, ProjectFormData):
        return data, {}
    try:
        return ProjectFormData.model_validate(dict(data)), {}
    except PydanticValidationError as e:
        return None, field_errors_from(e)


def coerce_patch(data: ProjectUpdate | Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, str]]:
    """Return the explicitly supplied fields of a patch, or its field errors."""
    if isinstance(data, ProjectUpdate):
        return data.patch(), {}
    try:
        return ProjectUpdate.model_validate(dict(data)).patch(), {}
    except PydanticValidationError as e:
        return {}, field_errors_from(e)


def validate_data(data: ProjectFormData | Mapping[str, Any]) -> tuple[ProjectFormData | None, ValidationResult]:
    """Coerce then validate; the form is returned only when it is valid."""
    form, type_errors = coerce_form(data)
    if form is None:
        return None, ValidationResult(type_errors)
    result = validate(form)
    return (form if result.is_valid else None), result
