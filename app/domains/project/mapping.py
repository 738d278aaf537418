"""Fixed bidirectional mapping between Project fields and row-store columns."""

from datetime import date, datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.exceptions.project import RowMappingError
from app.schemas.project import Project, ProjectFormData

# Project field -> row column
FIELD_TO_COLUMN = {
    "name": "name",
    "assigned_to": "assigned_to",
    "client_name": "client_name",
    "client_address": "client_address",
    "client_country": "client_country",
    "tech_stack": "tech_stack",
    "milestone": "milestone",
    "next_action": "next_action",
    "next_meeting": "next_meeting",
    "budget": "budget",
    "start_date": "start_date",
    "end_date": "end_date",
    "end_date_notes": "end_date_notes",
    "remarks": "remarks",
    "status": "status",
    "completion_percentage": "completion_percentage",
}
COLUMN_TO_FIELD = {column: field for field, column in FIELD_TO_COLUMN.items()}

TEXT_COLUMNS = (
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


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Date part only; timestamps are truncated to their day
    return date.fromisoformat(str(value)[:10])


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def row_to_project(row: dict[str, Any]) -> Project:
    """Map a store row to a Project.

    Raises:
        RowMappingError: If the row lacks an id or start date, or holds
            values that cannot be converted
    """
    if row.get("id") in (None, ""):
        raise RowMappingError("Row has no id")

    try:
        data: dict[str, Any] = {"id": str(row["id"])}
        for column in TEXT_COLUMNS:
            data[COLUMN_TO_FIELD[column]] = row.get(column) or ""
        data["next_meeting"] = _parse_timestamp(row.get("next_meeting"))
        data["budget"] = float(row.get("budget") or 0)
        data["start_date"] = _parse_date(row.get("start_date"))
        data["end_date"] = _parse_date(row.get("end_date"))
        data["status"] = row.get("status") or "active"
        data["completion_percentage"] = float(row.get("completion_percentage") or 0)
    except (TypeError, ValueError) as e:
        raise RowMappingError(f"Row {row.get('id')} has an unreadable value: {e}") from e

    if data["start_date"] is None:
        raise RowMappingError(f"Row {row['id']} has no start date")

    try:
        return Project.model_validate(data)
    except PydanticValidationError as e:
        raise RowMappingError(f"Row {row['id']} is not a valid project: {e}") from e


def project_to_row(project: ProjectFormData) -> dict[str, Any]:
    """Map a project (or form data) to store columns, excluding the id."""
    return {
        "name": project.name,
        "assigned_to": project.assigned_to,
        "client_name": project.client_name,
        "client_address": project.client_address,
        "client_country": project.client_country,
        "tech_stack": project.tech_stack,
        "milestone": project.milestone,
        "next_action": project.next_action,
        "next_meeting": project.next_meeting.isoformat() if project.next_meeting else None,
        "budget": project.budget,
        "start_date": project.start_date.isoformat() if project.start_date else None,
        "end_date": project.end_date.isoformat() if project.end_date else None,
        "end_date_notes": project.end_date_notes,
        "remarks": project.remarks,
        "status": project.status.value,
        "completion_percentage": project.completion_percentage,
    }
