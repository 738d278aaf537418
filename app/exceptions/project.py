"""Project-related exceptions."""

from .base import BaseAppException, NotFoundError, ValidationError


class ProjectValidationError(ValidationError):
    """Raised when a candidate project violates one or more field rules."""

    def __init__(self, field_errors: dict[str, str], message: str = "Project validation failed"):
        self.field_errors = dict(field_errors)
        super().__init__(message=message, details={"field_errors": self.field_errors})


class ProjectStoreError(BaseAppException):
    """Raised when the remote row-store rejects or fails a project operation."""

    def __init__(self, message: str = "Project store operation failed"):
        super().__init__(message=message, status_code=502, error_code="PROJECT_STORE_ERROR")


class ProjectNotFoundError(NotFoundError):
    """Raised when a project id is not present in the collection."""

    def __init__(self, project_id: str, message: str | None = None):
        self.project_id = project_id
        super().__init__(
            message=message or f"Project {project_id} not found",
            details={"project_id": project_id},
        )


class StoreError(Exception):
    """Transport or store-side failure raised by a row-store implementation."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RowMappingError(ValueError):
    """Raised when a store row cannot be mapped to a Project."""
