"""
Unit tests for Exception classes and tagged operation results.
"""

import pytest
from fastapi import HTTPException

from app.exceptions.base import BaseAppException, NotFoundError, ValidationError
from app.exceptions.project import (
    ProjectNotFoundError,
    ProjectStoreError,
    ProjectValidationError,
    StoreError,
)
from app.shared.result import OperationResult, Outcome


class TestBaseAppException:
    """Test cases for BaseAppException."""

    def test_base_exception_default_values(self):
        exc = BaseAppException("Test error")

        assert exc.message == "Test error"
        assert exc.status_code == 500
        assert exc.error_code == "INTERNAL_ERROR"
        assert exc.details == {}
        assert exc.detail["message"] == "Test error"
        assert exc.detail["details"] == {}
        assert str(exc) == "Test error"

    def test_base_exception_inheritance(self):
        assert isinstance(BaseAppException("Test error"), HTTPException)

    def test_not_found_defaults(self):
        exc = NotFoundError()

        assert exc.status_code == 404
        assert exc.error_code == "NOT_FOUND"

    def test_validation_error_defaults(self):
        exc = ValidationError()

        assert exc.status_code == 422
        assert exc.error_code == "VALIDATION_ERROR"


class TestProjectExceptions:
    """Test cases for project exceptions."""

    def test_validation_error_carries_field_errors(self):
        exc = ProjectValidationError({"budget": "Budget cannot be negative"})

        assert exc.status_code == 422
        assert exc.field_errors == {"budget": "Budget cannot be negative"}
        assert exc.detail["details"]["field_errors"] == {"budget": "Budget cannot be negative"}
        assert isinstance(exc, ValidationError)

    def test_store_error_is_bad_gateway(self):
        exc = ProjectStoreError("timeout")

        assert exc.status_code == 502
        assert exc.error_code == "PROJECT_STORE_ERROR"
        assert exc.message == "timeout"

    def test_not_found_names_project(self):
        exc = ProjectNotFoundError("abc")

        assert exc.status_code == 404
        assert exc.project_id == "abc"
        assert "abc" in exc.message

    def test_store_level_error(self):
        exc = StoreError("connection reset")

        assert exc.message == "connection reset"
        assert str(exc) == "connection reset"


class TestOperationResult:
    """Test cases for OperationResult."""

    def test_applied(self):
        result = OperationResult.applied("value")

        assert result.ok
        assert result.outcome == Outcome.applied
        assert result.unwrap() == "value"

    @pytest.mark.parametrize("outcome", [Outcome.invalid, Outcome.store_failed])
    def test_failures_raise_on_unwrap(self, outcome):
        result = OperationResult.failed(outcome, ProjectStoreError("boom"))

        assert not result.ok
        with pytest.raises(ProjectStoreError):
            result.unwrap()

    def test_not_found_is_benign(self):
        result = OperationResult(Outcome.not_found, None, ProjectNotFoundError("x"))

        assert result.ok
        assert result.unwrap() is None

    def test_discarded_is_benign(self):
        assert OperationResult(Outcome.discarded).ok
