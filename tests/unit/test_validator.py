"""
Unit tests for the project field rules.
"""

from datetime import date

import pytest

from app.domains.project.validator import (
    ASSIGNEE_REQUIRED,
    BUDGET_NEGATIVE,
    BUDGET_NOT_A_NUMBER,
    CLIENT_REQUIRED,
    COMPLETION_OUT_OF_RANGE,
    END_BEFORE_START,
    NAME_REQUIRED,
    START_DATE_REQUIRED,
    coerce_patch,
    validate,
    validate_data,
)
from tests.factories import ProjectFormFactory


class TestValidate:
    """Test cases for validate()."""

    def test_valid_candidate(self):
        result = validate(ProjectFormFactory())

        assert result.is_valid
        assert result.field_errors == {}

    @pytest.mark.parametrize(
        "overrides, field, message",
        [
            ({"name": ""}, "name", NAME_REQUIRED),
            ({"assigned_to": ""}, "assigned_to", ASSIGNEE_REQUIRED),
            ({"client_name": ""}, "client_name", CLIENT_REQUIRED),
            ({"budget": -0.01}, "budget", BUDGET_NEGATIVE),
            ({"budget": float("nan")}, "budget", BUDGET_NOT_A_NUMBER),
            ({"budget": float("inf")}, "budget", BUDGET_NOT_A_NUMBER),
            (
                {"completion_percentage": float("nan")},
                "completion_percentage",
                COMPLETION_OUT_OF_RANGE,
            ),
            ({"start_date": None}, "start_date", START_DATE_REQUIRED),
            ({"completion_percentage": -1}, "completion_percentage", COMPLETION_OUT_OF_RANGE),
            ({"completion_percentage": 100.5}, "completion_percentage", COMPLETION_OUT_OF_RANGE),
            (
                {"start_date": date(2025, 2, 1), "end_date": date(2025, 1, 31)},
                "end_date",
                END_BEFORE_START,
            ),
        ],
    )
    def test_single_violation(self, overrides, field, message):
        """Each rule reports exactly its own field."""
        result = validate(ProjectFormFactory(**overrides))

        assert not result.is_valid
        assert result.field_errors == {field: message}

    def test_all_violations_reported_together(self):
        candidate = ProjectFormFactory(
            name="",
            assigned_to="",
            client_name="",
            budget=-5,
            completion_percentage=120,
            start_date=None,
        )

        result = validate(candidate)

        assert set(result.field_errors) == {
            "name",
            "assigned_to",
            "client_name",
            "budget",
            "start_date",
            "completion_percentage",
        }

    def test_whitespace_only_text_is_empty(self):
        result = validate(ProjectFormFactory(name="   "))

        assert result.field_errors == {"name": NAME_REQUIRED}

    @pytest.mark.parametrize("percentage", [0, 100, 42.5])
    def test_completion_bounds_inclusive(self, percentage):
        assert validate(ProjectFormFactory(completion_percentage=percentage)).is_valid

    def test_zero_budget_allowed(self):
        assert validate(ProjectFormFactory(budget=0)).is_valid

    def test_end_date_equal_to_start_allowed(self):
        candidate = ProjectFormFactory(start_date=date(2025, 3, 1), end_date=date(2025, 3, 1))

        assert validate(candidate).is_valid

    def test_end_date_not_compared_without_start(self):
        candidate = ProjectFormFactory(start_date=None, end_date=date(2020, 1, 1))

        assert validate(candidate).field_errors == {"start_date": START_DATE_REQUIRED}

    def test_optional_fields_may_be_empty(self):
        candidate = ProjectFormFactory(
            client_address="",
            client_country="",
            tech_stack="",
            milestone="",
            next_action="",
            next_meeting=None,
            remarks="",
        )

        assert validate(candidate).is_valid


class TestValidateData:
    """Test cases for coercion of raw form data."""

    def test_accepts_camel_case_mapping(self):
        form, result = validate_data(
            {
                "name": "Portal",
                "assignedTo": "Dana",
                "clientName": "Acme",
                "budget": "1500",
                "startDate": "2025-04-01",
            }
        )

        assert result.is_valid
        assert form.assigned_to == "Dana"
        assert form.budget == 1500.0

    def test_type_errors_become_field_errors(self):
        form, result = validate_data(
            {"name": "Portal", "assignedTo": "Dana", "clientName": "Acme", "budget": "lots"}
        )

        assert form is None
        assert "budget" in result.field_errors

    def test_invalid_form_not_returned(self):
        form, result = validate_data(ProjectFormFactory(budget=-5))

        assert form is None
        assert result.field_errors == {"budget": BUDGET_NEGATIVE}


class TestCoercePatch:
    """Test cases for coerce_patch()."""

    def test_only_supplied_fields(self):
        changes, errors = coerce_patch({"completionPercentage": 80})

        assert errors == {}
        assert changes == {"completion_percentage": 80.0}

    def test_explicit_none_clears_meeting(self):
        changes, _ = coerce_patch({"nextMeeting": None})

        assert changes == {"next_meeting": None}

    def test_bad_type(self):
        changes, errors = coerce_patch({"startDate": "not a date"})

        assert changes == {}
        assert "start_date" in errors
