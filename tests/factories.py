"""
Test data factories for generating test objects.

This module provides Factory Boy factories for project form data and raw
row-store rows with realistic default values and easy customization.
"""

import uuid
from datetime import date

import factory

from app.schemas.project import ProjectFormData, ProjectStatus


class ProjectFormFactory(factory.Factory):
    """Factory for valid ProjectFormData candidates."""

    class Meta:
        model = ProjectFormData

    name = factory.Sequence(lambda n: f"Test Project {n}")
    assigned_to = factory.Faker("name")
    client_name = factory.Faker("company")
    client_address = factory.Faker("street_address")
    client_country = factory.Faker("country")
    tech_stack = "Python, FastAPI, PostgreSQL"
    milestone = "Discovery"
    next_action = "Send proposal"
    next_meeting = None
    budget = 1000.0
    start_date = date(2025, 1, 1)
    end_date = None
    end_date_notes = ""
    remarks = ""
    status = ProjectStatus.active
    completion_percentage = 0.0


class ProjectRowFactory(factory.DictFactory):
    """Factory for rows as the remote store returns them."""

    id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    name = factory.Sequence(lambda n: f"Stored Project {n}")
    assigned_to = factory.Faker("name")
    client_name = factory.Faker("company")
    client_address = ""
    client_country = ""
    tech_stack = ""
    milestone = ""
    next_action = ""
    next_meeting = None
    budget = 500.0
    start_date = "2025-01-01"
    end_date = None
    end_date_notes = ""
    remarks = ""
    status = "active"
    completion_percentage = 0
