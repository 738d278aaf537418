"""
Project rows backing the SQL row-store.
"""

from sqlalchemy import Column, Date, Float, String, Text

from .base import BaseModel, UTCDateTime


class ProjectRecord(BaseModel):
    """
    One tracked client project, stored with snake_case columns.
    """

    __tablename__ = "projects"

    name = Column(String(255), nullable=False)
    assigned_to = Column(String(255), nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    client_address = Column(Text, default="")
    client_country = Column(String(100), default="")
    tech_stack = Column(Text, default="")
    milestone = Column(Text, default="")
    next_action = Column(Text, default="")
    next_meeting = Column(UTCDateTime())
    budget = Column(Float, nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    end_date_notes = Column(Text, default="")
    remarks = Column(Text, default="")
    status = Column(String(20), nullable=False, default="active")
    completion_percentage = Column(Float, nullable=False, default=0)
