"""
Models package initialization.
"""

from .base import Base, BaseModel
from .project import ProjectRecord

__all__ = [
    "Base",
    "BaseModel",
    "ProjectRecord",
]
