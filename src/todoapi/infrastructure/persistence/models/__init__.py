"""SQLAlchemy models for the Todo API tables.

All models inherit from the Base class defined in database.py and are
created on application startup.
"""

from todoapi.infrastructure.persistence.models.todo import TodoModel

__all__ = ["TodoModel"]
