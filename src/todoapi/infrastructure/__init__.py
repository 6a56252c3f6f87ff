"""Infrastructure layer - External dependencies and implementations.

This layer contains all external dependencies including:
- Authentication (password hashing, JWT)
- Database adapters (SQLAlchemy)
- API routes (FastAPI)
"""
