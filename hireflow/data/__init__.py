"""
Data layer for hireflow.

Submodules:
- database: MongoDB connection management and the resume GridFS bucket
- models: Pydantic document schemas
- repositories: Database operations and queries
"""

from .database import (
    DatabaseManager,
    get_database_manager,
)

__all__ = [
    "DatabaseManager",
    "get_database_manager",
]
