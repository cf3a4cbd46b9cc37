"""
Database infrastructure.
"""

from .models import Base, WorkspaceStateORM

__all__ = ["Base", "WorkspaceStateORM"]
