"""
SQLAlchemy ORM models for persisted version control state.

Tables:
- wvc_workspace_states: One row per workspace holding the serialized state
"""

from datetime import datetime

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column, declarative_base

Base = declarative_base()


class WorkspaceStateORM(Base):
    """
    Serialized engine state for a workspace.

    Attributes:
        workspace_id: Workspace identifier (primary key)
        payload: JSON-encoded serialized state
        format_version: Serialization format version
        saved_at: Time of the last save
    """
    __tablename__ = "wvc_workspace_states"

    workspace_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    format_version: Mapped[str] = mapped_column(String(16), nullable=False)
    saved_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self) -> str:
        return f"<WorkspaceStateORM(workspace_id={self.workspace_id!r}, saved_at={self.saved_at})>"
