"""
SQLAlchemy State Store.

Persists each workspace's serialized state as one JSON row, keyed by
workspace ID. Works with any SQLAlchemy URL (SQLite for development,
PostgreSQL for production).

Usage:
    store = SQLAlchemyStateStore("ws-1", db_url="sqlite:///data/wvc.db")
    engine = VersionControlEngine(workspace_id="ws-1", state_store=store)
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from wvc.domain.interfaces.state_store import IStateStore
from wvc.domain.models import InvalidSnapshotError
from wvc.infrastructure.database.models import Base, WorkspaceStateORM
from wvc.infrastructure.serialization.state_codec import FORMAT_VERSION

logger = logging.getLogger(__name__)


class SQLAlchemyStateStore(IStateStore):
    """
    Database-backed implementation of IStateStore.

    Each save runs in its own session transaction: the row is either fully
    replaced or left untouched.
    """

    def __init__(
        self,
        workspace_id: str,
        db_url: Optional[str] = None,
        engine: Optional[Engine] = None,
        echo: bool = False,
    ):
        """
        Initialize the store.

        Args:
            workspace_id: Row key for this workspace
            db_url: SQLAlchemy database URL (ignored when engine is given)
            engine: Pre-built SQLAlchemy engine
            echo: Log SQL statements
        """
        if engine is None and not db_url:
            raise ValueError("Either db_url or engine is required")

        self._workspace_id = workspace_id
        self._engine = engine or create_engine(db_url, echo=echo)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @property
    def description(self) -> str:
        return f"SQLAlchemyStateStore({self._engine.url.render_as_string(hide_password=True)})"

    def save(self, data: Dict[str, Any]) -> bool:
        try:
            payload = json.dumps(data, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"State for {self._workspace_id} is not JSON serializable: {e}")
            return False

        try:
            with self._session_factory() as session:
                row = session.get(WorkspaceStateORM, self._workspace_id)
                if row is None:
                    session.add(WorkspaceStateORM(
                        workspace_id=self._workspace_id,
                        payload=payload,
                        format_version=FORMAT_VERSION,
                        saved_at=datetime.now(),
                    ))
                else:
                    row.payload = payload
                    row.format_version = FORMAT_VERSION
                    row.saved_at = datetime.now()
                session.commit()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to save state for {self._workspace_id}: {e}")
            return False

        logger.debug(f"Saved state for workspace {self._workspace_id}")
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        with self._session_factory() as session:
            row = session.get(WorkspaceStateORM, self._workspace_id)
            if row is None:
                return None
            payload = row.payload

        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            raise InvalidSnapshotError(
                f"Corrupt stored state for workspace {self._workspace_id}: {e}"
            ) from e

    def clear(self) -> None:
        with self._session_factory() as session:
            row = session.get(WorkspaceStateORM, self._workspace_id)
            if row is not None:
                session.delete(row)
                session.commit()

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
