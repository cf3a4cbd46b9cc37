"""
Application Factories.

Builds state stores, engines and approval gates from a WVCConfig so callers
never wire infrastructure by hand.

Usage:
    from wvc.application.factories import VersionControlFactory

    factory = VersionControlFactory(WVCConfig.for_development())
    engine = factory.create_engine("ws-1")
    gate = factory.create_approval_gate(engine)
"""

import logging
from pathlib import Path
from typing import Optional

from wvc.config import WVCConfig, get_config
from wvc.domain.interfaces.notifier import IVerificationNotifier
from wvc.domain.interfaces.state_store import IStateStore
from wvc.infrastructure.events import WVCEventBus
from wvc.infrastructure.hashing import get_hash_strategy
from wvc.infrastructure.notifications import LoggingVerificationNotifier
from wvc.infrastructure.stores import (
    HttpStateStore,
    InMemoryStateStore,
    JsonFileStateStore,
    SQLAlchemyStateStore,
)

from .services.commit_approval import CommitApprovalGate
from .services.version_control import VersionControlEngine, generate_workspace_id

logger = logging.getLogger(__name__)


class VersionControlFactory:
    """
    Factory for VersionControlEngine and its collaborators.

    One event bus is shared by every engine the factory creates.
    """

    def __init__(self, config: Optional[WVCConfig] = None, event_bus: Optional[WVCEventBus] = None):
        self._config = config or get_config()
        self._event_bus = event_bus or WVCEventBus(max_history=self._config.event_history)

    @property
    def config(self) -> WVCConfig:
        return self._config

    @property
    def event_bus(self) -> WVCEventBus:
        return self._event_bus

    def create_state_store(self, workspace_id: str) -> IStateStore:
        """
        Build the store selected by ``config.storage_mode``.

        File mode uses ``config.state_path`` when set, otherwise one JSON
        file per workspace under ``{data_dir}/workspaces``.
        """
        mode = self._config.storage_mode
        if mode == "inmemory":
            return InMemoryStateStore()
        if mode == "file":
            if self._config.state_path:
                return JsonFileStateStore(self._config.state_path)
            return JsonFileStateStore(Path(self._config.data_dir) / "workspaces" / f"{workspace_id}.json")
        if mode == "sqlalchemy":
            return SQLAlchemyStateStore(
                workspace_id,
                db_url=self._config.database_url,
                echo=self._config.log_sql,
            )
        if mode == "remote":
            return HttpStateStore(
                self._config.remote_url,
                workspace_id,
                timeout=self._config.remote_timeout,
            )
        raise ValueError(f"Unknown storage mode: {mode}")

    def create_engine(
        self,
        workspace_id: Optional[str] = None,
        restore: bool = True,
        state_store: Optional[IStateStore] = None,
    ) -> VersionControlEngine:
        """
        Build an engine for a workspace.

        Args:
            workspace_id: Workspace identifier (generated when omitted)
            restore: Load previously saved state from the store
            state_store: Override the configured store
        """
        workspace_id = workspace_id or generate_workspace_id()
        store = state_store or self.create_state_store(workspace_id)
        kwargs = dict(
            hash_strategy=get_hash_strategy(self._config.hash_algorithm),
            event_bus=self._event_bus,
            default_branch=self._config.default_branch,
            autosave=self._config.autosave,
        )

        logger.debug(f"Creating engine for {workspace_id} on {store.description}")
        if restore:
            return VersionControlEngine.restore(store, workspace_id=workspace_id, **kwargs)
        return VersionControlEngine(workspace_id=workspace_id, state_store=store, **kwargs)

    def create_approval_gate(
        self,
        engine: VersionControlEngine,
        notifier: Optional[IVerificationNotifier] = None,
    ) -> CommitApprovalGate:
        return CommitApprovalGate(
            engine,
            notifier or LoggingVerificationNotifier(),
            ttl_seconds=self._config.approval_ttl_seconds,
        )
