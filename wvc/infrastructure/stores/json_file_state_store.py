"""
JSON File State Store.

Local device storage: the serialized state lives in one JSON file.
Writes go to a temporary sibling file which is then renamed over the
target, so a crash mid-write leaves the previous state intact.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from wvc.domain.interfaces.state_store import IStateStore
from wvc.domain.models import InvalidSnapshotError

logger = logging.getLogger(__name__)


class JsonFileStateStore(IStateStore):
    """
    File-backed implementation of IStateStore.

    Attributes:
        path: Target JSON file (parent directories are created on save)
    """

    def __init__(self, path: Union[str, Path], indent: Optional[int] = 2):
        self._path = Path(path)
        self._indent = indent

    @property
    def path(self) -> Path:
        return self._path

    @property
    def description(self) -> str:
        return f"JsonFileStateStore({self._path})"

    def save(self, data: Dict[str, Any]) -> bool:
        """Atomically replace the state file. Returns False on I/O errors."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self._path.parent), prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=self._indent)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save state to {self._path}: {e}")
            return False

        logger.debug(f"Saved state to {self._path}")
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Read the state file.

        Returns:
            Parsed state, or None if the file does not exist

        Raises:
            InvalidSnapshotError: If the file exists but is not a JSON object
        """
        if not self._path.exists():
            return None

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InvalidSnapshotError(f"Corrupt state file {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise InvalidSnapshotError(f"State file {self._path} does not hold a JSON object")
        return data

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()
