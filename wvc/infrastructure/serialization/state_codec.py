"""
State serialization and export/import.

Serialized form (what IStateStore implementations persist):

    {
        "workspace_id": "...",
        "commits": [Commit.to_dict(), ...],     # creation order
        "branches": [Branch.to_dict(), ...],
        "current_branch": "main",
        "staged": [...], "working": [...]       # only with include_workspace
    }

Timestamps are ISO-8601 strings and are parsed back into datetimes on load.
Staged and working sets are session-local and excluded by default.

Export envelope (downloadable snapshot), validated with pydantic on import:

    {"state": {...}, "exported_at": "<ISO>", "format_version": "1.0.0"}
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wvc.domain.models import (
    Branch,
    Change,
    Commit,
    InvalidSnapshotError,
    RepositoryState,
)

FORMAT_VERSION = "1.0.0"


# ═══════════════════════════════════════════════════════════════════════════════
# Serialized State
# ═══════════════════════════════════════════════════════════════════════════════


def serialize_state(state: RepositoryState, include_workspace: bool = False) -> Dict[str, Any]:
    """
    Convert a state snapshot into JSON-compatible data.

    Args:
        state: Snapshot to serialize
        include_workspace: Also include staged and working sets

    Returns:
        Dictionary suitable for json.dumps
    """
    data: Dict[str, Any] = {
        "workspace_id": state.workspace_id,
        "commits": [c.to_dict() for c in state.commits.values()],
        "branches": [b.to_dict() for b in state.branches.values()],
        "current_branch": state.current_branch,
    }
    if include_workspace:
        data["staged"] = [c.to_dict() for c in state.staged]
        data["working"] = [c.to_dict() for c in state.working]
    return data


def deserialize_state(data: Dict[str, Any]) -> RepositoryState:
    """
    Rebuild a state snapshot from serialized data.

    The active flag of each branch is recomputed from current_branch.

    Raises:
        InvalidSnapshotError: If required fields are missing or malformed
    """
    try:
        workspace_id = data["workspace_id"]
        commits = [Commit.from_dict(c) for c in data.get("commits", [])]
        branches = [Branch.from_dict(b) for b in data.get("branches", [])]
        current_branch = data["current_branch"]
        staged = [Change.from_dict(c) for c in data.get("staged", [])]
        working = [Change.from_dict(c) for c in data.get("working", [])]
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidSnapshotError(f"Malformed serialized state: {e}") from e

    branch_map = {b.name: b.with_active(b.name == current_branch) for b in branches}
    if current_branch not in branch_map:
        raise InvalidSnapshotError(f"Current branch {current_branch} is not in the branch list")

    return RepositoryState(
        workspace_id=workspace_id,
        commits={c.hash: c for c in commits},
        branches=branch_map,
        current_branch=current_branch,
        staged=tuple(staged),
        working=tuple(working),
    )


def dumps(state: RepositoryState, include_workspace: bool = False, indent: Optional[int] = None) -> str:
    return json.dumps(serialize_state(state, include_workspace), ensure_ascii=False, indent=indent)


def loads(text: Union[str, bytes]) -> RepositoryState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidSnapshotError(f"State is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidSnapshotError("State must be a JSON object")
    return deserialize_state(data)


# ═══════════════════════════════════════════════════════════════════════════════
# Export Envelope
# ═══════════════════════════════════════════════════════════════════════════════


class SnapshotState(BaseModel):
    """State section of an exported snapshot."""
    model_config = ConfigDict(extra="allow")

    workspace_id: str
    commits: List[Dict[str, Any]] = Field(default_factory=list)
    branches: List[Dict[str, Any]] = Field(default_factory=list)
    current_branch: str

    @field_validator("workspace_id")
    @classmethod
    def workspace_id_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("workspace_id cannot be blank")
        return value


class SnapshotEnvelope(BaseModel):
    """Downloadable snapshot: state plus export metadata."""
    state: SnapshotState
    exported_at: datetime
    format_version: str = FORMAT_VERSION

    @field_validator("format_version")
    @classmethod
    def supported_major_version(cls, value: str) -> str:
        if value.split(".")[0] != FORMAT_VERSION.split(".")[0]:
            raise ValueError(f"Unsupported snapshot format version: {value}")
        return value


def export_snapshot(
    state: RepositoryState,
    exported_at: Optional[datetime] = None,
    include_workspace: bool = False,
) -> Dict[str, Any]:
    """
    Build an export envelope for a state snapshot.

    Args:
        state: Snapshot to export
        exported_at: Export time (defaults to now)
        include_workspace: Also export staged and working sets

    Returns:
        JSON-compatible envelope dictionary
    """
    envelope = SnapshotEnvelope(
        state=SnapshotState(**serialize_state(state, include_workspace)),
        exported_at=exported_at or datetime.now(),
    )
    return envelope.model_dump(mode="json")


def import_snapshot(data: Union[str, bytes, Dict[str, Any]]) -> RepositoryState:
    """
    Validate an export envelope and rebuild its state.

    Inverse of export_snapshot. The envelope must carry a state with a
    non-blank workspace_id.

    Raises:
        InvalidSnapshotError: If validation fails
    """
    try:
        if isinstance(data, (str, bytes)):
            envelope = SnapshotEnvelope.model_validate_json(data)
        else:
            envelope = SnapshotEnvelope.model_validate(data)
    except ValidationError as e:
        raise InvalidSnapshotError(f"Invalid snapshot: {e.error_count()} validation error(s)") from e

    return deserialize_state(envelope.state.model_dump())


def snapshot_filename(workspace_id: str, when: Optional[datetime] = None) -> str:
    """Suggested download file name for an exported snapshot."""
    when = when or datetime.now()
    return f"wvc-workspace-{workspace_id}-{when.date().isoformat()}.json"


__all__ = [
    "FORMAT_VERSION",
    "serialize_state",
    "deserialize_state",
    "dumps",
    "loads",
    "SnapshotState",
    "SnapshotEnvelope",
    "export_snapshot",
    "import_snapshot",
    "snapshot_filename",
]
