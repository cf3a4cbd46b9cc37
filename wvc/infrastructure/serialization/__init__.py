"""
State serialization.
"""

from .state_codec import (
    FORMAT_VERSION,
    serialize_state,
    deserialize_state,
    dumps,
    loads,
    SnapshotState,
    SnapshotEnvelope,
    export_snapshot,
    import_snapshot,
    snapshot_filename,
)

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
