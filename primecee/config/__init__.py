from primecee.config.env import (
    SnapshotConfig,
    ValorisationConfig,
    load_snapshot_config,
    load_valorisation_config,
)
from primecee.config.snapshot import ProjectSnapshot, load_snapshot

__all__ = [
    "SnapshotConfig",
    "ValorisationConfig",
    "load_snapshot_config",
    "load_valorisation_config",
    "ProjectSnapshot",
    "load_snapshot",
]
