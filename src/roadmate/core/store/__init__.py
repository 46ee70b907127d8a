"""
Project cache and its local snapshot.

Example:
    >>> from roadmate.core.store import ProjectStore, ProjectSnapshotFile, SnapshotWriter
    >>> writer = SnapshotWriter(ProjectSnapshotFile(data_dir, "alice"))
    >>> store = ProjectStore.restore(writer)
"""

from roadmate.core.store.persistence import (
    ProjectSnapshot,
    ProjectSnapshotFile,
    SnapshotSink,
    SnapshotWriter,
    atomic_write_text,
    safe_username,
)
from roadmate.core.store.sequencer import MutationSequencer, project_key, task_key
from roadmate.core.store.store import ProjectStore

__all__ = [
    "MutationSequencer",
    "ProjectSnapshot",
    "ProjectSnapshotFile",
    "ProjectStore",
    "SnapshotSink",
    "SnapshotWriter",
    "atomic_write_text",
    "project_key",
    "safe_username",
    "task_key",
]
