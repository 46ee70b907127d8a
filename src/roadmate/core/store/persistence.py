"""
Local snapshot of the project cache.

The snapshot is a non-authoritative mirror used for fast cold start and
offline viewing. It is namespaced per logged-in user:

    $XDG_DATA_HOME/roadmate/projects-<username>.json

Writes are atomic (temp file + rename). A missing, unreadable or invalid
snapshot simply means "no cached state".
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field
from pydantic import ValidationError as ModelValidationError

from roadmate.core.board.index import BoardIndex
from roadmate.core.projects.models import Project

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]+")


def safe_username(username: str) -> str:
    """Make a username usable as a file name component."""
    return _UNSAFE_CHARS.sub("-", username)


def atomic_write_text(path: Path, text: str) -> None:
    """
    Replace ``path`` with ``text`` atomically.

    Uses a temporary file in the same directory and an atomic rename so a
    crash mid-write never leaves a truncated file behind.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}_", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.write("\n")
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


class ProjectSnapshot(BaseModel):
    """On-disk snapshot payload."""

    version: int = SNAPSHOT_VERSION
    username: str
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    projects: list[Project] = Field(default_factory=list)


@runtime_checkable
class SnapshotSink(Protocol):
    """Durable storage for the project cache."""

    def save(self, projects: list[Project]) -> None:
        """Persist the given projects, replacing any previous snapshot."""
        ...

    def load(self) -> list[Project] | None:
        """Return the last saved projects, or None if there is no usable snapshot."""
        ...


class ProjectSnapshotFile:
    """
    JSON file snapshot for one user.

    Example:
        >>> sink = ProjectSnapshotFile(Path("~/.local/share/roadmate"), "alice")
        >>> sink.save(store.projects)
        >>> sink.load()
    """

    def __init__(self, data_dir: Path, username: str) -> None:
        self.data_dir = Path(data_dir)
        self.username = username
        self.path = self.data_dir / f"projects-{safe_username(username)}.json"

    def save(self, projects: list[Project]) -> None:
        """Write the snapshot atomically."""
        snapshot = ProjectSnapshot(username=self.username, projects=projects)
        atomic_write_text(self.path, snapshot.model_dump_json(indent=2))

    def load(self) -> list[Project] | None:
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            snapshot = ProjectSnapshot.model_validate(data)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable snapshot {self.path}: {e}")
            return None
        except ModelValidationError as e:
            logger.warning(f"Ignoring invalid snapshot {self.path}: {e.error_count()} error(s)")
            return None

        if snapshot.version != SNAPSHOT_VERSION:
            logger.warning(f"Ignoring snapshot {self.path} with version {snapshot.version}")
            return None

        for project in snapshot.projects:
            board = BoardIndex(project)
            if not board.verify():
                logger.info(f"Renumbering board of project {project.id} loaded from snapshot")
                board.normalize_all()
        return snapshot.projects


class SnapshotWriter:
    """
    Fire-and-forget snapshot scheduling.

    The projects are copied when the write is scheduled, so later in-memory
    mutations never leak into an earlier snapshot. Inside a running event
    loop the write happens on the default executor; otherwise it runs
    inline. Failed writes are logged and dropped: the in-memory store stays
    correct and only cold-start freshness suffers.
    """

    def __init__(self, sink: SnapshotSink | None) -> None:
        self.sink = sink
        self._pending: set[asyncio.Future[None]] = set()
        self._lock = threading.Lock()
        self._generation = 0
        self._written = 0

    def schedule(self, projects: list[Project]) -> None:
        if self.sink is None:
            return

        self._generation += 1
        payload = [p.model_copy(deep=True) for p in projects]
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write(payload, self._generation)
            return

        future = loop.run_in_executor(None, self._write, payload, self._generation)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    def _write(self, projects: list[Project], generation: int) -> None:
        if self.sink is None:
            return
        with self._lock:
            # Executor threads may run out of order
            if generation <= self._written:
                return
            try:
                self.sink.save(projects)
            except (OSError, ValueError) as e:
                logger.debug(f"Snapshot write failed: {e}")
                return
            self._written = generation

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def load(self) -> list[Project] | None:
        if self.sink is None:
            return None
        return self.sink.load()
