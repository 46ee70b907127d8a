"""
Session context: everything that lives exactly as long as a login.

Login creates the gateway, restores the user's snapshot into a fresh store
and wires the sync and profile services; logout flushes pending snapshot
writes and closes the HTTP client. Nothing session-scoped is global, so
switching users never leaks cached projects across identities.
"""

from __future__ import annotations

import logging
from types import TracebackType

from roadmate.core.config import RoadmateConfig, load_config
from roadmate.core.exceptions import ValidationError
from roadmate.core.profiles import ProfileFile
from roadmate.core.profiles.service import ProfileService
from roadmate.core.store import ProjectSnapshotFile, ProjectStore, SnapshotWriter
from roadmate.core.sync import ApiGateway, HttpSyncGateway, SyncService

logger = logging.getLogger(__name__)


class SessionContext:
    """
    Per-login container for the store, gateway and services.

    Example:
        >>> async with SessionContext.login("alice", token) as session:
        ...     await session.sync.refresh()
        ...     session.store.projects
    """

    def __init__(
        self,
        username: str,
        store: ProjectStore,
        gateway: ApiGateway,
        config: RoadmateConfig,
        profile_cache: ProfileFile | None = None,
    ) -> None:
        self.username = username
        self.store = store
        self.gateway = gateway
        self.config = config
        self.sync = SyncService(store, gateway, username)
        self.profiles = ProfileService(gateway, username, profile_cache)
        self._closed = False

    @classmethod
    def login(
        cls,
        username: str,
        token: str,
        config: RoadmateConfig | None = None,
        gateway: ApiGateway | None = None,
    ) -> SessionContext:
        """
        Start a session for ``username``.

        Args:
            username: Logged-in user; also namespaces the snapshot file
            token: Bearer token for the API
            config: Client configuration (loaded from disk/env if omitted)
            gateway: Gateway override (tests inject a fake)

        Raises:
            ValidationError: If the username or token is blank
        """
        username = username.strip()
        if not username:
            raise ValidationError("Username cannot be empty", field="username")
        if gateway is None and not token.strip():
            raise ValidationError("Token cannot be empty", field="token")

        config = config or load_config()
        sink = (
            ProjectSnapshotFile(config.data_dir, username) if config.persist_snapshots else None
        )
        store = ProjectStore.restore(SnapshotWriter(sink))

        if gateway is None:
            gateway = HttpSyncGateway(
                config.api_base_url, token.strip(), timeout=config.request_timeout
            )

        profile_cache = (
            ProfileFile(config.data_dir, username) if config.persist_snapshots else None
        )
        logger.info(f"Logged in as {username} ({len(store.projects)} cached project(s))")
        return cls(username, store, gateway, config, profile_cache)

    @property
    def closed(self) -> bool:
        return self._closed

    async def logout(self) -> None:
        """Flush pending snapshot writes and release the HTTP client."""
        if self._closed:
            return
        self._closed = True
        await self.store.writer.flush()
        aclose = getattr(self.gateway, "aclose", None)
        if aclose is not None:
            await aclose()
        logger.info(f"Logged out {self.username}")

    async def __aenter__(self) -> SessionContext:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.logout()
