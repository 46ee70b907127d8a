"""Tests for the login-scoped session context."""

import pytest

from roadmate.core.config import RoadmateConfig
from roadmate.core.exceptions import ValidationError
from roadmate.core.profiles import UserProfile
from roadmate.core.session import SessionContext
from roadmate.core.store import ProjectSnapshotFile
from roadmate.core.sync import HttpSyncGateway


@pytest.fixture
def config(tmp_path):
    return RoadmateConfig(data_dir=tmp_path / "data")


class TestLogin:
    """Tests for SessionContext.login."""

    def test_builds_http_gateway_from_config(self, config):
        session = SessionContext.login("alice", "secret", config=config)
        assert isinstance(session.gateway, HttpSyncGateway)
        assert session.gateway.token == "secret"
        assert session.sync.username == "alice"

    def test_blank_username_rejected(self, config):
        with pytest.raises(ValidationError):
            SessionContext.login("  ", "secret", config=config)

    def test_blank_token_rejected(self, config):
        with pytest.raises(ValidationError):
            SessionContext.login("alice", "", config=config)

    def test_first_login_starts_empty(self, config, fake_gateway):
        session = SessionContext.login("alice", "secret", config=config, gateway=fake_gateway)
        assert session.store.projects == []
        assert ProjectSnapshotFile(config.data_dir, "alice").load() is None

    def test_snapshots_disabled(self, tmp_path, fake_gateway):
        config = RoadmateConfig(data_dir=tmp_path / "data", persist_snapshots=False)
        session = SessionContext.login("alice", "secret", config=config, gateway=fake_gateway)
        assert session.store.writer.sink is None
        assert not (tmp_path / "data").exists()


class TestLifecycle:
    """Tests for logout and snapshot isolation between users."""

    @pytest.mark.asyncio
    async def test_logout_flushes_and_restores(self, config, fake_gateway):
        async with SessionContext.login(
            "alice", "secret", config=config, gateway=fake_gateway
        ) as session:
            project = await session.sync.create_project("Alpha")
        assert session.closed

        again = SessionContext.login("alice", "secret", config=config, gateway=fake_gateway)
        assert [p.id for p in again.store.projects] == [project.id]

    @pytest.mark.asyncio
    async def test_users_do_not_share_cache(self, config, fake_gateway):
        async with SessionContext.login(
            "alice", "secret", config=config, gateway=fake_gateway
        ) as session:
            await session.sync.create_project("Alpha")

        bob = SessionContext.login("bob", "secret", config=config, gateway=fake_gateway)
        assert bob.store.projects == []

    @pytest.mark.asyncio
    async def test_profile_cached_per_user(self, config, fake_gateway):
        async with SessionContext.login(
            "alice", "secret", config=config, gateway=fake_gateway
        ) as session:
            await session.profiles.add_skill("Go", 6)

        again = SessionContext.login("alice", "secret", config=config, gateway=fake_gateway)
        assert [s.name for s in again.profiles.profile.skills] == ["Go"]

        bob = SessionContext.login("bob", "secret", config=config, gateway=fake_gateway)
        assert bob.profiles.profile == UserProfile.default_for("bob")

    @pytest.mark.asyncio
    async def test_logout_closes_owned_client(self, config):
        session = SessionContext.login("alice", "secret", config=config)
        await session.logout()
        assert session.gateway._client.is_closed

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, config, fake_gateway):
        session = SessionContext.login("alice", "secret", config=config, gateway=fake_gateway)
        await session.logout()
        await session.logout()
        assert session.closed
