"""Tests for AuthorizationAdmin write paths."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from accessmask import (
    AuthorizationAdmin,
    AuthorizationGate,
    CacheError,
    FeatureRegistry,
    InMemoryUserStore,
    NotFoundError,
    PermissionCache,
    PermissionCodec,
    SecurityLevel,
)
from accessmask.permissions import pack


@pytest.fixture
def admin(users: InMemoryUserStore, cache: PermissionCache, codec: PermissionCodec) -> AuthorizationAdmin:
    return AuthorizationAdmin(users, cache, codec)


@pytest.fixture
def gate(
    users: InMemoryUserStore,
    cache: PermissionCache,
    registry: FeatureRegistry,
    codec: PermissionCodec,
) -> AuthorizationGate:
    return AuthorizationGate(users, cache, registry, codec)


class TestUpdateAuthorization:
    """Tests for update_authorization."""

    @pytest.mark.asyncio
    async def test_level_change_visible_immediately(
        self, admin: AuthorizationAdmin, gate: AuthorizationGate, fake_redis
    ) -> None:
        assert not await gate.has_action(3, "product", "create")
        assert fake_redis.store

        await admin.update_authorization(3, level=SecurityLevel.USER)

        assert fake_redis.store == {}
        assert await gate.has_action(3, "product", "create")

    @pytest.mark.asyncio
    async def test_permissions_encoded_and_saved(
        self, admin: AuthorizationAdmin, users: InMemoryUserStore, gate: AuthorizationGate
    ) -> None:
        saved = await admin.update_authorization(1, permissions={"product": ["read"], "config": ["update"]})

        assert saved.override_string == f"{pack(5, 1)}.{pack(18, 3)}"
        stored = await users.get(1)
        assert stored.override_string == saved.override_string
        assert await gate.has_action(1, "config", "update")
        assert not await gate.has_action(1, "product", "update")

    @pytest.mark.asyncio
    async def test_permissions_none_clears_overrides(
        self, admin: AuthorizationAdmin, users: InMemoryUserStore
    ) -> None:
        await admin.update_authorization(1, permissions={"product": ["read"]})
        await admin.update_authorization(1, permissions=None)
        assert (await users.get(1)).override_string is None

    @pytest.mark.asyncio
    async def test_unset_fields_unchanged(
        self, admin: AuthorizationAdmin, users: InMemoryUserStore, clock
    ) -> None:
        expiry = clock.now + timedelta(days=3)
        await admin.update_authorization(1, permissions={"product": ["read"]}, expires_at=expiry)

        await admin.update_authorization(1, is_active=False)

        stored = await users.get(1)
        assert stored.is_active is False
        assert stored.level == SecurityLevel.USER
        assert stored.override_string == str(pack(5, 1))
        assert stored.overrides_expire_at == expiry

    @pytest.mark.asyncio
    async def test_unknown_user(self, admin: AuthorizationAdmin) -> None:
        with pytest.raises(NotFoundError):
            await admin.update_authorization(404, level=SecurityLevel.ADMIN)

    @pytest.mark.asyncio
    async def test_invalidation_failure_surfaces_after_save(
        self, admin: AuthorizationAdmin, users: InMemoryUserStore, fake_redis
    ) -> None:
        with patch.object(fake_redis, "delete", AsyncMock(side_effect=RedisConnectionError("down"))):
            with pytest.raises(CacheError):
                await admin.update_authorization(1, level=SecurityLevel.ADMIN)
        assert (await users.get(1)).level == SecurityLevel.ADMIN


class TestUpdateUserStatus:
    """Tests for update_user_status."""

    @pytest.mark.asyncio
    async def test_reactivate(self, admin: AuthorizationAdmin, gate: AuthorizationGate) -> None:
        assert not await gate.has_action(2, "config", "execute")
        await admin.update_user_status(2, is_active=True)
        assert await gate.has_action(2, "config", "execute")

    @pytest.mark.asyncio
    async def test_deactivate_invalidates(
        self, admin: AuthorizationAdmin, gate: AuthorizationGate, cache: PermissionCache, fake_redis
    ) -> None:
        assert await gate.has_action(1, "product", "read")
        with patch.object(cache, "invalidate", wraps=cache.invalidate) as invalidate:
            await admin.update_user_status(1, is_active=False)
        invalidate.assert_awaited_once_with(1)
        assert fake_redis.store == {}
        assert not await gate.has_action(1, "product", "read")

    @pytest.mark.asyncio
    async def test_set_expiry(self, admin: AuthorizationAdmin, users: InMemoryUserStore, clock) -> None:
        expiry = clock.now + timedelta(hours=1)
        record = await admin.update_user_status(3, expires_at=expiry)
        assert record.overrides_expire_at == expiry
        assert (await users.get(3)).overrides_expire_at == expiry


class TestClearOverrides:
    """Tests for clear_overrides."""

    @pytest.mark.asyncio
    async def test_clear(self, admin: AuthorizationAdmin, users: InMemoryUserStore, clock) -> None:
        await admin.update_authorization(
            3,
            permissions={"product": ["create"]},
            expires_at=clock.now + timedelta(days=1),
        )
        record = await admin.clear_overrides(3)
        assert record.override_string is None
        assert record.overrides_expire_at is None
        stored = await users.get(3)
        assert stored.override_string is None
        assert stored.level == SecurityLevel.READER
