"""Shared fixtures: a small catalog, a controllable clock and a Redis double."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from accessmask import (
    ActionSpec,
    FeatureConfig,
    FeatureRegistry,
    InMemoryUserStore,
    PermissionCache,
    PermissionCodec,
    PermissionResolver,
    SecurityLevel,
    UserRecord,
)

PRODUCT_ID = 5
CONFIG_ID = 18

TEST_FEATURES = (
    FeatureConfig(
        id=PRODUCT_ID,
        name="product",
        actions={
            "read": ActionSpec(value=1, min_level=SecurityLevel.READER),
            "update": ActionSpec(value=2, min_level=SecurityLevel.USER),
            "create": ActionSpec(value=4, min_level=SecurityLevel.USER, inherits=("update",)),
            "execute": ActionSpec(min_level=SecurityLevel.NOBODY),
            "delete": ActionSpec(value=16, min_level=SecurityLevel.ADMIN),
        },
    ),
    FeatureConfig(
        id=CONFIG_ID,
        name="config",
        actions={
            "read": ActionSpec(min_level=SecurityLevel.INTEGRATOR),
            "update": ActionSpec(min_level=SecurityLevel.INTEGRATOR),
            "create": ActionSpec(min_level=SecurityLevel.ADMIN),
            "execute": ActionSpec(min_level=SecurityLevel.ADMIN),
        },
    ),
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeRedis:
    """Minimal in-memory stand-in for ``redis.asyncio.Redis``."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.closed = False

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def registry() -> FeatureRegistry:
    return FeatureRegistry.build(TEST_FEATURES)


@pytest.fixture
def codec(registry: FeatureRegistry) -> PermissionCodec:
    return PermissionCodec(registry)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def resolver(registry: FeatureRegistry, codec: PermissionCodec, clock: FakeClock) -> PermissionResolver:
    return PermissionResolver(registry, codec, clock=clock)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(resolver: PermissionResolver, fake_redis: FakeRedis) -> PermissionCache:
    return PermissionCache(resolver, fake_redis, timeout=0.2, retry_after=60)


@pytest.fixture
def users() -> InMemoryUserStore:
    return InMemoryUserStore(
        [
            UserRecord(id=1, level=SecurityLevel.USER),
            UserRecord(id=2, level=SecurityLevel.ADMIN, is_active=False),
            UserRecord(id=3, level=SecurityLevel.READER),
        ]
    )
