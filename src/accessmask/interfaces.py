"""User collaborator port.

The permission engine never persists users itself; it reads the four
permission fields through ``UserStore`` and writes them back through
``UserStore.save`` on admin paths.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional


@dataclass
class UserRecord:
    """Permission-relevant slice of a user row."""

    id: int
    level: int
    is_active: bool = True
    override_string: Optional[str] = None
    overrides_expire_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        # Naive timestamps are stored as UTC.
        if self.overrides_expire_at is not None and self.overrides_expire_at.tzinfo is None:
            self.overrides_expire_at = self.overrides_expire_at.replace(tzinfo=timezone.utc)


class UserStore(ABC):
    """Read/write access to user permission state."""

    @abstractmethod
    async def get(self, user_id: int) -> Optional[UserRecord]:
        raise NotImplementedError

    @abstractmethod
    async def save(self, user: UserRecord) -> None:
        raise NotImplementedError


class InMemoryUserStore(UserStore):
    """Dict-backed store for embedding and tests.

    Records are copied on the way in and out so callers cannot mutate
    stored state without going through :meth:`save`.
    """

    def __init__(self, users: Iterable[UserRecord] = ()) -> None:
        self._users: Dict[int, UserRecord] = {u.id: copy.copy(u) for u in users}

    async def get(self, user_id: int) -> Optional[UserRecord]:
        user = self._users.get(user_id)
        return copy.copy(user) if user is not None else None

    async def save(self, user: UserRecord) -> None:
        self._users[user.id] = copy.copy(user)


__all__ = ["InMemoryUserStore", "UserRecord", "UserStore"]
