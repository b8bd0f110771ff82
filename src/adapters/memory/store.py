"""In-memory storage adapter.

Implements StoragePort with one dict per entity kind and a monotonic id
counter per kind. Data lives only as long as the instance; build one per app
(or per test) and pass it in. Suitable for single-process deployments.
"""

from __future__ import annotations

import builtins
import logging
from typing import Any

from src.adapters.clock import SystemClock
from src.adapters.storage_base import RepoRegistry, mergeable
from src.domain.entities import Employee, Insert, InsertUser, Product, Record, User
from src.domain.kinds import ALL_KINDS, OWNER_FIELD, EntityKind
from src.domain.policy import DEFAULT_WEB_LINK_BASE, top_by, web_link_for
from src.ports.clock import ClockPort

logger = logging.getLogger(__name__)


class InMemoryEntityRepo:
    def __init__(
        self,
        kind: EntityKind,
        clock: ClockPort,
        parent: InMemoryEntityRepo | None = None,
    ) -> None:
        self.kind = kind
        self._clock = clock
        self._parent = parent
        self._rows: dict[int, Record] = {}
        self._next_id = 1

    def get(self, record_id: int) -> Record | None:
        return self._rows.get(record_id)

    def list(self, owner_id: int, **filters: Any) -> builtins.list[Record]:
        wanted = self.kind.check_filters(filters)
        return [
            r
            for r in self._rows.values()
            if self._owned_by(r, owner_id)
            and all(getattr(r, name) == value for name, value in wanted.items())
        ]

    def create(self, data: Insert) -> Record:
        record_id = self._next_id
        self._next_id += 1
        record = self.kind.model.model_validate(
            {**data.model_dump(), "id": record_id, "created_at": self._clock.now_utc()}
        )
        self._rows[record_id] = record
        return record

    def update(self, record_id: int, changes: dict[str, Any]) -> Record | None:
        current = self._rows.get(record_id)
        if current is None:
            return None
        updated = current.model_copy(update=mergeable(self.kind.columns, changes))
        self._rows[record_id] = updated
        return updated

    def delete(self, record_id: int) -> bool:
        return self._rows.pop(record_id, None) is not None

    def _owned_by(self, record: Record, owner_id: int) -> bool:
        if self._parent is None or self.kind.parent is None:
            return bool(getattr(record, OWNER_FIELD) == owner_id)
        parent = self._parent.get(getattr(record, self.kind.parent.foreign_key))
        return parent is not None and getattr(parent, OWNER_FIELD) == owner_id


class InMemoryUserRepo:
    def __init__(self, clock: ClockPort, web_link_base: str = DEFAULT_WEB_LINK_BASE) -> None:
        self._clock = clock
        self._web_link_base = web_link_base
        self._users: dict[int, User] = {}
        self._next_id = 1

    def get(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def get_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def create(self, data: InsertUser) -> User:
        user_id = self._next_id
        self._next_id += 1
        values = data.model_dump()
        values["web_link"] = values["web_link"] or web_link_for(
            data.company_name, self._web_link_base
        )
        user = User.model_validate(
            {**values, "id": user_id, "created_at": self._clock.now_utc()}
        )
        self._users[user_id] = user
        return user

    def update(self, user_id: int, changes: dict[str, Any]) -> User | None:
        current = self._users.get(user_id)
        if current is None:
            return None
        updated = current.model_copy(
            update=mergeable(list(InsertUser.model_fields), changes)
        )
        self._users[user_id] = updated
        return updated

    def delete(self, user_id: int) -> bool:
        return self._users.pop(user_id, None) is not None


class InMemoryStorage(RepoRegistry):
    """Ephemeral StoragePort implementation."""

    def __init__(
        self,
        clock: ClockPort | None = None,
        web_link_base: str = DEFAULT_WEB_LINK_BASE,
    ) -> None:
        self._clock = clock or SystemClock()
        self.users = InMemoryUserRepo(self._clock, web_link_base)
        self._repos: dict[str, InMemoryEntityRepo] = {}
        # Parents precede children in ALL_KINDS
        for kind in ALL_KINDS:
            parent = self._repos[kind.parent.kind] if kind.parent else None
            self._repos[kind.name] = InMemoryEntityRepo(kind, self._clock, parent)

    def initialize(self) -> None:
        logger.info("Using in-memory storage; data will not survive a restart")

    def top_performing_employees(self, owner_id: int, limit: int = 5) -> list[Employee]:
        return top_by(self.employees.list(owner_id), "performance", limit)

    def top_products(self, owner_id: int, limit: int = 5) -> list[Product]:
        return top_by(self.products.list(owner_id), "sales", limit)
