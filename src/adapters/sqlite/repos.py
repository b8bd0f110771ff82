"""
SQLite storage adapter.

Implements StoragePort over the standard sqlite3 driver. Every call opens its
own connection and commits on success, so each storage call is one implicit
unit of work; there are no explicit multi-call transactions.
"""

from __future__ import annotations

import builtins
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import MIGRATIONS_DIR, SQLiteMigrator
from src.adapters.storage_base import RepoRegistry, mergeable
from src.domain.entities import Employee, Insert, InsertUser, Product, Record, User
from src.domain.kinds import ALL_KINDS, EMPLOYEES, OWNER_FIELD, PRODUCTS, EntityKind
from src.domain.policy import DEFAULT_WEB_LINK_BASE, web_link_for
from src.ports.clock import ClockPort

logger = logging.getLogger(__name__)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def to_db(value: Any) -> Any:
    """Python value to SQLite parameter (datetimes as ISO text)."""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteEntityRepo(SQLiteRepoBase):
    def __init__(self, db_path: str, kind: EntityKind, clock: ClockPort):
        super().__init__(db_path)
        self.kind = kind
        self._clock = clock

    def get(self, record_id: int) -> Record | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                f"SELECT * FROM {self.kind.table} WHERE id = ?", (record_id,)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def list(self, owner_id: int, **filters: Any) -> builtins.list[Record]:
        wanted = self.kind.check_filters(filters)
        query, params = self._owned_query(owner_id)
        for name, value in wanted.items():
            query += f" AND r.{name} = ?"
            params.append(to_db(value))
        query += " ORDER BY r.id ASC"

        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()

    def create(self, data: Insert) -> Record:
        values = data.model_dump()
        created_at = self._clock.now_utc()
        columns = self.kind.columns
        placeholders = ", ".join("?" for _ in range(len(columns) + 1))

        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"INSERT INTO {self.kind.table} ({', '.join(columns)}, created_at) "
                f"VALUES ({placeholders})",
                [to_db(values[c]) for c in columns] + [created_at.isoformat()],
            )
            conn.commit()
            record_id = cursor.lastrowid
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        return self.kind.model.model_validate(
            {**values, "id": record_id, "created_at": created_at}
        )

    def update(self, record_id: int, changes: dict[str, Any]) -> Record | None:
        writable = mergeable(self.kind.columns, changes)
        if not writable:
            return self.get(record_id)

        assignments = ", ".join(f"{name} = ?" for name in writable)
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"UPDATE {self.kind.table} SET {assignments} WHERE id = ?",
                [to_db(v) for v in writable.values()] + [record_id],
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return self.get(record_id)

    def delete(self, record_id: int) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute(f"DELETE FROM {self.kind.table} WHERE id = ?", (record_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def top_by(self, owner_id: int, field: str, limit: int) -> builtins.list[Record]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM {self.kind.table} WHERE {OWNER_FIELD} = ? "
                f"ORDER BY COALESCE({field}, 0) DESC, id ASC LIMIT ?",
                (owner_id, limit),
            ).fetchall()
            return [self._map_row(row) for row in rows]
        finally:
            conn.close()

    def _owned_query(self, owner_id: int) -> tuple[str, builtins.list[Any]]:
        table = self.kind.table
        parent = self.kind.parent
        if parent is None:
            return f"SELECT r.* FROM {table} AS r WHERE r.{OWNER_FIELD} = ?", [owner_id]
        return (
            f"SELECT r.* FROM {table} AS r "
            f"JOIN {parent.kind} AS p ON p.id = r.{parent.foreign_key} "
            f"WHERE p.{OWNER_FIELD} = ?",
            [owner_id],
        )

    def _map_row(self, row: dict[str, Any]) -> Record:
        return self.kind.model.model_validate(row)


class SQLiteUserRepo(SQLiteRepoBase):
    def __init__(
        self,
        db_path: str,
        clock: ClockPort,
        web_link_base: str = DEFAULT_WEB_LINK_BASE,
    ):
        super().__init__(db_path)
        self._clock = clock
        self._web_link_base = web_link_base

    def get(self, user_id: int) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return User.model_validate(row) if row else None
        finally:
            conn.close()

    def get_by_username(self, username: str) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ?", (username,)
            ).fetchone()
            return User.model_validate(row) if row else None
        finally:
            conn.close()

    def create(self, data: InsertUser) -> User:
        values = data.model_dump()
        values["web_link"] = values["web_link"] or web_link_for(
            data.company_name, self._web_link_base
        )
        created_at = self._clock.now_utc()

        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                INSERT INTO users (
                    username, password, company_name, business_type,
                    web_link, logo, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    values["username"],
                    values["password"],
                    values["company_name"],
                    values["business_type"],
                    values["web_link"],
                    values["logo"],
                    created_at.isoformat(),
                ),
            )
            conn.commit()
            user_id = cursor.lastrowid
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        return User.model_validate({**values, "id": user_id, "created_at": created_at})

    def update(self, user_id: int, changes: dict[str, Any]) -> User | None:
        writable = mergeable(list(InsertUser.model_fields), changes)
        if not writable:
            return self.get(user_id)

        assignments = ", ".join(f"{name} = ?" for name in writable)
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"UPDATE users SET {assignments} WHERE id = ?",
                [*writable.values(), user_id],
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
        finally:
            conn.close()
        return self.get(user_id)

    def delete(self, user_id: int) -> bool:
        conn = self._get_conn()
        try:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()


class SQLiteStorage(RepoRegistry):
    """Persistent StoragePort implementation backed by one SQLite file."""

    def __init__(
        self,
        db_path: str,
        clock: ClockPort | None = None,
        web_link_base: str = DEFAULT_WEB_LINK_BASE,
        migrations_dir: str | Path = MIGRATIONS_DIR,
    ) -> None:
        self.db_path = db_path
        self._migrations_dir = str(migrations_dir)
        clock = clock or SystemClock()
        self.users = SQLiteUserRepo(db_path, clock, web_link_base)
        self._repos: dict[str, SQLiteEntityRepo] = {
            kind.name: SQLiteEntityRepo(db_path, kind, clock) for kind in ALL_KINDS
        }

    def initialize(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        logger.info("Using SQLite storage at %s", self.db_path)
        SQLiteMigrator(self.db_path, self._migrations_dir).run_migrations()

    def top_performing_employees(self, owner_id: int, limit: int = 5) -> list[Employee]:
        return self._repos[EMPLOYEES.name].top_by(owner_id, "performance", limit)  # type: ignore[return-value]

    def top_products(self, owner_id: int, limit: int = 5) -> list[Product]:
        return self._repos[PRODUCTS.name].top_by(owner_id, "sales", limit)  # type: ignore[return-value]
