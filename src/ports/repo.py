from typing import Any, Protocol, TypeVar

from src.domain.entities import Employee, Insert, InsertUser, Product, Record, User

R = TypeVar("R", bound=Record, covariant=True)
I = TypeVar("I", bound=Insert, contravariant=True)  # noqa: E741


class EntityRepoPort(Protocol[R, I]):
    """Storage contract shared by every owned entity kind."""

    def get(self, record_id: int) -> R | None:
        ...

    def list(self, owner_id: int, **filters: Any) -> list[R]:
        """Records owned by owner_id (directly or through the parent), ANDed filters."""
        ...

    def create(self, data: I) -> R:
        ...

    def update(self, record_id: int, changes: dict[str, Any]) -> R | None:
        """Shallow merge; None when the id is absent."""
        ...

    def delete(self, record_id: int) -> bool:
        ...


class UserRepoPort(Protocol):
    def get(self, user_id: int) -> User | None:
        ...

    def get_by_username(self, username: str) -> User | None:
        ...

    def create(self, data: InsertUser) -> User:
        ...

    def update(self, user_id: int, changes: dict[str, Any]) -> User | None:
        ...

    def delete(self, user_id: int) -> bool:
        ...


class StoragePort(Protocol):
    """One repository per kind plus the ranking queries."""

    users: UserRepoPort

    def repo(self, kind: str) -> EntityRepoPort[Any, Any]:
        ...

    def top_performing_employees(self, owner_id: int, limit: int = 5) -> list[Employee]:
        ...

    def top_products(self, owner_id: int, limit: int = 5) -> list[Product]:
        ...

    def initialize(self) -> None:
        """Prepare the backend (schema, files). Safe to call repeatedly."""
        ...
