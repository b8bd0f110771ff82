"""
Kind-indexed repository registry shared by the storage backends.

Backends fill ``_repos`` with one repository per entity kind; this mixin
exposes them by name and as attributes (``storage.customers`` ...).
"""

from __future__ import annotations

from typing import Any


class RepoRegistry:
    _repos: dict[str, Any]

    def repo(self, kind: str) -> Any:
        """Repository for a kind name. Raises KeyError for unknown kinds."""
        return self._repos[kind]

    @property
    def customers(self) -> Any:
        return self._repos["customers"]

    @property
    def employees(self) -> Any:
        return self._repos["employees"]

    @property
    def products(self) -> Any:
        return self._repos["products"]

    @property
    def tasks(self) -> Any:
        return self._repos["tasks"]

    @property
    def departments(self) -> Any:
        return self._repos["departments"]

    @property
    def teams(self) -> Any:
        return self._repos["teams"]

    @property
    def team_members(self) -> Any:
        return self._repos["team_members"]

    @property
    def complaints(self) -> Any:
        return self._repos["complaints"]

    @property
    def financial_records(self) -> Any:
        return self._repos["financial_records"]

    @property
    def budgets(self) -> Any:
        return self._repos["budgets"]

    @property
    def projects(self) -> Any:
        return self._repos["projects"]

    @property
    def meetings(self) -> Any:
        return self._repos["meetings"]


def mergeable(columns: list[str], changes: dict[str, Any]) -> dict[str, Any]:
    """Keep only writable columns; identity fields are never merged."""
    return {k: v for k, v in changes.items() if k in columns}
