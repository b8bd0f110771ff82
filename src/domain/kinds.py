"""
Entity kind registry.

Every owned record type is described once here: its table, its record and
insert models, the secondary keys its listing can be narrowed by, and (for
second-order kinds) the parent link ownership is resolved through.
Both storage backends and the route layer are driven from these descriptors.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.entities import (
    Budget,
    Complaint,
    Customer,
    Department,
    Employee,
    FinancialRecord,
    Insert,
    InsertBudget,
    InsertComplaint,
    InsertCustomer,
    InsertDepartment,
    InsertEmployee,
    InsertFinancialRecord,
    InsertMeeting,
    InsertProduct,
    InsertProject,
    InsertTask,
    InsertTeam,
    InsertTeamMember,
    Meeting,
    Product,
    Project,
    Record,
    Task,
    Team,
    TeamMember,
)

OWNER_FIELD = "user_id"


@dataclass(frozen=True)
class ParentLink:
    """Ownership of a second-order kind, resolved through a parent record."""

    kind: str
    foreign_key: str


@dataclass(frozen=True)
class EntityKind:
    name: str
    model: type[Record]
    insert_model: type[Insert]
    filters: dict[str, type] = field(default_factory=dict)
    parent: ParentLink | None = None
    # foreign key -> kind; a set value must name a record of the same owner
    owned_refs: dict[str, str] = field(default_factory=dict)

    @property
    def table(self) -> str:
        return self.name

    @property
    def columns(self) -> list[str]:
        """Insertable columns, in model order."""
        return list(self.insert_model.model_fields)

    @property
    def owner_key(self) -> str:
        """Field that may never be reassigned by an update."""
        return self.parent.foreign_key if self.parent else OWNER_FIELD

    def check_filters(self, filters: dict[str, object]) -> dict[str, object]:
        """Drop unset filters; reject names the kind does not declare."""
        unknown = set(filters) - set(self.filters)
        if unknown:
            raise ValueError(f"Unknown filter(s) for {self.name}: {', '.join(sorted(unknown))}")
        return {k: v for k, v in filters.items() if v is not None}


CUSTOMERS = EntityKind("customers", Customer, InsertCustomer, {"type": str})
EMPLOYEES = EntityKind("employees", Employee, InsertEmployee, {"department_id": int})
PRODUCTS = EntityKind("products", Product, InsertProduct)
TASKS = EntityKind(
    "tasks",
    Task,
    InsertTask,
    {"assigned_to": int, "team_id": int, "project_id": int},
)
DEPARTMENTS = EntityKind("departments", Department, InsertDepartment)
TEAMS = EntityKind("teams", Team, InsertTeam, {"department_id": int})
TEAM_MEMBERS = EntityKind(
    "team_members",
    TeamMember,
    InsertTeamMember,
    {"team_id": int},
    parent=ParentLink(kind="teams", foreign_key="team_id"),
    owned_refs={"employee_id": "employees"},
)
COMPLAINTS = EntityKind("complaints", Complaint, InsertComplaint, {"customer_id": int})
FINANCIAL_RECORDS = EntityKind(
    "financial_records", FinancialRecord, InsertFinancialRecord, {"type": str}
)
BUDGETS = EntityKind(
    "budgets", Budget, InsertBudget, {"department_id": int, "project_id": int}
)
PROJECTS = EntityKind("projects", Project, InsertProject, {"team_id": int})
MEETINGS = EntityKind(
    "meetings", Meeting, InsertMeeting, {"team_id": int, "project_id": int}
)

ALL_KINDS: tuple[EntityKind, ...] = (
    CUSTOMERS,
    EMPLOYEES,
    PRODUCTS,
    TASKS,
    DEPARTMENTS,
    TEAMS,
    TEAM_MEMBERS,
    COMPLAINTS,
    FINANCIAL_RECORDS,
    BUDGETS,
    PROJECTS,
    MEETINGS,
)

_BY_NAME = {k.name: k for k in ALL_KINDS}


def get_kind(name: str) -> EntityKind:
    """Look up a kind by name. Raises KeyError for unknown kinds."""
    return _BY_NAME[name]
