from datetime import UTC, datetime
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# --- Base ---

# SQLite INTEGER is a signed 64-bit value
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

Int64 = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


class Record(BaseModel):
    """Stored entity: server-assigned id and creation timestamp, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    created_at: datetime


class Insert(BaseModel):
    """Caller-supplied fields for a new record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Users ---


class InsertUser(Insert):
    username: str
    password: str
    company_name: str
    business_type: str | None = None
    web_link: str | None = None
    logo: str | None = None


class User(InsertUser, Record):
    pass


# --- CRM ---


class InsertCustomer(Insert):
    user_id: Int64
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    type: str | None = None
    notes: str | None = None


class Customer(InsertCustomer, Record):
    pass


class InsertComplaint(Insert):
    user_id: Int64
    subject: str
    description: str | None = None
    customer_id: Int64 | None = None
    status: str = "open"
    priority: str = "medium"
    resolved_at: datetime | None = None


class Complaint(InsertComplaint, Record):
    pass


# --- HR ---


class InsertDepartment(Insert):
    user_id: Int64
    name: str
    description: str | None = None
    manager_id: Int64 | None = None


class Department(InsertDepartment, Record):
    pass


class InsertEmployee(Insert):
    user_id: Int64
    name: str
    email: str | None = None
    phone: str | None = None
    position: str | None = None
    department_id: Int64 | None = None
    start_date: datetime | None = None
    status: str = "active"
    performance: Int64 | None = None


class Employee(InsertEmployee, Record):
    pass


class InsertTeam(Insert):
    user_id: Int64
    name: str
    description: str | None = None
    department_id: Int64 | None = None
    lead_id: Int64 | None = None


class Team(InsertTeam, Record):
    pass


class InsertTeamMember(Insert):
    team_id: Int64
    employee_id: Int64
    role: str | None = None


class TeamMember(InsertTeamMember, Record):
    pass


# --- Marketplace ---


class InsertProduct(Insert):
    user_id: Int64
    name: str
    description: str | None = None
    price: str | None = None
    category: str | None = None
    inventory: Int64 = 0
    image: str | None = None
    is_published: bool = False
    sales: Int64 | None = None
    revenue: float | None = None


class Product(InsertProduct, Record):
    pass


# --- Accounting ---


class InsertFinancialRecord(Insert):
    user_id: Int64
    type: str
    amount: float
    category: str | None = None
    description: str | None = None
    date: datetime | None = None
    status: str | None = None


class FinancialRecord(InsertFinancialRecord, Record):
    pass


class InsertBudget(Insert):
    user_id: Int64
    name: str
    amount: float
    spent: float | None = None
    department_id: Int64 | None = None
    project_id: Int64 | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class Budget(InsertBudget, Record):
    pass


# --- Operations ---


class InsertProject(Insert):
    user_id: Int64
    name: str
    description: str | None = None
    status: str = "planning"
    team_id: Int64 | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    budget: float | None = None


class Project(InsertProject, Record):
    pass


class InsertTask(Insert):
    user_id: Int64
    title: str
    description: str | None = None
    due_date: datetime | None = None
    status: str = "pending"
    priority: str = "medium"
    assigned_to: Int64 | None = None
    team_id: Int64 | None = None
    project_id: Int64 | None = None
    category: str | None = None


class Task(InsertTask, Record):
    pass


class InsertMeeting(Insert):
    user_id: Int64
    title: str
    description: str | None = None
    team_id: Int64 | None = None
    project_id: Int64 | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = None


class Meeting(InsertMeeting, Record):
    pass


# --- Auth ---


class Session(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: int
    token_hash: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
