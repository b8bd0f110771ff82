"""
Records component unit tests.

Ownership, validation and partial updates over the in-memory backend.
"""

from __future__ import annotations

import pytest

from src.components.records import (
    NOT_FOUND,
    VALIDATION,
    CreateRecordInput,
    DeleteRecordInput,
    GetRecordInput,
    ListRecordsInput,
    RankInput,
    UpdateRecordInput,
    owner_id_of,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_top_employees,
    run_top_products,
    run_update,
)
from src.domain.entities import InsertUser
from src.domain.kinds import TEAM_MEMBERS


@pytest.fixture
def users(memory_storage):
    alice = memory_storage.users.create(
        InsertUser(username="alice", password="h", company_name="Alice Corp")
    )
    bob = memory_storage.users.create(
        InsertUser(username="bob", password="h", company_name="Bob Ltd")
    )
    return alice.id, bob.id


def _create(storage, kind, actor, **payload):
    result = run_create(CreateRecordInput(kind=kind, actor_id=actor, payload=payload), storage)
    assert result.success, result.errors
    return result.record


# --- Create ---


def test_create_stamps_actor_as_owner(memory_storage, users):
    alice, bob = users
    result = run_create(
        CreateRecordInput(kind="customers", actor_id=alice, payload={"name": "Ann", "userId": bob}),
        memory_storage,
    )
    assert result.success
    assert result.record.user_id == alice


def test_create_accepts_camel_case(memory_storage, users):
    alice, _ = users
    record = _create(memory_storage, "employees", alice, name="Eve", departmentId=3)
    assert record.department_id == 3


def test_create_ignores_identity_fields(memory_storage, users):
    alice, _ = users
    record = _create(memory_storage, "customers", alice, name="Ann", id=99, createdAt="x")
    assert record.id == 1


def test_create_missing_required_field(memory_storage, users):
    alice, _ = users
    result = run_create(
        CreateRecordInput(kind="tasks", actor_id=alice, payload={"description": "no title"}),
        memory_storage,
    )
    assert not result.success
    assert result.error == VALIDATION
    assert [e.path for e in result.errors] == [("title",)]
    assert result.errors[0].code == "missing"


def test_create_wrong_type(memory_storage, users):
    alice, _ = users
    result = run_create(
        CreateRecordInput(
            kind="financial_records",
            actor_id=alice,
            payload={"type": "income", "amount": "lots"},
        ),
        memory_storage,
    )
    assert result.error == VALIDATION
    assert result.errors[0].path == ("amount",)
    assert result.errors[0].as_dict()["path"] == ["amount"]


def test_create_team_member_requires_owned_team(memory_storage, users):
    alice, bob = users
    team = _create(memory_storage, "teams", bob, name="Ops")
    emp = _create(memory_storage, "employees", bob, name="Eve")

    result = run_create(
        CreateRecordInput(
            kind="team_members",
            actor_id=alice,
            payload={"teamId": team.id, "employeeId": emp.id},
        ),
        memory_storage,
    )
    assert result.error == NOT_FOUND

    member = _create(memory_storage, "team_members", bob, teamId=team.id, employeeId=emp.id)
    assert owner_id_of(memory_storage, TEAM_MEMBERS, member) == bob


def test_team_member_employee_must_be_owned(memory_storage, users):
    alice, bob = users
    team = _create(memory_storage, "teams", alice, name="Core")
    mine = _create(memory_storage, "employees", alice, name="Eve")
    theirs = _create(memory_storage, "employees", bob, name="Mallory")

    for employee_id in (theirs.id, 999):
        result = run_create(
            CreateRecordInput(
                kind="team_members",
                actor_id=alice,
                payload={"teamId": team.id, "employeeId": employee_id},
            ),
            memory_storage,
        )
        assert result.error == NOT_FOUND

    member = _create(memory_storage, "team_members", alice, teamId=team.id, employeeId=mine.id)
    moved = run_update(
        UpdateRecordInput(
            kind="team_members",
            actor_id=alice,
            record_id=member.id,
            payload={"employeeId": theirs.id},
        ),
        memory_storage,
    )
    assert moved.error == NOT_FOUND
    assert memory_storage.team_members.get(member.id).employee_id == mine.id


# --- Get / List ---


def test_get_foreign_record_is_not_found(memory_storage, users):
    alice, bob = users
    record = _create(memory_storage, "products", alice, name="Mug")

    mine = run_get(GetRecordInput(kind="products", actor_id=alice, record_id=record.id), memory_storage)
    assert mine.success
    assert mine.record == record

    theirs = run_get(GetRecordInput(kind="products", actor_id=bob, record_id=record.id), memory_storage)
    assert theirs.error == NOT_FOUND

    missing = run_get(GetRecordInput(kind="products", actor_id=alice, record_id=42), memory_storage)
    assert missing.error == NOT_FOUND


def test_list_with_filters(memory_storage, users):
    alice, bob = users
    a = _create(memory_storage, "budgets", alice, name="a", amount=10, departmentId=1)
    _create(memory_storage, "budgets", alice, name="b", amount=10, departmentId=2)
    _create(memory_storage, "budgets", bob, name="c", amount=10, departmentId=1)

    result = run_list(
        ListRecordsInput(kind="budgets", actor_id=alice, filters={"department_id": 1}),
        memory_storage,
    )
    assert result.success
    assert result.records == [a]


def test_list_unknown_filter(memory_storage, users):
    alice, _ = users
    result = run_list(
        ListRecordsInput(kind="products", actor_id=alice, filters={"team_id": 1}), memory_storage
    )
    assert result.error == VALIDATION
    assert result.errors[0].code == "unknown_filter"


def test_list_team_members_of_foreign_team(memory_storage, users):
    alice, bob = users
    team = _create(memory_storage, "teams", bob, name="Ops")
    result = run_list(
        ListRecordsInput(kind="team_members", actor_id=alice, filters={"team_id": team.id}),
        memory_storage,
    )
    assert result.error == NOT_FOUND


# --- Update ---


def test_update_writes_only_supplied_fields(memory_storage, users):
    alice, _ = users
    emp = _create(memory_storage, "employees", alice, name="Eve", position="Dev", performance=60)

    result = run_update(
        UpdateRecordInput(
            kind="employees", actor_id=alice, record_id=emp.id, payload={"performance": 80}
        ),
        memory_storage,
    )
    assert result.success
    assert result.record.performance == 80
    assert result.record.position == "Dev"
    assert result.record.name == "Eve"


def test_update_cannot_change_owner(memory_storage, users):
    alice, bob = users
    customer = _create(memory_storage, "customers", alice, name="Ann")

    result = run_update(
        UpdateRecordInput(
            kind="customers",
            actor_id=alice,
            record_id=customer.id,
            payload={"userId": bob, "user_id": bob, "name": "Anna"},
        ),
        memory_storage,
    )
    assert result.record.user_id == alice
    assert result.record.name == "Anna"


def test_update_cannot_move_team_member(memory_storage, users):
    alice, _ = users
    team = _create(memory_storage, "teams", alice, name="Core")
    other = _create(memory_storage, "teams", alice, name="Other")
    emp = _create(memory_storage, "employees", alice, name="Eve")
    member = _create(memory_storage, "team_members", alice, teamId=team.id, employeeId=emp.id)

    result = run_update(
        UpdateRecordInput(
            kind="team_members",
            actor_id=alice,
            record_id=member.id,
            payload={"teamId": other.id, "role": "lead"},
        ),
        memory_storage,
    )
    assert result.record.team_id == team.id
    assert result.record.role == "lead"


def test_update_validates_supplied_fields(memory_storage, users):
    alice, _ = users
    task = _create(memory_storage, "tasks", alice, title="t")

    result = run_update(
        UpdateRecordInput(
            kind="tasks", actor_id=alice, record_id=task.id, payload={"title": None}
        ),
        memory_storage,
    )
    assert result.error == VALIDATION
    assert result.errors[0].path == ("title",)
    assert memory_storage.tasks.get(task.id) == task


def test_update_foreign_record(memory_storage, users):
    alice, bob = users
    task = _create(memory_storage, "tasks", alice, title="t")
    result = run_update(
        UpdateRecordInput(kind="tasks", actor_id=bob, record_id=task.id, payload={"title": "x"}),
        memory_storage,
    )
    assert result.error == NOT_FOUND
    assert memory_storage.tasks.get(task.id).title == "t"


def test_update_empty_payload_returns_current(memory_storage, users):
    alice, _ = users
    task = _create(memory_storage, "tasks", alice, title="t")
    result = run_update(
        UpdateRecordInput(kind="tasks", actor_id=alice, record_id=task.id, payload={"nope": 1}),
        memory_storage,
    )
    assert result.success
    assert result.record == task


# --- Delete ---


def test_delete(memory_storage, users):
    alice, bob = users
    meeting = _create(memory_storage, "meetings", alice, title="Standup")

    denied = run_delete(
        DeleteRecordInput(kind="meetings", actor_id=bob, record_id=meeting.id), memory_storage
    )
    assert denied.error == NOT_FOUND
    assert memory_storage.meetings.get(meeting.id) is not None

    done = run_delete(
        DeleteRecordInput(kind="meetings", actor_id=alice, record_id=meeting.id), memory_storage
    )
    assert done.success
    assert memory_storage.meetings.get(meeting.id) is None

    again = run_delete(
        DeleteRecordInput(kind="meetings", actor_id=alice, record_id=meeting.id), memory_storage
    )
    assert again.error == NOT_FOUND


# --- Rankings ---


def test_top_products_limit(memory_storage, users):
    alice, _ = users
    for i in range(7):
        _create(memory_storage, "products", alice, name=f"p{i}", sales=i)

    result = run_top_products(RankInput(actor_id=alice, limit=3, max_limit=100), memory_storage)
    assert [p.sales for p in result.records] == [6, 5, 4]


@pytest.mark.parametrize("limit", [0, -1, 101])
def test_rank_limit_out_of_range(memory_storage, users, limit):
    alice, _ = users
    result = run_top_employees(RankInput(actor_id=alice, limit=limit, max_limit=100), memory_storage)
    assert result.error == VALIDATION
    assert result.errors[0].code == "out_of_range"
