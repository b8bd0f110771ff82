"""
Owner-scoped CRUD routes for every entity kind.

One router per kind is built from its descriptor, so every resource shares
the same state machine: unauthenticated -> 401; absent or foreign -> 404;
bad input -> 400; otherwise the stored record.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response, status
from pydantic.alias_generators import to_camel

from src.api.deps import get_current_user, get_storage
from src.api.errors import ValidationFailed
from src.api.schemas import record_to_wire
from src.components.records import (
    NOT_FOUND,
    CreateRecordInput,
    DeleteRecordInput,
    GetRecordInput,
    ListRecordsInput,
    RecordListOutput,
    RecordOutput,
    UpdateRecordInput,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_update,
)
from src.domain.entities import INT64_MAX, INT64_MIN, User
from src.domain.kinds import (
    BUDGETS,
    COMPLAINTS,
    CUSTOMERS,
    DEPARTMENTS,
    EMPLOYEES,
    FINANCIAL_RECORDS,
    MEETINGS,
    PRODUCTS,
    PROJECTS,
    TASKS,
    TEAM_MEMBERS,
    TEAMS,
    EntityKind,
)
from src.domain.validation import FieldError

# URL prefix -> kind; team members are listed and created under their team
RESOURCES: dict[str, EntityKind] = {
    "/api/customers": CUSTOMERS,
    "/api/employees": EMPLOYEES,
    "/api/products": PRODUCTS,
    "/api/tasks": TASKS,
    "/api/departments": DEPARTMENTS,
    "/api/teams": TEAMS,
    "/api/complaints": COMPLAINTS,
    "/api/financial-records": FINANCIAL_RECORDS,
    "/api/budgets": BUDGETS,
    "/api/projects": PROJECTS,
    "/api/meetings": MEETINGS,
    "/api/team-members": TEAM_MEMBERS,
}


def not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


def parse_id(raw: str) -> int:
    """Path id as int; anything else, or anything no table can hold, names no record."""
    try:
        record_id = int(raw)
    except ValueError:
        raise not_found() from None
    if not 1 <= record_id <= INT64_MAX:
        raise not_found()
    return record_id


def parse_filters(kind: EntityKind, request: Request) -> dict[str, Any]:
    """Declared filters from camelCase (or snake_case) query params."""
    filters: dict[str, Any] = {}
    errors: list[FieldError] = []
    for name, caster in kind.filters.items():
        alias = to_camel(name)
        raw = request.query_params.get(alias, request.query_params.get(name))
        if raw is None:
            continue
        try:
            value = caster(raw)
        except ValueError:
            errors.append(
                FieldError(
                    path=("query", alias),
                    message=f"Input should be a valid {caster.__name__}",
                    code=f"{caster.__name__}_parsing",
                )
            )
            continue
        if isinstance(value, int) and not INT64_MIN <= value <= INT64_MAX:
            errors.append(
                FieldError(
                    path=("query", alias),
                    message=f"Input should be between {INT64_MIN} and {INT64_MAX}",
                    code="int_out_of_range",
                )
            )
            continue
        filters[name] = value
    if errors:
        raise ValidationFailed(errors)
    return filters


def unwrap(result: RecordOutput) -> dict[str, Any]:
    if result.success and result.record is not None:
        return record_to_wire(result.record)
    if result.error == NOT_FOUND:
        raise not_found()
    raise ValidationFailed(result.errors)


def unwrap_list(result: RecordListOutput) -> list[dict[str, Any]]:
    if result.success:
        return [record_to_wire(r) for r in result.records]
    if result.error == NOT_FOUND:
        raise not_found()
    raise ValidationFailed(result.errors)


def build_crud_router(kind: EntityKind, *, collection: bool = True) -> APIRouter:
    """
    Routes for one kind: ``GET/POST ""`` when collection is set, and
    ``GET/PUT/DELETE /{record_id}`` always.
    """
    router = APIRouter()

    if collection:

        @router.get("")
        def list_records(
            request: Request,
            current_user: User = Depends(get_current_user),
            storage: Any = Depends(get_storage),
        ) -> list[dict[str, Any]]:
            inp = ListRecordsInput(
                kind=kind.name, actor_id=current_user.id, filters=parse_filters(kind, request)
            )
            return unwrap_list(run_list(inp, storage))

        @router.post("", status_code=status.HTTP_201_CREATED)
        def create_record(
            payload: dict[str, Any] = Body(...),
            current_user: User = Depends(get_current_user),
            storage: Any = Depends(get_storage),
        ) -> dict[str, Any]:
            inp = CreateRecordInput(kind=kind.name, actor_id=current_user.id, payload=payload)
            return unwrap(run_create(inp, storage))

    @router.get("/{record_id}")
    def get_record(
        record_id: str,
        current_user: User = Depends(get_current_user),
        storage: Any = Depends(get_storage),
    ) -> dict[str, Any]:
        inp = GetRecordInput(kind=kind.name, actor_id=current_user.id, record_id=parse_id(record_id))
        return unwrap(run_get(inp, storage))

    @router.put("/{record_id}")
    def update_record(
        record_id: str,
        payload: dict[str, Any] = Body(...),
        current_user: User = Depends(get_current_user),
        storage: Any = Depends(get_storage),
    ) -> dict[str, Any]:
        inp = UpdateRecordInput(
            kind=kind.name,
            actor_id=current_user.id,
            record_id=parse_id(record_id),
            payload=payload,
        )
        return unwrap(run_update(inp, storage))

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_record(
        record_id: str,
        current_user: User = Depends(get_current_user),
        storage: Any = Depends(get_storage),
    ) -> Response:
        inp = DeleteRecordInput(
            kind=kind.name, actor_id=current_user.id, record_id=parse_id(record_id)
        )
        unwrap(run_delete(inp, storage))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


def team_members_router() -> APIRouter:
    """``/api/teams/{team_id}/members``: the team must belong to the caller."""
    router = APIRouter()

    @router.get("/{team_id}/members")
    def list_team_members(
        team_id: str,
        current_user: User = Depends(get_current_user),
        storage: Any = Depends(get_storage),
    ) -> list[dict[str, Any]]:
        inp = ListRecordsInput(
            kind=TEAM_MEMBERS.name,
            actor_id=current_user.id,
            filters={"team_id": parse_id(team_id)},
        )
        return unwrap_list(run_list(inp, storage))

    @router.post("/{team_id}/members", status_code=status.HTTP_201_CREATED)
    def add_team_member(
        team_id: str,
        payload: dict[str, Any] = Body(...),
        current_user: User = Depends(get_current_user),
        storage: Any = Depends(get_storage),
    ) -> dict[str, Any]:
        inp = CreateRecordInput(
            kind=TEAM_MEMBERS.name,
            actor_id=current_user.id,
            payload={
                **{k: v for k, v in payload.items() if k not in ("teamId", "team_id")},
                "teamId": parse_id(team_id),
            },
        )
        return unwrap(run_create(inp, storage))

    return router


def include_record_routers(app: Any) -> None:
    app.include_router(team_members_router(), prefix="/api/teams", tags=["Team Members"])
    for prefix, kind in RESOURCES.items():
        app.include_router(
            build_crud_router(kind, collection=kind is not TEAM_MEMBERS),
            prefix=prefix,
            tags=[kind.name],
        )
