"""
Records component - owner-scoped CRUD over every entity kind.

Every operation that addresses a record by id first resolves the record's
owner (directly, or through the parent for second-order kinds) and treats a
record owned by someone else exactly like a missing one.

Shell Layer - handles validation and error conversion; storage does the I/O.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from src.domain.entities import Record
from src.domain.kinds import OWNER_FIELD, EntityKind, get_kind
from src.domain.validation import FieldError, field_errors

from .models import (
    NOT_FOUND,
    VALIDATION,
    CreateRecordInput,
    DeleteRecordInput,
    GetRecordInput,
    ListRecordsInput,
    RankInput,
    RecordListOutput,
    RecordOutput,
    UpdateRecordInput,
)
from .ports import StoragePort

logger = logging.getLogger(__name__)

# --- Helpers ---


def owner_id_of(storage: StoragePort, kind: EntityKind, record: Record) -> int | None:
    """Owning user id, following the parent link for second-order kinds."""
    if kind.parent is None:
        return getattr(record, OWNER_FIELD)
    parent = storage.repo(kind.parent.kind).get(getattr(record, kind.parent.foreign_key))
    return getattr(parent, OWNER_FIELD) if parent is not None else None


def _parent_owned(storage: StoragePort, kind: EntityKind, parent_id: Any, actor_id: int) -> bool:
    if kind.parent is None:
        return True
    parent = storage.repo(kind.parent.kind).get(parent_id)
    return parent is not None and getattr(parent, OWNER_FIELD) == actor_id


def _refs_owned(
    storage: StoragePort,
    kind: EntityKind,
    data: Any,
    actor_id: int,
    fields: set[str] | None = None,
) -> bool:
    """Every set reference in ``fields`` (default: all) points at the actor's own record."""
    for foreign_key, ref_kind in kind.owned_refs.items():
        if fields is not None and foreign_key not in fields:
            continue
        ref_id = getattr(data, foreign_key)
        if ref_id is None:
            continue
        ref = storage.repo(ref_kind).get(ref_id)
        if ref is None or getattr(ref, OWNER_FIELD) != actor_id:
            return False
    return True


def _load_owned(
    storage: StoragePort, kind: EntityKind, record_id: int, actor_id: int
) -> Record | None:
    record = storage.repo(kind.name).get(record_id)
    if record is None or owner_id_of(storage, kind, record) != actor_id:
        return None
    return record


def _aliases(kind: EntityKind) -> dict[str, str]:
    """Wire name (camelCase alias or field name) -> alias, for insertable fields."""
    mapping: dict[str, str] = {}
    for name, info in kind.insert_model.model_fields.items():
        alias = info.alias or name
        mapping[name] = alias
        mapping[alias] = alias
    return mapping


def _to_alias_keys(kind: EntityKind, payload: dict[str, Any]) -> dict[str, Any]:
    """Normalize payload keys to aliases, dropping keys that are not insertable."""
    aliases = _aliases(kind)
    return {aliases[key]: value for key, value in payload.items() if key in aliases}


def _not_found() -> RecordOutput:
    return RecordOutput(success=False, error=NOT_FOUND)


# --- Shell Layer Functions ---


def run_list(inp: ListRecordsInput, storage: StoragePort) -> RecordListOutput:
    """List the actor's records of a kind, narrowed by optional filters."""
    kind = get_kind(inp.kind)

    if kind.parent is not None:
        parent_id = inp.filters.get(kind.parent.foreign_key)
        if parent_id is not None and not _parent_owned(storage, kind, parent_id, inp.actor_id):
            return RecordListOutput(success=False, error=NOT_FOUND)

    try:
        records = storage.repo(kind.name).list(inp.actor_id, **inp.filters)
    except ValueError as e:
        return RecordListOutput(
            success=False,
            error=VALIDATION,
            errors=[FieldError(path=("query",), message=str(e), code="unknown_filter")],
        )
    return RecordListOutput(records=records, success=True)


def run_get(inp: GetRecordInput, storage: StoragePort) -> RecordOutput:
    kind = get_kind(inp.kind)
    record = _load_owned(storage, kind, inp.record_id, inp.actor_id)
    if record is None:
        return _not_found()
    return RecordOutput(record=record, success=True)


def run_create(inp: CreateRecordInput, storage: StoragePort) -> RecordOutput:
    """Validate the payload as the actor's new record and store it.

    Direct kinds get the actor stamped as owner regardless of what the payload
    says; second-order kinds must point at a parent the actor owns, and owned
    references (a team member's employee) must name the actor's records.
    """
    kind = get_kind(inp.kind)
    payload = _to_alias_keys(kind, inp.payload)
    if kind.parent is None:
        payload[_aliases(kind)[OWNER_FIELD]] = inp.actor_id

    try:
        data = kind.insert_model.model_validate(payload)
    except ValidationError as e:
        return RecordOutput(success=False, error=VALIDATION, errors=field_errors(e))

    if kind.parent is not None and not _parent_owned(
        storage, kind, getattr(data, kind.parent.foreign_key), inp.actor_id
    ):
        return _not_found()

    if not _refs_owned(storage, kind, data, inp.actor_id):
        return _not_found()

    record = storage.repo(kind.name).create(data)
    return RecordOutput(record=record, success=True)


def run_update(inp: UpdateRecordInput, storage: StoragePort) -> RecordOutput:
    """Apply a partial update.

    The supplied fields are checked against the create rules (merged onto the
    current record) and only those fields are written. The owner key is never
    reassigned.
    """
    kind = get_kind(inp.kind)
    current = _load_owned(storage, kind, inp.record_id, inp.actor_id)
    if current is None:
        return _not_found()

    owner_alias = _aliases(kind)[kind.owner_key]
    changes = {k: v for k, v in _to_alias_keys(kind, inp.payload).items() if k != owner_alias}
    if not changes:
        return RecordOutput(record=current, success=True)

    merged = {**current.model_dump(by_alias=True, include=set(kind.columns)), **changes}
    try:
        validated = kind.insert_model.model_validate(merged)
    except ValidationError as e:
        return RecordOutput(success=False, error=VALIDATION, errors=field_errors(e))

    by_alias = {info.alias or name: name for name, info in kind.insert_model.model_fields.items()}
    changed_fields = {by_alias[alias] for alias in changes}
    if not _refs_owned(storage, kind, validated, inp.actor_id, changed_fields):
        return _not_found()
    updated = storage.repo(kind.name).update(
        inp.record_id, validated.model_dump(include=changed_fields)
    )
    if updated is None:
        return _not_found()
    return RecordOutput(record=updated, success=True)


def run_delete(inp: DeleteRecordInput, storage: StoragePort) -> RecordOutput:
    kind = get_kind(inp.kind)
    record = _load_owned(storage, kind, inp.record_id, inp.actor_id)
    if record is None:
        return _not_found()

    if not storage.repo(kind.name).delete(inp.record_id):
        return _not_found()

    logger.info("Deleted %s %s for user %s", kind.name, inp.record_id, inp.actor_id)
    return RecordOutput(record=record, success=True)


def _check_limit(inp: RankInput) -> RecordListOutput | None:
    if 1 <= inp.limit <= inp.max_limit:
        return None
    return RecordListOutput(
        success=False,
        error=VALIDATION,
        errors=[
            FieldError(
                path=("query", "limit"),
                message=f"limit must be between 1 and {inp.max_limit}",
                code="out_of_range",
            )
        ],
    )


def run_top_employees(inp: RankInput, storage: StoragePort) -> RecordListOutput:
    """Actor's employees by performance, best first."""
    invalid = _check_limit(inp)
    if invalid is not None:
        return invalid
    records = storage.top_performing_employees(inp.actor_id, inp.limit)
    return RecordListOutput(records=list(records), success=True)


def run_top_products(inp: RankInput, storage: StoragePort) -> RecordListOutput:
    """Actor's products by sales, best first."""
    invalid = _check_limit(inp)
    if invalid is not None:
        return invalid
    records = storage.top_products(inp.actor_id, inp.limit)
    return RecordListOutput(records=list(records), success=True)
