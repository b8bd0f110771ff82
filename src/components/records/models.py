"""
Records component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import Record
from src.domain.validation import FieldError

# Error codes surfaced to the shell layer
NOT_FOUND = "not_found"
VALIDATION = "validation"


# --- Input Models ---


@dataclass
class ListRecordsInput:
    kind: str
    actor_id: int
    filters: dict[str, Any] = field(default_factory=dict)


@dataclass
class GetRecordInput:
    kind: str
    actor_id: int
    record_id: int


@dataclass
class CreateRecordInput:
    kind: str
    actor_id: int
    payload: dict[str, Any]


@dataclass
class UpdateRecordInput:
    kind: str
    actor_id: int
    record_id: int
    payload: dict[str, Any]


@dataclass
class DeleteRecordInput:
    kind: str
    actor_id: int
    record_id: int


@dataclass
class RankInput:
    actor_id: int
    limit: int
    max_limit: int


# --- Output Models ---


@dataclass
class RecordOutput:
    record: Record | None = None
    success: bool = False
    error: str | None = None
    errors: list[FieldError] = field(default_factory=list)


@dataclass
class RecordListOutput:
    records: list[Record] = field(default_factory=list)
    success: bool = False
    error: str | None = None
    errors: list[FieldError] = field(default_factory=list)
