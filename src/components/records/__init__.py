"""
Records component - Owner-scoped CRUD and dashboard rankings.

One set of entry points serves every entity kind; the kind name selects the
repository and the insert model.
"""

from .component import (
    owner_id_of,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_top_employees,
    run_top_products,
    run_update,
)
from .models import (
    NOT_FOUND,
    VALIDATION,
    CreateRecordInput,
    DeleteRecordInput,
    FieldError,
    GetRecordInput,
    ListRecordsInput,
    RankInput,
    RecordListOutput,
    RecordOutput,
    UpdateRecordInput,
)
from .ports import EntityRepoPort, StoragePort

__all__ = [
    # Entry points
    "owner_id_of",
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_top_employees",
    "run_top_products",
    "run_update",
    # Models
    "NOT_FOUND",
    "VALIDATION",
    "CreateRecordInput",
    "DeleteRecordInput",
    "FieldError",
    "GetRecordInput",
    "ListRecordsInput",
    "RankInput",
    "RecordListOutput",
    "RecordOutput",
    "UpdateRecordInput",
    # Ports
    "EntityRepoPort",
    "StoragePort",
]
