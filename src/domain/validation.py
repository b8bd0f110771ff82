"""Field-level validation errors in the shape the API reports them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError


@dataclass(frozen=True)
class FieldError:
    """One failed field: location, human message, machine code."""

    path: tuple[str | int, ...]
    message: str
    code: str

    def as_dict(self) -> dict[str, Any]:
        return {"path": list(self.path), "message": self.message, "code": self.code}


def field_errors(exc: ValidationError) -> list[FieldError]:
    return [
        FieldError(path=tuple(err["loc"]), message=err["msg"], code=err["type"])
        for err in exc.errors()
    ]
