"""
Error responses.

Validation failures (from the request parser or from a component) become
400 ``{"message": "Validation failed", "errors": [...]}``; anything unhandled
becomes a logged 500 with a generic body.
"""

import logging
from collections.abc import Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domain.validation import FieldError

logger = logging.getLogger(__name__)


class ValidationFailed(Exception):
    def __init__(self, errors: Sequence[FieldError]) -> None:
        super().__init__("Validation failed")
        self.errors = list(errors)


def _validation_response(errors: list[dict[str, object]]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": errors},
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"path": list(err.get("loc", ())), "message": err.get("msg", ""), "code": err.get("type", "")}
        for err in exc.errors()
    ]
    return _validation_response(errors)


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return _validation_response([e.as_dict() for e in exc.errors])


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ValidationFailed, validation_failed_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
