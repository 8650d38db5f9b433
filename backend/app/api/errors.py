"""
Exception handlers rendering every failure as the structured envelope
{"ok": false, "code": ..., "message": ...}.

Storage errors are logged with their detail but reported to the caller as a
generic InternalFailure so database internals never leak.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette import status

from app.core.exceptions import AttendanceError, InternalFailure
from app.core.logging import get_logger
from app.schemas.common import ErrorResponse

logger = get_logger(__name__)


def _error_response(status_code: int, code: str, message: str, detail=None) -> JSONResponse:
    body = ErrorResponse(code=code, message=message, detail=detail)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def attendance_error_handler(request: Request, exc: AttendanceError) -> JSONResponse:
    return _error_response(exc.status_code, exc.error_code, exc.message)


def _validation_detail(errors) -> list[dict]:
    """Validation errors as JSON-safe dicts; ctx values may be exception objects."""
    detail = []
    for err in errors:
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {key: str(value) for key, value in err["ctx"].items()}
        detail.append(err)
    return jsonable_encoder(detail)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationFailed",
        "Request validation failed",
        detail=_validation_detail(exc.errors()),
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("storage_failure", error_type=type(exc).__name__, error=str(exc))
    failure = InternalFailure()
    return _error_response(failure.status_code, failure.error_code, failure.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AttendanceError, attendance_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
