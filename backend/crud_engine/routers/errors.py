"""
Exception handlers rendering engine errors as ErrorDto bodies.

    app = FastAPI()
    register_exception_handlers(app)

    # NotFoundError("Book", 7) ->
    # 404 {"code": "RESOURCE_NOT_FOUND", "message": "Book (ID: 7) not found", ...}
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crud_shared.config.constants import ErrorCodes
from crud_shared.config.logging import router_logger as logger
from crud_shared.infrastructure.correlation import get_request_id
from crud_shared.utils.exceptions import AppException
from crud_shared.utils.schemas import CommonFieldErrorCode, ErrorDto, FieldErrorInfo


def _render(status_code: int, body: ErrorDto, headers: dict[str, str] | None = None) -> JSONResponse:
    response_headers = dict(headers or {})
    request_id = get_request_id()
    if request_id:
        response_headers.setdefault("X-Request-ID", request_id)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=response_headers,
    )


def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException (already logged when raised)."""
    body = ErrorDto.of(exc.message, code=exc.code).with_error_info(exc.error)
    return _render(exc.status_code, body, exc.headers)


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) or "body"


def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render request validation failures as 400 with one FieldErrorInfo per
    body field; query and path problems go to details.
    """
    field_errors: dict[str, FieldErrorInfo] = {}
    details: list[dict[str, str]] = []

    for error in exc.errors():
        loc = tuple(error.get("loc", ()))
        message = error.get("msg", "is invalid")
        if loc and loc[0] == "body":
            code = CommonFieldErrorCode.from_validation_type(error.get("type", ""))
            rejected = None if error.get("type") == "missing" else error.get("input")
            field_errors.setdefault(
                _field_name(loc),
                FieldErrorInfo(code=code.name, message=message, rejected_value=rejected),
            )
        else:
            details.append({"location": _field_name(loc), "message": message})

    logger.warning(
        "Request validation failed",
        path=request.url.path,
        fields=sorted(field_errors),
        other_errors=len(details),
    )

    body = ErrorDto(
        code=ErrorCodes.INVALID_ARGUMENT,
        message="Request validation failed",
        field_errors=field_errors or None,
        details=details or None,
    )
    return _render(status.HTTP_400_BAD_REQUEST, body)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the engine's exception handlers on an application."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
