from __future__ import annotations

import logging

from bson import ObjectId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised by a store backend when a read or write cannot be completed."""


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, **extra},
    )


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors: list[dict[str, str]] = []
    for err in exc.errors():
        # loc is ("query", "lat") / ("body", "email") / ("path", "exhibition_id")
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc) or "request", "message": err.get("msg", "Invalid value")})
    return errors


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _field_errors(exc)
    summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
    return error_response(400, f"Invalid request: {summary}", errors=errors)


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(500, "Failed to process request")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StoreError, _store_error_handler)


def require_valid_id(value: str, what: str) -> str:
    """Raise 400 unless *value* is a 24-hex document id."""
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {what} id")
    return value
