"""Translate failures into the API's error responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dairycart.api.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Unexpected internal error occurred"

# how each item type is identified in not-found messages
ITEM_IDENTIFIERS = {
    "product": "sku",
    "product root": "id",
    "product option": "id",
    "product option value": "id",
    "webhook": "id",
}


def row_does_not_exist(item_type: str, value: str | int) -> HTTPException:
    identifier = ITEM_IDENTIFIERS.get(item_type, "identified by")
    logger.info(
        f"informing user that the {item_type} they were looking for "
        f"({identifier} '{value}') does not exist"
    )
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"The {item_type} you were looking for ({identifier} '{value}') does not exist",
    )


def invalid_request_body(message: str) -> HTTPException:
    logger.info(f"Rejecting request body: {message}")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def internal_issue(attempted_task: str, error: Exception | None = None) -> HTTPException:
    logger.error(f"Encountered this error trying to {attempted_task}: {error}", exc_info=error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=INTERNAL_ERROR_MESSAGE,
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(status=status_code, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Render every HTTP error as ``{"status": ..., "message": ...}``."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = _error_response(exc.status_code, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"Invalid input provided in request: {location} {first.get('msg', '')}".strip()
        else:
            message = "Invalid input provided in request"
        logger.info(f"Request validation failed for {request.url.path}: {errors}")
        return _error_response(status.HTTP_400_BAD_REQUEST, message)
