"""
The JSON envelope every failure is rendered in:

    {"success": false, "message": "..."}

Outside production, server errors also carry ``"error": <detail>``.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from exceptions import ApiError, ServerError

logger = logging.getLogger(__name__)


def envelope(message: str, **extra) -> dict:
    body = {"success": False, "message": message}
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


def _show_detail(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is not None and not settings.is_production


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    extra = {}
    if exc.status_code >= 500 and _show_detail(request):
        extra["error"] = exc.detail
    return JSONResponse(status_code=exc.status_code, content=envelope(exc.message, **extra))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=envelope("Validation failed", errors=jsonable_encoder(exc.errors())),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    extra = {"error": str(exc)} if _show_detail(request) else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=envelope(ServerError.message, **extra),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
