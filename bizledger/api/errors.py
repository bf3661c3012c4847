"""Response envelope helpers and exception handlers.

Every response body has the shape ``{success, data?, message?, error?}``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bizledger.errors import BizledgerError

logger = logging.getLogger(__name__)


def success_response(data: Any = None, message: Optional[str] = None, **kwargs: Any) -> Dict[str, Any]:
    """Create a standardized success response.

    Args:
        data: Response data (optional)
        message: Human-readable message (optional)
        **kwargs: Additional fields to include in response

    Returns:
        Standardized success response dictionary
    """
    response: Dict[str, Any] = {"success": True}
    if data is not None:
        response["data"] = data
    if message is not None:
        response["message"] = message
    response.update(kwargs)
    return response


def error_response(message: str, error: Optional[str] = None, **kwargs: Any) -> Dict[str, Any]:
    """Create a standardized error response.

    Args:
        message: Error message
        error: Raw error detail, only included outside production
        **kwargs: Additional fields to include in response

    Returns:
        Standardized error response dictionary
    """
    response: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        response["error"] = error
    response.update(kwargs)
    return response


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")


def register_exception_handlers(app: FastAPI, is_production: bool = False):
    """Map application and framework errors onto the response envelope."""

    @app.exception_handler(BizledgerError)
    async def handle_app_error(request: Request, exc: BizledgerError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            if is_production and not exc.public:
                return JSONResponse(status_code=exc.status_code, content=error_response("Internal server error"))
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=error_response(_validation_message(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        error = None if is_production else str(exc)
        return JSONResponse(status_code=500, content=error_response("Internal server error", error=error))
