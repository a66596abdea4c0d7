"""
API error taxonomy and the single place where raised conditions become
HTTP responses.

Route handlers never catch these locally; they raise and let the handlers
registered by register_exception_handlers() build the JSON body.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ApiError(Exception):
    """Base for errors that map to a known status code."""

    status_code = 500
    default_message = INTERNAL_ERROR_MESSAGE
    body_key = "error"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)

    def body(self) -> Dict[str, Any]:
        return {self.body_key: self.message}


class BadRequestError(ApiError):
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Forbidden"
    # Existing clients read "message" for this one status.
    body_key = "message"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


def _issue_path(loc: Sequence[Any]) -> str:
    parts = list(loc)
    if parts and parts[0] == "body":
        parts = parts[1:]
    return ".".join(str(p) for p in parts) or "body"


def _issue_message(msg: str) -> str:
    # pydantic prefixes messages raised from validators
    for prefix in ("Value error, ", "Assertion failed, "):
        if msg.startswith(prefix):
            return msg[len(prefix) :]
    return msg


def validation_issues(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into ``{path, message}`` issues."""
    return [{"path": _issue_path(e.get("loc", ())), "message": _issue_message(str(e.get("msg", "")))} for e in errors]


def classify_exception(exc: BaseException) -> JSONResponse:
    """Map any raised condition onto a status code and JSON body.

    - validation failures -> 400 with an ``errors`` issue list
    - ApiError subclasses -> their own status and body
    - anything else -> 500 with the exception message, or a generic one
    """
    if isinstance(exc, (RequestValidationError, ValidationError)):
        return JSONResponse(status_code=400, content={"errors": validation_issues(exc.errors())})

    if isinstance(exc, ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.body(), headers=exc.headers)

    message = str(exc).strip()
    return JSONResponse(status_code=500, content={"error": message or INTERNAL_ERROR_MESSAGE})


def _log(request: Request, exc: BaseException, status_code: int) -> None:
    extra = {"method": request.method, "path": request.url.path}
    if status_code >= 500:
        logger.error(
            "%s %s failed: %s", request.method, request.url.path, str(exc) or type(exc).__name__, extra=extra, exc_info=exc
        )
    else:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, status_code, exc, extra=extra)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error classifier on the app."""

    async def handle(request: Request, exc: Exception) -> JSONResponse:
        response = classify_exception(exc)
        _log(request, exc, response.status_code)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Framework-raised HTTP errors (unknown route, wrong method)."""
        _log(request, exc, exc.status_code)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    app.add_exception_handler(ApiError, handle)
    app.add_exception_handler(RequestValidationError, handle)
    app.add_exception_handler(ValidationError, handle)
    app.add_exception_handler(Exception, handle)
