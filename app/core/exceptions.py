"""
Application exceptions and the handlers that render them.
Every error leaves the API as {"success": false, "message": ..., "errorCode": ...}
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StorefrontException(HTTPException):
    """Base exception carrying a machine-readable error code"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationException(StorefrontException):
    """400 Bad Request - missing or invalid input"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )


class UnauthenticatedException(StorefrontException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Not authenticated", error_code: str = "UNAUTHENTICATED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenException(StorefrontException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Not authorized", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )


class NotFoundException(StorefrontException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )


class ServerErrorException(StorefrontException):
    """500 Internal Server Error"""

    def __init__(self, detail: str = "Internal server error", error_code: str = "SERVER_ERROR"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )

    @classmethod
    def from_error(cls, message: str, error: Exception) -> "ServerErrorException":
        return cls(detail=f"{message}: {error}")


def _error_body(message: Any, error_code: Optional[str]) -> Dict[str, Any]:
    return {"success": False, "message": message, "errorCode": error_code}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_code = getattr(exc, "error_code", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, error_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    body = _error_body("Invalid request body", "VALIDATION_ERROR")
    body["errors"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette base class so routing 404/405 errors get the same envelope
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
