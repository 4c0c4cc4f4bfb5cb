"""Application errors and the handlers that render them as JSON."""

from typing import Any, Dict, Iterable, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


class APIError(Exception):
    """Base error carrying an HTTP status and a client-facing message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class AuthenticationError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, expired: bool = False):
        super().__init__("Authentication token expired" if expired else "Authentication required")


class InvalidCredentialsError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self):
        super().__init__("Invalid username or password")


class AuthorizationError(APIError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str, user_role: Optional[str] = None, allowed_roles: Iterable[str] = ()):
        super().__init__(message, userRole=user_role, allowedRoles=sorted(allowed_roles))


class ValidationError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(APIError):
    # Duplicates are reported as 400 by this API's convention
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND


class ServiceUnavailableError(APIError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(message)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("api_error", path=request.url.path, status=exc.status_code, error=exc.message)
    else:
        logger.info("request_rejected", path=request.url.path, status=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body and parameter validation failures as 400."""
    details = [
        {"field": ".".join(str(part) for part in error["loc"] if part != "body"), "message": error["msg"]}
        for error in exc.errors()
    ]
    message = f"Invalid value for {details[0]['field']}" if details and details[0]["field"] else "Invalid request"
    logger.info("request_rejected", path=request.url.path, status=400, error=message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "details": details},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing and protocol errors (404, 405, malformed bodies) in the same shape."""
    logger.info("request_rejected", path=request.url.path, status=exc.status_code, error=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("database_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ServiceUnavailableError().to_dict(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.exception("unhandled_error", path=request.url.path)
    content = {"error": "Internal server error"}
    if request.app.state.settings.expose_error_details:
        content["debug"] = {"message": str(exc), "type": type(exc).__name__}
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    for exc_class in (OperationalError, DisconnectionError, PoolTimeoutError):
        app.add_exception_handler(exc_class, database_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


def conflict_from_integrity_error(exc: Exception) -> APIError:
    """Translate a store uniqueness violation into a friendly 400."""
    text = str(getattr(exc, "orig", exc)).lower()
    if "username" in text:
        return ConflictError("Username already exists", field="username")
    if "email" in text:
        return ConflictError("Email already exists", field="email")
    return ConflictError("Resource already exists")
