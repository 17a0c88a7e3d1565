import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ...domain.errors import (
    CapacityExceeded, Conflict, DomainError, Forbidden, InvalidRequest, NotFound,
)
from .authz import log_denied_access

logger = structlog.get_logger()

STATUS_BY_ERROR = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (Conflict, status.HTTP_409_CONFLICT),
    (CapacityExceeded, status.HTTP_400_BAD_REQUEST),
    (InvalidRequest, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: DomainError) -> int:
    for error_cls, code in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return code
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: DomainError):
    if isinstance(exc, Forbidden):
        route = getattr(request.scope.get("route"), "path", request.url.path)
        log_denied_access(getattr(request.state, "user_id", None), route, exc.message)
    return JSONResponse(status_code=status_for(exc), content={"detail": exc.message})


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # детали ошибки только в лог
    logger.error(
        "internal_error",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
