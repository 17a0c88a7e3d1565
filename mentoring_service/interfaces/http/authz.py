import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from ...domain.permissions import Permission, has_permission, is_admin_role, is_mentor_role
from ...infrastructure.db import get_db
from ...infrastructure.metrics import access_denied_total
from ...infrastructure.models import UserORM
from ...infrastructure.repositories import UserRepository
from ...infrastructure.security import decode_user_id

logger = structlog.get_logger()

bearer = HTTPBearer(auto_error=False)


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def log_denied_access(user_id: int | None, route: str, reason: str) -> None:
    access_denied_total.labels(route=route).inc()
    logger.warning("access_denied", user_id=user_id, route=route, reason=reason)


def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> UserORM:
    if not creds or not creds.credentials:
        raise _unauthenticated()
    try:
        user_id = decode_user_id(creds.credentials)
    except JWTError:
        raise _unauthenticated()
    # роль берём из БД, а не из токена
    user = UserRepository(db).get(user_id)
    if not user:
        raise _unauthenticated()
    request.state.user_id = user.id
    return user


def _route(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def require_permission(permission: Permission):
    def dependency(request: Request, user: UserORM = Depends(get_current_user)) -> UserORM:
        if not has_permission(user.role, permission):
            log_denied_access(user.id, _route(request), f"Missing {permission} permission")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return dependency


def require_mentor(permission: Permission):
    """Двойная проверка: роль из списка менторов И право из таблицы."""
    def dependency(request: Request, user: UserORM = Depends(get_current_user)) -> UserORM:
        if not is_mentor_role(user.role):
            log_denied_access(user.id, _route(request), "Not a mentor role")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden - Mentors only")
        if not has_permission(user.role, permission):
            log_denied_access(user.id, _route(request), f"Missing {permission} permission")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return dependency


def require_admin(request: Request, user: UserORM = Depends(get_current_user)) -> UserORM:
    if not is_admin_role(user.role):
        log_denied_access(user.id, _route(request), "Admin role required")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user
