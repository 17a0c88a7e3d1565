"""Статическая таблица прав по ролям.

Наследования ролей нет: список каждой роли перечислен отдельно, даже если
совпадает с другой ролью (SENIOR_MENTOR == MENTOR, SUPERADMIN == ADMIN).
"""
from dataclasses import dataclass

from .enums import Role


@dataclass(frozen=True)
class Permission:
    resource: str
    action: str

    def __str__(self) -> str:
        return f"{self.resource}:{self.action}"


USER_READ = Permission("user", "read")
USER_UPDATE = Permission("user", "update")
USER_DELETE = Permission("user", "delete")

ADMIN_READ = Permission("admin", "read")
ADMIN_WRITE = Permission("admin", "write")

SESSION_READ = Permission("session", "read")
SESSION_CREATE = Permission("session", "create")
SESSION_UPDATE = Permission("session", "update")
SESSION_DELETE = Permission("session", "delete")
SESSION_MANAGE_ATTENDANCE = Permission("session", "manage_attendance")

TIMETABLE_READ = Permission("timetable", "read")
TIMETABLE_WRITE = Permission("timetable", "write")

ROLE_PERMISSIONS: dict[Role, tuple[Permission, ...]] = {
    Role.STUDENT: (
        USER_READ,
        USER_UPDATE,
        SESSION_READ,
        TIMETABLE_READ,
    ),
    Role.MENTOR: (
        USER_READ,
        USER_UPDATE,
        SESSION_READ,
        SESSION_CREATE,
        SESSION_UPDATE,
        SESSION_DELETE,
        SESSION_MANAGE_ATTENDANCE,
        TIMETABLE_READ,
        TIMETABLE_WRITE,
    ),
    Role.SENIOR_MENTOR: (
        USER_READ,
        USER_UPDATE,
        SESSION_READ,
        SESSION_CREATE,
        SESSION_UPDATE,
        SESSION_DELETE,
        SESSION_MANAGE_ATTENDANCE,
        TIMETABLE_READ,
        TIMETABLE_WRITE,
    ),
    Role.ADMIN: (
        USER_READ,
        USER_UPDATE,
        USER_DELETE,
        ADMIN_READ,
        ADMIN_WRITE,
        SESSION_READ,
        SESSION_CREATE,
        SESSION_UPDATE,
        SESSION_DELETE,
        SESSION_MANAGE_ATTENDANCE,
        TIMETABLE_READ,
        TIMETABLE_WRITE,
    ),
    Role.SUPERADMIN: (
        USER_READ,
        USER_UPDATE,
        USER_DELETE,
        ADMIN_READ,
        ADMIN_WRITE,
        SESSION_READ,
        SESSION_CREATE,
        SESSION_UPDATE,
        SESSION_DELETE,
        SESSION_MANAGE_ATTENDANCE,
        TIMETABLE_READ,
        TIMETABLE_WRITE,
    ),
}

# Отдельный allow-list для эндпоинтов управления сессиями.
# Проверяется вместе с таблицей выше, а не вместо неё.
MENTOR_ROLES = frozenset({Role.MENTOR, Role.SENIOR_MENTOR, Role.ADMIN, Role.SUPERADMIN})

# Роли с доступом к администрированию групп
ADMIN_ROLES = frozenset({Role.ADMIN, Role.SENIOR_MENTOR, Role.SUPERADMIN})


def get_user_permissions(role) -> tuple[Permission, ...]:
    try:
        return ROLE_PERMISSIONS.get(role, ())
    except TypeError:
        return ()


def has_permission(role, permission) -> bool:
    """True, если у роли есть пара (resource, action). Для неизвестных ролей - False."""
    resource = getattr(permission, "resource", None)
    action = getattr(permission, "action", None)
    return any(
        p.resource == resource and p.action == action
        for p in get_user_permissions(role)
    )


def is_mentor_role(role) -> bool:
    return role in MENTOR_ROLES


def is_admin_role(role) -> bool:
    return role in ADMIN_ROLES
