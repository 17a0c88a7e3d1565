from datetime import datetime
from typing import Callable

import structlog

from ..ports import IAttendanceRepository, IUserRepository
from ...domain.clock import utcnow
from ...domain.errors import Forbidden, NotFound

logger = structlog.get_logger()


class EnsureCalendarToken:
    """Вернуть токен пользователя, создав его при первом обращении."""

    def __init__(self, users: IUserRepository, generate: Callable[[], str]):
        self.users = users
        self.generate = generate

    def execute(self, user_id: int) -> str:
        token = self.users.get_calendar_token(user_id)
        if token:
            return token
        token = self.users.set_calendar_token_if_missing(user_id, self.generate())
        if not token:
            raise NotFound("user not found")
        logger.info("calendar_token_issued", user_id=user_id)
        return token


class RotateCalendarToken:
    def __init__(self, users: IUserRepository, generate: Callable[[], str]):
        self.users = users
        self.generate = generate

    def execute(self, user_id: int) -> str:
        token = self.generate()
        self.users.replace_calendar_token(user_id, token)
        # старые ссылки на ленту перестают работать сразу
        logger.info("calendar_token_rotated", user_id=user_id)
        return token


class CalendarFeed:
    def __init__(self, users: IUserRepository, attendance: IAttendanceRepository,
                 matches: Callable[[str | None, str | None], bool]):
        self.users = users
        self.attendance = attendance
        self.matches = matches

    def execute(self, user_id: int, token: str | None, now: datetime | None = None) -> list:
        if not token:
            raise Forbidden("Missing token")
        expected = self.users.get_calendar_token(user_id)
        if not self.matches(token, expected):
            raise Forbidden("Invalid token")
        return self.attendance.list_upcoming(user_id, now or utcnow())
