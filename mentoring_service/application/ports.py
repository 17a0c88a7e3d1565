from datetime import datetime
from typing import Iterable


class IUserRepository:
    def get(self, user_id: int): ...
    def get_many(self, user_ids: Iterable[int]) -> list: ...
    def get_calendar_token(self, user_id: int) -> str | None: ...
    def set_calendar_token_if_missing(self, user_id: int, token: str) -> str | None: ...
    def replace_calendar_token(self, user_id: int, token: str) -> None: ...


class IGroupRepository:
    def get(self, group_id: int): ...
    def get_by_mentor(self, mentor_id: int): ...
    def list_all(self) -> list: ...
    def create(self, category: str): ...
    def update(self, group, fields: dict, mentees: list | None = None): ...
    def delete(self, group) -> None: ...
    def has_sessions(self, group_id: int) -> bool: ...


class ISessionRepository:
    def get(self, session_id: int, for_update: bool = False): ...
    def list_visible(self, user_id: int, mentee_group_id: int | None, include_own: bool) -> list: ...
    def list_by_mentor(self, mentor_id: int) -> list: ...
    def create_with_enrollment(self, fields: dict, mentee_ids: list[int]): ...
    def update(self, session, fields: dict): ...
    def delete(self, session) -> None: ...


class IAttendanceRepository:
    def count_extra(self, session_id: int, group_id: int) -> int: ...
    def is_registered(self, session_id: int, user_id: int) -> bool: ...
    def register(self, session_id: int, user_id: int): ...
    def upsert_many(self, session_id: int, statuses: dict[int, str]) -> list: ...
    def list_upcoming(self, user_id: int, now: datetime) -> list: ...
