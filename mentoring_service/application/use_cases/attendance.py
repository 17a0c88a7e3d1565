import structlog

from ..dto import AttendanceChange
from ..ports import IAttendanceRepository, ISessionRepository, IUserRepository
from .sessions import get_owned_session, to_session, to_user
from ...domain import policies
from ...domain.enums import AttendanceStatus
from ...domain.errors import CapacityExceeded, Conflict, Forbidden, NotFound

logger = structlog.get_logger()


class JoinSession:
    """Самостоятельная запись на сессию (всегда REGISTERED)."""

    def __init__(self, sessions: ISessionRepository, attendance: IAttendanceRepository):
        self.sessions = sessions
        self.attendance = attendance

    def execute(self, user, session_id: int):
        row = self.sessions.get(session_id, for_update=True)
        if not row:
            raise NotFound("Session not found")

        session = to_session(row)
        member = to_user(user)
        if not policies.can_join_session(member, session):
            raise Forbidden("Not eligible to join this session")

        # повторная запись - конфликт, даже если мест уже нет
        if self.attendance.is_registered(session.id, user.id):
            raise Conflict("Already registered for this session")

        if session.max_capacity is not None and not policies.is_group_member(member, session):
            # участники группы места не занимают, считаем только "внешних"
            extra = self.attendance.count_extra(session.id, session.group_id)
            if not policies.has_extra_capacity(session, extra):
                logger.info(
                    "session_join_rejected",
                    session_id=session.id,
                    user_id=user.id,
                    extra_count=extra,
                    max_capacity=session.max_capacity,
                )
                raise CapacityExceeded()

        created = self.attendance.register(session.id, user.id)
        logger.info("session_joined", session_id=session.id, user_id=user.id)
        return created


class UpdateAttendance:
    """Массовое обновление статусов ментором: каждая пара - upsert, переходы не ограничены."""

    def __init__(self, sessions: ISessionRepository, attendance: IAttendanceRepository,
                 users: IUserRepository):
        self.sessions = sessions
        self.attendance = attendance
        self.users = users

    def execute(self, user, session_id: int, changes: list[AttendanceChange]) -> list:
        row = get_owned_session(self.sessions, user, session_id)

        # при повторе user_id побеждает последнее значение
        statuses = {c.user_id: AttendanceStatus(c.status).value for c in changes}
        found = {u.id for u in self.users.get_many(statuses)}
        missing = sorted(set(statuses) - found)
        if missing:
            raise NotFound(f"users not found: {missing}")

        updated = self.attendance.upsert_many(row.id, statuses)
        logger.info(
            "attendance_updated",
            session_id=row.id,
            mentor_id=user.id,
            updates=len(updated),
        )
        return updated
