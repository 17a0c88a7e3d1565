import dataclasses

import structlog

from ..dto import SessionInput, SessionListing
from ..ports import IGroupRepository, ISessionRepository
from .groups import GroupMembershipResolver
from ...domain import policies
from ...domain.entities import MentoringSession, User
from ...domain.errors import Forbidden, InvalidRequest, NotFound
from ...domain.permissions import is_mentor_role

logger = structlog.get_logger()

# поля, которые ментор может менять; category сюда намеренно не входит
UPDATABLE_FIELDS = frozenset({
    "title", "description", "date", "start_time", "end_time",
    "location", "is_public", "max_capacity",
})
NULLABLE_FIELDS = frozenset({"description", "start_time", "end_time", "max_capacity"})


def to_user(row) -> User:
    return User(id=row.id, role=row.role, mentee_group_id=row.mentee_group_id)


def to_session(row) -> MentoringSession:
    return MentoringSession(
        id=row.id,
        mentor_id=row.mentor_id,
        group_id=row.group_id,
        is_public=bool(row.is_public),
        max_capacity=row.max_capacity,
    )


def get_owned_session(sessions: ISessionRepository, user, session_id: int, for_update: bool = False):
    row = sessions.get(session_id, for_update=for_update)
    # чужая и несуществующая сессия отвечают одинаково
    if not row or row.mentor_id != user.id:
        raise NotFound("Session not found or unauthorized")
    return row


class ListSessions:
    def __init__(self, sessions: ISessionRepository, resolver: GroupMembershipResolver):
        self.sessions = sessions
        self.resolver = resolver

    def execute(self, user, view: str = "student") -> SessionListing:
        if view == "mentor" and is_mentor_role(user.role):
            rows = self.sessions.list_by_mentor(user.id)
            return SessionListing(sessions=rows, own_attendance_only=False, viewer_id=user.id)

        rows = self.sessions.list_visible(
            user_id=user.id,
            mentee_group_id=self.resolver.mentee_group_id(user),
            include_own=is_mentor_role(user.role),
        )
        return SessionListing(sessions=rows, own_attendance_only=True, viewer_id=user.id)


class GetSession:
    def __init__(self, sessions: ISessionRepository):
        self.sessions = sessions

    def execute(self, user, session_id: int):
        row = self.sessions.get(session_id)
        if not row:
            raise NotFound("Session not found")
        if not policies.can_view_session(to_user(user), to_session(row)):
            raise Forbidden("Not authorized to view this session")
        return row


class CreateSession:
    def __init__(self, sessions: ISessionRepository, groups: IGroupRepository):
        self.sessions = sessions
        self.groups = groups

    def execute(self, user, data: SessionInput):
        group = GroupMembershipResolver(self.groups).owned_group(user)
        if not group:
            raise InvalidRequest("Mentor not assigned to a group")

        fields = dataclasses.asdict(data)
        fields["max_capacity"] = policies.normalize_max_capacity(data.max_capacity)
        fields.update(
            category=group.category,
            mentor_id=user.id,
            group_id=group.id,
        )
        mentee_ids = [m.id for m in group.mentees]
        row = self.sessions.create_with_enrollment(fields, mentee_ids)
        logger.info(
            "session_created",
            session_id=row.id,
            mentor_id=user.id,
            group_id=group.id,
            auto_enrolled=len(mentee_ids),
        )
        return row


class UpdateSession:
    def __init__(self, sessions: ISessionRepository, groups: IGroupRepository):
        self.sessions = sessions
        self.groups = groups

    def execute(self, user, session_id: int, changes: dict):
        row = get_owned_session(self.sessions, user, session_id)
        fields = {
            k: v for k, v in changes.items()
            if k in UPDATABLE_FIELDS and (v is not None or k in NULLABLE_FIELDS)
        }
        if "max_capacity" in fields:
            fields["max_capacity"] = policies.normalize_max_capacity(fields["max_capacity"])
        # категория всегда берётся из группы, даже если её не меняли
        group = self.groups.get(row.group_id)
        fields["category"] = group.category if group else row.category
        row = self.sessions.update(row, fields)
        logger.info("session_updated", session_id=row.id, fields=sorted(fields))
        return row


class DeleteSession:
    def __init__(self, sessions: ISessionRepository):
        self.sessions = sessions

    def execute(self, user, session_id: int) -> None:
        row = get_owned_session(self.sessions, user, session_id)
        self.sessions.delete(row)
        logger.info("session_deleted", session_id=session_id, mentor_id=user.id)
