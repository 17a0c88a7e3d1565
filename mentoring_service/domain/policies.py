"""Правила видимости, записи и вместимости сессий.

Чистые функции над доменными сущностями, без обращений к БД.
"""
from .entities import User, MentoringSession
from .permissions import is_mentor_role


def is_group_member(user: User, session: MentoringSession) -> bool:
    return user.mentee_group_id is not None and user.mentee_group_id == session.group_id


def can_view_session(user: User, session: MentoringSession) -> bool:
    # менторы и админы видят все сессии - шире, чем право записи
    return (
        session.is_public
        or session.mentor_id == user.id
        or is_group_member(user, session)
        or is_mentor_role(user.role)
    )


def can_join_session(user: User, session: MentoringSession) -> bool:
    return session.is_public or is_group_member(user, session)


def is_extra_attendee(mentee_group_id: int | None, session: MentoringSession) -> bool:
    """Участник вне группы сессии занимает дополнительное место."""
    return mentee_group_id is None or mentee_group_id != session.group_id


def has_extra_capacity(session: MentoringSession, extra_count: int) -> bool:
    if session.max_capacity is None:
        return True
    return extra_count < session.max_capacity


def normalize_max_capacity(value: int | None) -> int | None:
    # 0 означает "без ограничения"
    return value or None
