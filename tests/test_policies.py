from datetime import datetime, timedelta, timezone

import pytest

from mentoring_service.domain.clock import utcnow
from mentoring_service.domain.entities import MentoringSession, User
from mentoring_service.domain.enums import AttendanceStatus, Role
from mentoring_service.domain.policies import (
    can_join_session,
    can_view_session,
    has_extra_capacity,
    is_extra_attendee,
    normalize_max_capacity,
)

GROUP_ID = 10
MENTOR_ID = 1

private = MentoringSession(id=100, mentor_id=MENTOR_ID, group_id=GROUP_ID, is_public=False)
public = MentoringSession(id=101, mentor_id=MENTOR_ID, group_id=GROUP_ID, is_public=True)

member = User(id=2, role=Role.STUDENT, mentee_group_id=GROUP_ID)
outsider = User(id=3, role=Role.STUDENT, mentee_group_id=99)
loner = User(id=4, role=Role.STUDENT)
owner = User(id=MENTOR_ID, role=Role.MENTOR)
other_mentor = User(id=5, role=Role.MENTOR)


@pytest.mark.parametrize("user", [member, outsider, loner, owner, other_mentor])
def test_public_session_visible_and_joinable_by_all(user):
    assert can_view_session(user, public)
    assert can_join_session(user, public)


def test_private_session_visibility():
    assert can_view_session(member, private)
    assert can_view_session(owner, private)
    # менторские роли видят всё
    assert can_view_session(other_mentor, private)
    assert can_view_session(User(id=6, role=Role.ADMIN), private)
    assert not can_view_session(outsider, private)
    assert not can_view_session(loner, private)


def test_private_session_join_only_for_group_members():
    assert can_join_session(member, private)
    assert not can_join_session(outsider, private)
    assert not can_join_session(loner, private)
    # роль ментора сама по себе записаться не даёт
    assert not can_join_session(owner, private)
    assert not can_join_session(User(id=7, role=Role.SUPERADMIN), private)


def test_mentor_without_role_still_sees_own_session():
    """Владелец видит сессию по mentor_id даже без роли ментора"""
    demoted = User(id=MENTOR_ID, role=Role.STUDENT)
    assert can_view_session(demoted, private)


def test_user_without_group_cannot_join_private_session():
    session = MentoringSession(id=1, mentor_id=MENTOR_ID, group_id=GROUP_ID)
    assert not can_join_session(User(id=8, role=Role.STUDENT, mentee_group_id=None), session)


def test_extra_attendee_classification():
    assert not is_extra_attendee(GROUP_ID, private)
    assert is_extra_attendee(99, private)
    assert is_extra_attendee(None, private)


@pytest.mark.parametrize("max_capacity,extra,allowed", [
    (None, 0, True),
    (None, 1000, True),
    (1, 0, True),
    (1, 1, False),
    (3, 2, True),
    (3, 3, False),
    (3, 5, False),
])
def test_has_extra_capacity(max_capacity, extra, allowed):
    session = MentoringSession(id=1, mentor_id=MENTOR_ID, group_id=GROUP_ID, max_capacity=max_capacity)
    assert has_extra_capacity(session, extra) is allowed


@pytest.mark.parametrize("value,expected", [(None, None), (0, None), (1, 1), (25, 25)])
def test_normalize_max_capacity(value, expected):
    assert normalize_max_capacity(value) == expected


def test_attended_is_alias_of_present():
    assert AttendanceStatus("ATTENDED") is AttendanceStatus.PRESENT
    assert AttendanceStatus("attended") is AttendanceStatus.PRESENT
    with pytest.raises(ValueError):
        AttendanceStatus("LATE")


def test_utcnow_is_naive_utc():
    """Тест: время для БД - наивное UTC"""
    now = utcnow()
    assert now.tzinfo is None
    expected = datetime.now(timezone.utc).replace(tzinfo=None)
    assert abs(expected - now) < timedelta(seconds=5)
