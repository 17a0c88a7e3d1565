from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ....application.dto import AttendanceChange, SessionInput
from ....application.use_cases.attendance import JoinSession, UpdateAttendance
from ....application.use_cases.groups import GroupMembershipResolver
from ....application.use_cases.sessions import (
    CreateSession, DeleteSession, GetSession, ListSessions, UpdateSession,
)
from ....domain.errors import DomainError
from ....domain.permissions import (
    SESSION_CREATE, SESSION_DELETE, SESSION_MANAGE_ATTENDANCE, SESSION_UPDATE, USER_READ,
)
from ....infrastructure.db import get_db
from ....infrastructure.metrics import attendance_upserts_total, session_joins_total
from ....infrastructure.models import UserORM
from ....infrastructure.repositories import (
    AttendanceRepository, GroupRepository, SessionRepository, UserRepository,
)
from ..authz import require_mentor, require_permission
from ..schemas import (
    AttendanceBulkResp, AttendanceBulkUpdate, AttendanceOut, SessionCreate, SessionOut,
    SessionUpdate, SessionsResp,
)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def session_out(row, viewer_id: int | None = None) -> SessionOut:
    out = SessionOut.model_validate(row)
    out.attendance_count = len(row.attendances)
    if viewer_id is not None:
        # студент видит только свою запись
        out.attendances = [a for a in out.attendances if a.user_id == viewer_id]
    return out


@router.get("", response_model=SessionsResp)
def list_sessions(view: str = Query("student", pattern="^(student|mentor)$"),
                  user: UserORM = Depends(require_permission(USER_READ)),
                  db: Session = Depends(get_db)):
    uc = ListSessions(SessionRepository(db), GroupMembershipResolver(GroupRepository(db)))
    listing = uc.execute(user, view)
    viewer_id = listing.viewer_id if listing.own_attendance_only else None
    return SessionsResp(sessions=[session_out(row, viewer_id) for row in listing.sessions])


@router.get("/{session_id}", response_model=SessionOut)
def get_session(session_id: int,
                user: UserORM = Depends(require_permission(USER_READ)),
                db: Session = Depends(get_db)):
    row = GetSession(SessionRepository(db)).execute(user, session_id)
    return session_out(row)

# --- Mentor-only:

@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def create_session(payload: SessionCreate,
                   user: UserORM = Depends(require_mentor(SESSION_CREATE)),
                   db: Session = Depends(get_db)):
    uc = CreateSession(SessionRepository(db), GroupRepository(db))
    row = uc.execute(user, SessionInput(**payload.model_dump()))
    return session_out(row)


@router.put("/{session_id}", response_model=SessionOut)
def update_session(session_id: int, payload: SessionUpdate,
                   user: UserORM = Depends(require_mentor(SESSION_UPDATE)),
                   db: Session = Depends(get_db)):
    uc = UpdateSession(SessionRepository(db), GroupRepository(db))
    row = uc.execute(user, session_id, payload.model_dump(exclude_unset=True))
    return session_out(row)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: int,
                   user: UserORM = Depends(require_mentor(SESSION_DELETE)),
                   db: Session = Depends(get_db)):
    DeleteSession(SessionRepository(db)).execute(user, session_id)

# --- Attendance:

@router.post("/{session_id}/attendance", response_model=AttendanceOut,
             status_code=status.HTTP_201_CREATED)
def join_session(session_id: int,
                 user: UserORM = Depends(require_permission(USER_READ)),
                 db: Session = Depends(get_db)):
    uc = JoinSession(SessionRepository(db), AttendanceRepository(db))
    try:
        row = uc.execute(user, session_id)
    except DomainError as e:
        session_joins_total.labels(outcome=type(e).__name__).inc()
        raise
    session_joins_total.labels(outcome="joined").inc()
    return row


@router.put("/{session_id}/attendance", response_model=AttendanceBulkResp)
def update_attendance(session_id: int, payload: AttendanceBulkUpdate,
                      user: UserORM = Depends(require_mentor(SESSION_MANAGE_ATTENDANCE)),
                      db: Session = Depends(get_db)):
    uc = UpdateAttendance(SessionRepository(db), AttendanceRepository(db), UserRepository(db))
    changes = [AttendanceChange(user_id=i.user_id, status=i.status.value)
               for i in payload.attendance_updates]
    rows = uc.execute(user, session_id, changes)
    attendance_upserts_total.inc(len(rows))
    return AttendanceBulkResp(updates=[AttendanceOut.model_validate(r) for r in rows])
