from datetime import datetime
from typing import Iterable

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .models import GroupORM, MentoringSessionORM, SessionAttendanceORM, UserORM
from ..application.ports import (
    IAttendanceRepository,
    IGroupRepository,
    ISessionRepository,
    IUserRepository,
)
from ..domain.clock import utcnow
from ..domain.enums import AttendanceStatus, GroupCategory
from ..domain.errors import Conflict


def _dialect_insert(db: Session):
    # ON CONFLICT есть в обоих диалектах с одинаковым API
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


class UserRepository(IUserRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, user_id: int) -> UserORM | None:
        return self.db.get(UserORM, user_id)

    def get_many(self, user_ids: Iterable[int]) -> list[UserORM]:
        ids = set(user_ids)
        if not ids:
            return []
        return list(self.db.scalars(select(UserORM).where(UserORM.id.in_(ids))))

    def get_calendar_token(self, user_id: int) -> str | None:
        return self.db.scalar(select(UserORM.calendar_token).where(UserORM.id == user_id))

    def set_calendar_token_if_missing(self, user_id: int, token: str) -> str | None:
        # условный UPDATE: при гонке побеждает первый, остальные читают его токен
        self.db.execute(
            update(UserORM)
            .where(UserORM.id == user_id, UserORM.calendar_token.is_(None))
            .values(calendar_token=token)
        )
        self.db.commit()
        return self.get_calendar_token(user_id)

    def replace_calendar_token(self, user_id: int, token: str) -> None:
        self.db.execute(
            update(UserORM).where(UserORM.id == user_id).values(calendar_token=token)
        )
        self.db.commit()


class GroupRepository(IGroupRepository):
    def __init__(self, db: Session): self.db = db

    def _query(self):
        return select(GroupORM).options(
            selectinload(GroupORM.mentor),
            selectinload(GroupORM.mentees),
        )

    def get(self, group_id: int) -> GroupORM | None:
        return self.db.scalar(self._query().where(GroupORM.id == group_id))

    def get_by_mentor(self, mentor_id: int) -> GroupORM | None:
        return self.db.scalar(self._query().where(GroupORM.mentor_id == mentor_id))

    def list_all(self) -> list[GroupORM]:
        return list(self.db.scalars(self._query().order_by(GroupORM.group_number)))

    def create(self, category: str = GroupCategory.CS_BSC_MENG.value) -> GroupORM:
        last = self.db.scalar(select(func.max(GroupORM.group_number)))
        row = GroupORM(group_number=(last or 0) + 1, category=category)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # параллельное создание группы с тем же номером
            self.db.rollback()
            raise Conflict("group number already taken, retry")
        self.db.refresh(row)
        return row

    def update(self, group: GroupORM, fields: dict, mentees: list[UserORM] | None = None) -> GroupORM:
        for name, value in fields.items():
            setattr(group, name, value)
        if mentees is not None:
            # полная замена состава, не добавление
            group.mentees = mentees
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("mentor already assigned to another group")
        self.db.refresh(group)
        return group

    def delete(self, group: GroupORM) -> None:
        self.db.delete(group)
        self.db.commit()

    def has_sessions(self, group_id: int) -> bool:
        found = self.db.scalar(
            select(MentoringSessionORM.id).where(MentoringSessionORM.group_id == group_id).limit(1)
        )
        return found is not None


class SessionRepository(ISessionRepository):
    def __init__(self, db: Session): self.db = db

    def _query(self):
        return select(MentoringSessionORM).options(
            selectinload(MentoringSessionORM.group),
            selectinload(MentoringSessionORM.mentor),
            selectinload(MentoringSessionORM.attendances).selectinload(SessionAttendanceORM.user),
        )

    def get(self, session_id: int, for_update: bool = False) -> MentoringSessionORM | None:
        if for_update:
            # блокировка строки сессии сериализует подсчёт мест и вставку
            stmt = (select(MentoringSessionORM)
                    .where(MentoringSessionORM.id == session_id)
                    .with_for_update())
            return self.db.scalar(stmt)
        return self.db.scalar(self._query().where(MentoringSessionORM.id == session_id))

    def list_visible(self, user_id: int, mentee_group_id: int | None, include_own: bool) -> list[MentoringSessionORM]:
        conds = [MentoringSessionORM.is_public.is_(True)]
        if mentee_group_id is not None:
            conds.append(MentoringSessionORM.group_id == mentee_group_id)
        if include_own:
            conds.append(MentoringSessionORM.mentor_id == user_id)
        q = (self._query()
             .where(or_(*conds))
             .order_by(MentoringSessionORM.date.asc(), MentoringSessionORM.id))
        return list(self.db.scalars(q))

    def list_by_mentor(self, mentor_id: int) -> list[MentoringSessionORM]:
        q = (self._query()
             .where(MentoringSessionORM.mentor_id == mentor_id)
             .order_by(MentoringSessionORM.date.asc(), MentoringSessionORM.id))
        return list(self.db.scalars(q))

    def create_with_enrollment(self, fields: dict, mentee_ids: list[int]) -> MentoringSessionORM:
        row = MentoringSessionORM(**fields)
        self.db.add(row)
        self.db.flush()
        # автозапись участников группы в той же транзакции
        self.db.add_all([
            SessionAttendanceORM(
                session_id=row.id,
                user_id=mentee_id,
                status=AttendanceStatus.REGISTERED.value,
            )
            for mentee_id in mentee_ids
        ])
        self.db.commit()
        return self.get(row.id)

    def update(self, session: MentoringSessionORM, fields: dict) -> MentoringSessionORM:
        for name, value in fields.items():
            setattr(session, name, value)
        self.db.commit()
        self.db.expire_all()
        return self.get(session.id)

    def delete(self, session: MentoringSessionORM) -> None:
        self.db.delete(session)
        self.db.commit()


class AttendanceRepository(IAttendanceRepository):
    def __init__(self, db: Session): self.db = db

    def count_extra(self, session_id: int, group_id: int) -> int:
        """Записи участников вне группы сессии (включая пользователей без группы)."""
        q = (select(func.count(SessionAttendanceORM.id))
             .join(UserORM, UserORM.id == SessionAttendanceORM.user_id)
             .where(
                 SessionAttendanceORM.session_id == session_id,
                 or_(UserORM.mentee_group_id.is_(None), UserORM.mentee_group_id != group_id),
             ))
        return self.db.scalar(q) or 0

    def is_registered(self, session_id: int, user_id: int) -> bool:
        found = self.db.scalar(
            select(SessionAttendanceORM.id).where(
                SessionAttendanceORM.session_id == session_id,
                SessionAttendanceORM.user_id == user_id,
            )
        )
        return found is not None

    def register(self, session_id: int, user_id: int) -> SessionAttendanceORM:
        row = SessionAttendanceORM(
            session_id=session_id,
            user_id=user_id,
            status=AttendanceStatus.REGISTERED.value,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Already registered for this session")
        self.db.refresh(row)
        return row

    def upsert_many(self, session_id: int, statuses: dict[int, str]) -> list[SessionAttendanceORM]:
        if not statuses:
            return []
        insert = _dialect_insert(self.db)
        now = utcnow()
        for user_id, status in statuses.items():
            # каждая пара - независимый upsert по (session_id, user_id)
            stmt = insert(SessionAttendanceORM).values(
                session_id=session_id,
                user_id=user_id,
                status=status,
                created_at=now,
                updated_at=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["session_id", "user_id"],
                set_={"status": stmt.excluded.status, "updated_at": stmt.excluded.updated_at},
            )
            self.db.execute(stmt)
        self.db.commit()
        q = (select(SessionAttendanceORM)
             .options(selectinload(SessionAttendanceORM.user))
             .where(SessionAttendanceORM.session_id == session_id,
                    SessionAttendanceORM.user_id.in_(list(statuses)))
             .order_by(SessionAttendanceORM.user_id)
             .execution_options(populate_existing=True))
        return list(self.db.scalars(q))

    def list_upcoming(self, user_id: int, now: datetime) -> list[SessionAttendanceORM]:
        q = (select(SessionAttendanceORM)
             .join(MentoringSessionORM, MentoringSessionORM.id == SessionAttendanceORM.session_id)
             .options(
                 selectinload(SessionAttendanceORM.session).selectinload(MentoringSessionORM.mentor),
                 selectinload(SessionAttendanceORM.session).selectinload(MentoringSessionORM.group),
             )
             .where(
                 SessionAttendanceORM.user_id == user_id,
                 SessionAttendanceORM.status != AttendanceStatus.CANCELLED.value,
                 MentoringSessionORM.date >= now,
             )
             .order_by(MentoringSessionORM.date.asc()))
        return list(self.db.scalars(q))
