# mentoring_service/infrastructure/models.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base
from ..domain.clock import utcnow
from ..domain.enums import AttendanceStatus, GroupCategory, Role


class UserORM(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    upi: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=Role.STUDENT.value)
    # не более одной группы: внешний ключ на строке пользователя
    mentee_group_id: Mapped[int | None] = mapped_column(
        ForeignKey("groups.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    calendar_token: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=utcnow
    )

    mentee_of: Mapped[Optional["GroupORM"]] = relationship(
        "GroupORM",
        back_populates="mentees",
        foreign_keys=[mentee_group_id],
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, email={self.email!r}, role={self.role!r})"


class GroupORM(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    category: Mapped[str] = mapped_column(
        String(32), nullable=False, default=GroupCategory.CS_BSC_MENG.value
    )
    info: Mapped[str | None] = mapped_column(Text, nullable=True)
    # один ментор - одна группа
    mentor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_groups_mentor_id"),
        unique=True,
        nullable=True,
    )

    mentor: Mapped[Optional["UserORM"]] = relationship("UserORM", foreign_keys=[mentor_id])
    mentees: Mapped[list["UserORM"]] = relationship(
        "UserORM",
        back_populates="mentee_of",
        foreign_keys="UserORM.mentee_group_id",
        order_by="UserORM.id",
    )
    sessions: Mapped[list["MentoringSessionORM"]] = relationship(
        "MentoringSessionORM",
        back_populates="group",
    )

    def __repr__(self) -> str:
        return f"GroupORM(id={self.id!r}, group_number={self.group_number!r})"


class MentoringSessionORM(Base):
    __tablename__ = "mentoring_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    start_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # всегда копируется из группы
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    # дополнительные места сверх участников группы; NULL - без ограничения
    max_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mentor_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=utcnow
    )

    mentor: Mapped["UserORM"] = relationship("UserORM", foreign_keys=[mentor_id])
    group: Mapped["GroupORM"] = relationship("GroupORM", back_populates="sessions")
    attendances: Mapped[list["SessionAttendanceORM"]] = relationship(
        "SessionAttendanceORM",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SessionAttendanceORM.id",
    )

    def __repr__(self) -> str:
        return f"MentoringSessionORM(id={self.id!r}, title={self.title!r})"


class SessionAttendanceORM(Base):
    __tablename__ = "session_attendances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(
        ForeignKey("mentoring_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=AttendanceStatus.REGISTERED.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), default=utcnow, onupdate=utcnow
    )

    session: Mapped["MentoringSessionORM"] = relationship(
        "MentoringSessionORM", back_populates="attendances"
    )
    user: Mapped["UserORM"] = relationship("UserORM")

    __table_args__ = (UniqueConstraint("session_id", "user_id", name="uq_session_user"),)

    def __repr__(self) -> str:
        return (
            f"SessionAttendanceORM(session_id={self.session_id!r}, "
            f"user_id={self.user_id!r}, status={self.status!r})"
        )


User = UserORM
Group = GroupORM
MentoringSession = MentoringSessionORM
SessionAttendance = SessionAttendanceORM

__all__ = [
    "Base",
    "UserORM",
    "GroupORM",
    "MentoringSessionORM",
    "SessionAttendanceORM",
    "User",
    "Group",
    "MentoringSession",
    "SessionAttendance",
]
