from dataclasses import dataclass
from datetime import datetime


@dataclass
class SessionInput:
    title: str
    date: datetime
    location: str = ""
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_public: bool = False
    max_capacity: int | None = None


@dataclass
class GroupChanges:
    mentee_ids: list[int]
    category: str | None = None
    info: str | None = None
    # mentor_id=None при set_mentor=True снимает ментора
    mentor_id: int | None = None
    set_mentor: bool = False


@dataclass
class AttendanceChange:
    user_id: int
    status: str


@dataclass
class SessionListing:
    sessions: list
    # в студенческом представлении видна только своя запись посещения
    own_attendance_only: bool = True
    viewer_id: int | None = None
