from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from ...domain.enums import AttendanceStatus, GroupCategory


def to_naive_utc(value: datetime | None) -> datetime | None:
    # в БД храним наивное UTC-время
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class UserBrief(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    class Config: from_attributes = True

class UserOut(UserBrief):
    upi: str | None = None
    role: str
    mentee_group_id: int | None = None
    owned_group_id: int | None = None
    permissions: list[str] = []

# --- Sessions

class SessionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    date: datetime
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str = ""
    is_public: bool = False
    # сверх участников группы; 0 = без ограничения
    max_capacity: int | None = Field(None, ge=0)

    @field_validator("date", "start_time", "end_time")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

class SessionUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    date: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = None
    is_public: bool | None = None
    max_capacity: int | None = Field(None, ge=0)

    @field_validator("date", "start_time", "end_time")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

class GroupBrief(BaseModel):
    id: int
    group_number: int
    category: str
    class Config: from_attributes = True

class AttendanceOut(BaseModel):
    id: int
    session_id: int
    user_id: int
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: UserBrief | None = None
    class Config: from_attributes = True

class SessionOut(BaseModel):
    id: int
    title: str
    description: str | None = None
    date: datetime
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str
    is_public: bool
    category: str
    max_capacity: int | None = None
    mentor_id: int
    group_id: int
    group: GroupBrief | None = None
    mentor: UserBrief | None = None
    attendances: list[AttendanceOut] = []
    attendance_count: int = 0
    class Config: from_attributes = True

class SessionsResp(BaseModel):
    sessions: list[SessionOut]

# --- Attendance

class AttendanceUpdateItem(BaseModel):
    user_id: int
    status: AttendanceStatus

class AttendanceBulkUpdate(BaseModel):
    attendance_updates: list[AttendanceUpdateItem]

class AttendanceBulkResp(BaseModel):
    success: bool = True
    updates: list[AttendanceOut]

# --- Groups

class GroupOut(BaseModel):
    id: int
    group_number: int
    category: str
    info: str | None = None
    mentor_id: int | None = None
    mentor: UserBrief | None = None
    mentees: list[UserBrief] = []
    class Config: from_attributes = True

class GroupCreate(BaseModel):
    category: GroupCategory = GroupCategory.CS_BSC_MENG

class GroupUpdate(BaseModel):
    # полный новый состав ментии
    mentee_ids: list[int]
    mentor_id: int | None = None
    category: GroupCategory | None = None
    info: str | None = None

# --- Calendar

class CalendarTokenResp(BaseModel):
    token: str
