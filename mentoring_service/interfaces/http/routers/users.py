from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....application.use_cases.calendar import EnsureCalendarToken, RotateCalendarToken
from ....application.use_cases.groups import GroupMembershipResolver
from ....domain.permissions import USER_READ, get_user_permissions
from ....infrastructure.db import get_db
from ....infrastructure.models import UserORM
from ....infrastructure.repositories import GroupRepository, UserRepository
from ....infrastructure.security import generate_calendar_token
from ..authz import get_current_user, require_permission
from ..schemas import CalendarTokenResp, UserOut

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("", response_model=UserOut)
def me(user: UserORM = Depends(require_permission(USER_READ)),
       db: Session = Depends(get_db)):
    membership = GroupMembershipResolver(GroupRepository(db)).resolve(user)
    out = UserOut.model_validate(user, from_attributes=True)
    out.owned_group_id = membership.owned_group_id
    out.permissions = [str(p) for p in get_user_permissions(user.role)]
    return out


@router.get("/calendar-token", response_model=CalendarTokenResp)
def get_calendar_token(user: UserORM = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    token = EnsureCalendarToken(UserRepository(db), generate_calendar_token).execute(user.id)
    return CalendarTokenResp(token=token)


@router.post("/calendar-token", response_model=CalendarTokenResp)
def rotate_calendar_token(user: UserORM = Depends(get_current_user),
                          db: Session = Depends(get_db)):
    token = RotateCalendarToken(UserRepository(db), generate_calendar_token).execute(user.id)
    return CalendarTokenResp(token=token)
