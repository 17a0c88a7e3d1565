from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from ....application.use_cases.calendar import CalendarFeed
from ....config import settings
from ....domain.errors import Forbidden
from ....infrastructure.calendar_feed import render_calendar
from ....infrastructure.db import get_db
from ....infrastructure.metrics import calendar_feed_requests_total
from ....infrastructure.rate_limit import limiter
from ....infrastructure.repositories import AttendanceRepository, UserRepository
from ....infrastructure.security import tokens_match

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


# Без авторизации по bearer: подписки календарей не умеют OAuth, доступ только по токену
@router.get("/{user_id}")
@limiter.limit(settings.CALENDAR_FEED_RATE_LIMIT)
def calendar_feed(request: Request, user_id: int,
                  token: str | None = Query(None),
                  db: Session = Depends(get_db)):
    uc = CalendarFeed(UserRepository(db), AttendanceRepository(db), tokens_match)
    try:
        attendances = uc.execute(user_id, token)
    except Forbidden:
        calendar_feed_requests_total.labels(outcome="denied").inc()
        raise
    calendar_feed_requests_total.labels(outcome="served").inc()
    return Response(
        content=render_calendar(attendances),
        media_type="text/calendar; charset=utf-8",
        headers={
            "Content-Disposition": 'inline; filename="calendar.ics"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
    )
