"""Рендеринг ленты сессий в формате iCalendar (RFC 5545)."""
from datetime import datetime, timedelta, timezone
from typing import Iterable

from icalendar import Calendar, Event, vCalAddress, vText

from ..config import settings
from .models import SessionAttendanceORM

PRODID = "-//Mentoring Service//Sessions Feed//EN"


def _utc(value: datetime) -> datetime:
    # в БД наивное UTC-время
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def event_bounds(session, default_minutes: int | None = None) -> tuple[datetime, datetime]:
    """Начало = start_time или date; конец = end_time или начало + длительность по умолчанию."""
    minutes = default_minutes or settings.CALENDAR_DEFAULT_DURATION_MINUTES
    start = session.start_time or session.date
    end = session.end_time or start + timedelta(minutes=minutes)
    return _utc(start), _utc(end)


def build_event(attendance: SessionAttendanceORM) -> Event:
    s = attendance.session
    start, end = event_bounds(s)

    event = Event()
    event.add("uid", f"session-{s.id}-user-{attendance.user_id}@mentoring-service")
    event.add("dtstamp", datetime.now(timezone.utc))
    event.add("dtstart", start)
    event.add("dtend", end)
    event.add("summary", s.title)
    event.add("description", s.description or "")
    if s.location:
        event.add("location", s.location)
    event.add("url", settings.CALENDAR_EVENT_URL)
    event.add("status", "CONFIRMED")

    if s.mentor is not None:
        organizer = vCalAddress(f"MAILTO:{s.mentor.email}")
        organizer.params["cn"] = vText(s.mentor.full_name)
        event["organizer"] = organizer

    categories = [s.category]
    if s.group is not None:
        categories.append(f"Group {s.group.group_number}")
    event.add("categories", categories)
    return event


def render_calendar(attendances: Iterable[SessionAttendanceORM]) -> bytes:
    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "Mentoring sessions")
    for attendance in attendances:
        cal.add_component(build_event(attendance))
    return cal.to_ical()
