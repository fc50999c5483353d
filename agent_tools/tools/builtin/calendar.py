"""Calendar tool — upcoming events in a window taken from the query."""
import logging
import re
from datetime import datetime, timedelta

from sqlalchemy import select

from ..registry import register_executor, ToolCategory
from ._common import db_session

logger = logging.getLogger(__name__)

MAX_EVENTS = 25


def event_window(query: str, now: datetime):
    """Return (start, end, label) for the period the query asks about."""
    q = (query or "").lower()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if re.search(r"\btomorrow\b", q):
        start = today + timedelta(days=1)
        return start, start + timedelta(days=1), "tomorrow"
    if re.search(r"\btoday\b", q):
        return today, today + timedelta(days=1), "today"
    if re.search(r"\bnext week\b", q):
        start = today + timedelta(days=7 - today.weekday())
        return start, start + timedelta(days=7), "next week"
    return now, now + timedelta(days=7), "the next 7 days"


@register_executor(ToolCategory.CALENDAR, description="Upcoming calendar events")
async def calendar_events(context_id: str, query: str = "", agent_id=None) -> str:
    from ...models import CalendarEvent

    start, end, label = event_window(query, datetime.utcnow())

    async with db_session("calendar") as db:
        result = await db.execute(
            select(CalendarEvent)
            .where(
                CalendarEvent.tenant_id == context_id,
                CalendarEvent.starts_at >= start,
                CalendarEvent.starts_at < end,
            )
            .order_by(CalendarEvent.starts_at)
            .limit(MAX_EVENTS)
        )
        events = result.scalars().all()

    if not events:
        return f"No events scheduled for {label} ({start:%Y-%m-%d} to {end:%Y-%m-%d})."

    lines = []
    for e in events:
        when = e.starts_at.strftime("%a %Y-%m-%d %H:%M")
        if e.ends_at:
            when += e.ends_at.strftime("–%H:%M")
        where = f" @ {e.location}" if e.location else ""
        lines.append(f"- {when} | {e.title}{where}")
    return f"Events for {label} ({len(events)}):\n" + "\n".join(lines)
