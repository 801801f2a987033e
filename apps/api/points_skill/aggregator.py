"""Per-day, per-person point totals over rolling windows."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List
from zoneinfo import ZoneInfo

from .schemas import Period, PointEvent

Totals = Dict[str, Dict[str, int]]

WINDOW_DAYS = {
    Period.TODAY: 3,
    Period.WEEK: 7,
}


def local_now(tz: ZoneInfo) -> datetime:
    return datetime.now(tz)


def window_dates(today: date, period: Period) -> List[date]:
    """Calendar days in the window, oldest first, ending with ``today``."""

    if period == Period.MONTH:
        start = today.replace(day=1)
    else:
        start = today - timedelta(days=WINDOW_DAYS[period] - 1)
    return [start + timedelta(days=offset) for offset in range((today - start).days + 1)]


def date_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def date_labels(dates: Iterable[date]) -> List[str]:
    return [date_label(day) for day in dates]


def build_totals(events: Iterable[PointEvent], dates: Iterable[date], persons: Iterable[str]) -> Totals:
    persons = list(persons)
    canonical = {person.casefold(): person for person in persons}
    totals: Totals = {day.isoformat(): {person: 0 for person in persons} for day in dates}

    for event in events:
        bucket = totals.get(event.date.strip())
        if bucket is None:
            continue
        person = canonical.get(event.person.strip().casefold())
        if person is None:
            continue
        bucket[person] += event.delta

    return totals


def window_totals(totals: Totals, dates: Iterable[date], persons: Iterable[str]) -> Dict[str, int]:
    summed = {person: 0 for person in persons}
    for day in dates:
        day_totals = totals.get(day.isoformat(), {})
        for person in summed:
            summed[person] += day_totals.get(person, 0)
    return summed
