from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional

from config import MS_PER_HOUR
from formatters import TimeFormatter
from models.entities import Client, TimeEntry


def _now() -> datetime:
    return datetime.now().astimezone()


def elapsed_ms(entry: TimeEntry, now: Optional[datetime] = None) -> int:
    """Milliseconds between start and end (or now for a running entry)."""
    end = entry.end_time
    if end is None:
        end = now or _now()
    delta = end - entry.start_time
    return max(0, int(delta.total_seconds() * 1000))


def total_time_ms(entries: Iterable[TimeEntry], now: Optional[datetime] = None) -> int:
    now = now or _now()
    return sum(elapsed_ms(e, now) for e in entries)


def windowed_time_ms(
    entries: Iterable[TimeEntry],
    window_start: datetime,
    now: Optional[datetime] = None,
) -> int:
    """Total time of entries that started at or after window_start."""
    now = now or _now()
    return sum(elapsed_ms(e, now) for e in entries if e.start_time >= window_start)


def _midnight(day: date, like: datetime) -> datetime:
    """00:00:00 of day in like's zone, with the offset that applies on that day.

    A fixed offset carrying the system zone's current offset and name (what
    ``astimezone()`` returns) stands for local time, so the system zone resolves DST.
    """
    naive = datetime.combine(day, time())
    tz = like.tzinfo
    local = like.astimezone()
    if isinstance(tz, timezone) and (local.utcoffset(), local.tzname()) == (like.utcoffset(), like.tzname()):
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def start_of_week(now: Optional[datetime] = None) -> datetime:
    """Sunday 00:00:00 of the week containing now, in now's timezone."""
    now = now or _now()
    days_since_sunday = (now.weekday() + 1) % 7
    return _midnight(now.date() - timedelta(days=days_since_sunday), now)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    """Day 1, 00:00:00 of now's month, in now's timezone."""
    now = now or _now()
    return _midnight(now.date().replace(day=1), now)


def earnings(duration_ms: int, rate: float) -> float:
    return (duration_ms / MS_PER_HOUR) * rate


@dataclass
class ClientSummary:
    """Time and earnings totals shown on the timer card."""
    total_ms: int
    week_ms: int
    month_ms: int
    total_earnings: float
    week_earnings: float
    month_earnings: float
    week_label: str
    month_label: str


@dataclass
class TodayEntry:
    """A completed entry from today, preformatted for display."""
    id: Optional[str]
    start_label: str
    end_label: str
    duration: str
    duration_ms: int
    earnings: float
    notes: Optional[str]


class StatsService:
    """Service for calculating client time and earnings."""

    def summarize(self, client: Client, now: Optional[datetime] = None) -> ClientSummary:
        now = now or _now()
        week_start = start_of_week(now)
        entries = client.time_entries
        total = total_time_ms(entries, now)
        week = windowed_time_ms(entries, week_start, now)
        month = windowed_time_ms(entries, start_of_month(now), now)
        return ClientSummary(
            total_ms=total,
            week_ms=week,
            month_ms=month,
            total_earnings=earnings(total, client.hourly_rate),
            week_earnings=earnings(week, client.hourly_rate),
            month_earnings=earnings(month, client.hourly_rate),
            week_label=TimeFormatter.week_range(week_start),
            month_label=TimeFormatter.month_label(now),
        )

    def today_entries(self, client: Client, now: Optional[datetime] = None) -> List[TodayEntry]:
        """Completed entries that started on now's calendar day."""
        now = now or _now()
        today = now.date()
        result = []
        for entry in client.completed_entries():
            start = entry.start_time.astimezone(now.tzinfo)
            if start.date() != today:
                continue
            end = entry.end_time.astimezone(now.tzinfo)
            duration = elapsed_ms(entry, now)
            result.append(TodayEntry(
                id=entry.id,
                start_label=TimeFormatter.short_clock_label(start),
                end_label=TimeFormatter.short_clock_label(end),
                duration=TimeFormatter.format_time(duration),
                duration_ms=duration,
                earnings=earnings(duration, client.hourly_rate),
                notes=entry.notes,
            ))
        return result


stats_service = StatsService()
