"""
streak_engine.py — Routine streaks & calendar statuses
Pure functions over a user's routine logs: per-date status for calendar cells,
the current streak (backward-looking from today) and the longest streak.
"""

import calendar
from datetime import date, timedelta
from typing import Iterable

from config import STREAK_LOOKBACK_DAYS
from schemas import RoutineLog, DateStatus, StreakSummary, CompletionSummary


def status_of(log: RoutineLog | None) -> DateStatus:
    """Category of a single log; a missing log is the same as both flags false."""
    if log is None:
        return DateStatus.NONE
    if log.morning_completed and log.evening_completed:
        return DateStatus.BOTH
    if log.morning_completed:
        return DateStatus.MORNING
    if log.evening_completed:
        return DateStatus.EVENING
    return DateStatus.NONE


class StatusIndex:
    """date → DateStatus lookup built once from the log collection."""

    def __init__(self, logs: Iterable[RoutineLog]):
        # Later logs for the same date replace earlier ones
        self._by_date: dict[str, DateStatus] = {}
        for log in logs:
            self._by_date[log.date.isoformat()] = status_of(log)

    def status_for(self, day: date) -> DateStatus:
        return self._by_date.get(day.isoformat(), DateStatus.NONE)

    def as_dict(self) -> dict[str, DateStatus]:
        return dict(sorted(self._by_date.items()))

    def dates(self) -> list[date]:
        return sorted(date.fromisoformat(d) for d in self._by_date)


def current_streak(index: StatusIndex, today: date, lookback_days: int = STREAK_LOOKBACK_DAYS) -> int:
    """
    Today counts if either routine is done; every earlier day needs both.
    Walks back from yesterday and stops at the first day that isn't fully
    completed, looking at most lookback_days - 1 days into the past.
    """
    streak = 0
    if index.status_for(today) is not DateStatus.NONE:
        streak += 1

    check = today - timedelta(days=1)
    for _ in range(1, lookback_days):
        if index.status_for(check) is not DateStatus.BOTH:
            break
        streak += 1
        check -= timedelta(days=1)
    return streak


def longest_streak(index: StatusIndex, today: date, lookback_days: int = STREAK_LOOKBACK_DAYS) -> int:
    """Longest run of consecutive fully completed days up to today (never below the current streak)."""
    longest = run = 0
    prev = None
    for day in index.dates():
        if day > today:
            break
        if index.status_for(day) is not DateStatus.BOTH:
            run = 0
            prev = None
            continue
        run = run + 1 if prev is not None and (day - prev).days == 1 else 1
        prev = day
        longest = max(longest, run)
    return max(longest, current_streak(index, today, lookback_days))


def evaluate(logs: Iterable[RoutineLog], today: date, lookback_days: int = STREAK_LOOKBACK_DAYS) -> StreakSummary:
    index = StatusIndex(logs)
    return StreakSummary(
        status_by_date=index.as_dict(),
        current_streak=current_streak(index, today, lookback_days),
        longest_streak=longest_streak(index, today, lookback_days),
    )


def completion_summary(logs: Iterable[RoutineLog], start: date | None = None,
                       end: date | None = None) -> CompletionSummary:
    """Days per completion type within an optional inclusive date range."""
    summary = CompletionSummary()
    index = StatusIndex(logs)
    for day in index.dates():
        if (start and day < start) or (end and day > end):
            continue
        status = index.status_for(day)
        if status is DateStatus.NONE:
            continue
        setattr(summary, status.value, getattr(summary, status.value) + 1)
        summary.active_days += 1
    return summary


def month_statuses(index: StatusIndex, year: int, month: int) -> dict[str, DateStatus]:
    """Status for every day of the month, missing days included as none."""
    _, days = calendar.monthrange(year, month)
    return {
        date(year, month, d).isoformat(): index.status_for(date(year, month, d))
        for d in range(1, days + 1)
    }
