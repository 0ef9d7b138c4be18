"""
Calendar-aware accuracy statistics.

Day boundaries are always worked out on the requested zone's local calendar
and only then converted to UTC for the store query.
"""

from __future__ import annotations

import logging
import os
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from errors import InvalidDate, InvalidTimezone, InvalidWindow
from repository import QuestionStore, Statistic

logger = logging.getLogger("math-quiz.stats")

DEFAULT_TIMEZONE = os.getenv("QUIZ_TIMEZONE", "UTC")

_ONE_MICROSECOND = timedelta(microseconds=1)


def resolve_timezone(name: str | None) -> ZoneInfo:
    name = (name or DEFAULT_TIMEZONE).strip()
    if not name:
        raise InvalidTimezone("timezone must not be empty")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidTimezone(f"unknown timezone {name!r}") from e


@dataclass(frozen=True)
class DailyStatistic:
    date: date
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        return Statistic(self.correct, self.total).accuracy


@dataclass
class RollingStatistics:
    scores: List[DailyStatistic] = field(default_factory=list)
    overall: Statistic = Statistic(0, 0)


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """First and last instant of a local calendar day, as UTC."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    next_start = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), next_start.astimezone(UTC) - _ONE_MICROSECOND


class StatisticsEngine:
    def __init__(self, store: QuestionStore):
        self.store = store

    def local_today(self, tz: ZoneInfo) -> date:
        return self.store.now().astimezone(tz).date()

    def range_statistics(self, start: datetime | None = None, end: datetime | None = None) -> Statistic:
        return self.store.get_statistics(start, end)

    def today_statistics(self, timezone: str | None = None) -> Statistic:
        tz = resolve_timezone(timezone)
        now = self.store.now()
        day_start, _ = day_bounds(now.astimezone(tz).date(), tz)
        return self.store.get_statistics(day_start, now)

    def daily_statistics(
        self, year: int, month: int, day: int, timezone: str | None = None
    ) -> DailyStatistic:
        tz = resolve_timezone(timezone)
        try:
            d = date(year, month, day)
        except (TypeError, ValueError) as e:
            raise InvalidDate(f"{year}-{month}-{day} is not a calendar date") from e
        return self._day(d, tz)

    def _day(self, d: date, tz: ZoneInfo) -> DailyStatistic:
        try:
            start, end = day_bounds(d, tz)
        except OverflowError as e:
            raise InvalidDate(f"{d} in {tz.key} is outside the supported range") from e
        stat = self.store.get_statistics(start, end)
        return DailyStatistic(d, stat.correct, stat.total)

    def rolling_n_day_statistics(self, n: int, timezone: str | None = None) -> RollingStatistics:
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise InvalidWindow(f"window length must be a non-negative integer, got {n!r}")
        tz = resolve_timezone(timezone)
        today = self.local_today(tz)
        logger.debug("Rolling %s-day window ending %s (%s)", n, today, tz.key)

        scores = [self._day(today - timedelta(days=offset), tz) for offset in range(n - 1, -1, -1)]
        overall = Statistic(0, 0)
        for s in scores:
            overall = overall + Statistic(s.correct, s.total)
        return RollingStatistics(scores=scores, overall=overall)

    def all_daily_statistics(self, timezone: str | None = None) -> List[DailyStatistic]:
        """One entry per local day that has at least one answer, oldest first."""
        tz = resolve_timezone(timezone)
        # the whole history, not just the default lookback
        log = self.store.answer_log(datetime.min.replace(tzinfo=UTC), self.store.now())

        buckets: "OrderedDict[date, list[int]]" = OrderedDict()
        for answered_at, correct in log:
            counts = buckets.setdefault(answered_at.astimezone(tz).date(), [0, 0])
            counts[0] += int(correct)
            counts[1] += 1
        return [DailyStatistic(d, c, t) for d, (c, t) in buckets.items()]
